from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

ReferenceKind = Literal["tag", "root_commit"]
ReleaseOutcome = Literal["created", "updated", "pushed", "skipped"]


@dataclass(frozen=True, slots=True)
class ReferencePoint:
    """Diff baseline: the previous release tag, or the root commit."""

    ref: str
    kind: ReferenceKind


@dataclass(frozen=True, slots=True)
class ChartInfo:
    """Chart directory and the fields read from its Chart.yaml.

    Attributes:
        path: Chart directory relative to the repository root (POSIX form)
    """

    path: str
    name: str
    version: str
    description: str = ""

    @property
    def archive_name(self) -> str:
        """File name ``helm package`` gives the chart archive."""
        return f"{self.name}-{self.version}.tgz"


@dataclass(frozen=True, slots=True)
class ChartRelease:
    chart: ChartInfo
    tag: str
    archive: Path
    outcome: ReleaseOutcome


@dataclass(frozen=True, slots=True)
class ReleaseSummary:
    """Everything one run decided and did."""

    reference: ReferencePoint
    charts_root: str
    changed_charts: tuple[str, ...] = ()
    releases: tuple[ChartRelease, ...] = field(default_factory=tuple)

    @property
    def nothing_changed(self) -> bool:
        return not self.changed_charts

    @property
    def released_charts(self) -> tuple[str, ...]:
        return tuple(r.chart.path for r in self.releases if r.outcome != "skipped")

    @property
    def skipped_charts(self) -> tuple[str, ...]:
        return tuple(r.chart.path for r in self.releases if r.outcome == "skipped")


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """Charts that changed since the reference point, in first-seen order."""

    reference: ReferencePoint
    charts_root: str
    chart_dirs: tuple[str, ...] = ()
