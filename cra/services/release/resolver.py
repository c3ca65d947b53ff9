"""Changed-chart detection and release tag derivation.

Turns "what changed since the last release" into the concrete, ordered list of
chart directories a run has to package and publish:

    VCS history -> changed paths -> chart roots -> valid chart directories

A change anywhere in a chart's subtree (templates, values, nested subcharts)
collapses onto the chart's own directory, so each chart is reported once.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from cra.core.config import CHART_NAME_PLACEHOLDER
from cra.core.result import Err, Ok, Result
from cra.git.repository import Repository
from cra.output.console import ConsoleProtocol, Style
from cra.services.release.chart import is_chart_dir
from cra.services.release.errors import ReleaseError
from cra.services.release.model import ChangeSet, ReferencePoint

CONVENTIONAL_ROOTS = ("helm", "chart", "charts")


def tag_prefix(chart_name: str, naming_pattern: str | None = None) -> str:
    """Release name without version; also the OCI repository path segment."""
    if naming_pattern:
        return naming_pattern.replace(CHART_NAME_PLACEHOLDER, chart_name)
    return chart_name


def derive_release_tag(
    chart_name: str, chart_version: str, naming_pattern: str | None = None
) -> str:
    """``<prefix>-<version>``, where prefix is the chart name or the filled pattern.

    >>> derive_release_tag("app", "1.2.3", "{chartName}-chart")
    'app-chart-1.2.3'
    """
    return f"{tag_prefix(chart_name, naming_pattern)}-{chart_version}"


def _parts(path: str) -> tuple[str, ...]:
    return tuple(p for p in PurePosixPath(path).parts if p not in {".", ""})


def path_depth(path: str) -> int:
    """Number of real components; ``.`` and empty components do not count."""
    return len(_parts(path))


def is_under(path: str, root: str) -> bool:
    """Component-wise prefix test, so ``./charts`` and ``charts`` are the same root."""
    root_parts = _parts(root)
    return _parts(path)[: len(root_parts)] == root_parts


def collapse_to_candidates(paths: Iterable[str], charts_root: str) -> list[str]:
    """Truncate paths to the directory directly below the root, deduplicated.

    ``charts/app/templates/deployment.yaml`` becomes ``charts/app``; first-seen
    order is kept. Files directly in the root are dropped.
    """
    depth = path_depth(charts_root) + 1
    seen: dict[str, None] = {}
    for path in paths:
        if not is_under(path, charts_root):
            continue
        parts = _parts(path)
        # A diff lists files, so the chart directory needs at least one more level.
        if len(parts) <= depth:
            continue
        seen.setdefault("/".join(parts[:depth]), None)
    return list(seen)


class ChangeSetResolver:
    """Computes the changed chart directories of a checkout.

    Stateless; each method performs read-only git queries at most.
    """

    def __init__(self, *, repo_root: Path, console: ConsoleProtocol) -> None:
        self._root = repo_root
        self._repo = Repository(repo_root)
        self._console = console

    def resolve_reference_point(self) -> Result[ReferencePoint, ReleaseError]:
        """Latest tag reachable from ``HEAD~``, else the root commit."""
        fetched = self._repo.fetch_tags()
        if isinstance(fetched, Err):
            self._console.warning(
                f"could not fetch tags, using local tags: {fetched.error.message}"
            )

        tag = self._repo.latest_tag("HEAD~")
        if isinstance(tag, Ok):
            return Ok(ReferencePoint(ref=tag.value, kind="tag"))

        self._console.print("No previous tag found, falling back to the root commit", Style.DIM)
        root = self._repo.root_commit("HEAD")
        if isinstance(root, Err):
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message="cannot determine a reference point (no tag, no root commit)",
                    hint=root.error.message,
                )
            )
        return Ok(ReferencePoint(ref=root.value, kind="root_commit"))

    def resolve_charts_root(self, explicit_root: str | None) -> Result[str, ReleaseError]:
        """The explicit root verbatim, else exactly one conventional directory."""
        if explicit_root:
            return Ok(explicit_root)

        found = [name for name in CONVENTIONAL_ROOTS if (self._root / name).is_dir()]
        if len(found) > 1:
            return Err(
                ReleaseError(
                    kind="config_invalid",
                    message=(
                        "can't use several default directories: "
                        f"{', '.join(found)}"
                    ),
                    hint="pass --charts-dir to choose one",
                )
            )
        if not found:
            return Err(
                ReleaseError(
                    kind="config_invalid",
                    message="no charts directory found (looked for helm, chart, charts)",
                    hint="pass --charts-dir",
                )
            )
        return Ok(found[0])

    def list_changed_chart_directories(
        self, charts_root: str, reference: ReferencePoint
    ) -> Result[tuple[str, ...], ReleaseError]:
        diff = self._repo.diff_name_status(reference.ref, charts_root)
        if isinstance(diff, Err):
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message=f"git diff against '{reference.ref}' failed",
                    hint=diff.error.message,
                )
            )

        changed = [path for entry in diff.value for path in entry.paths]
        changed = [path for path in changed if is_under(path, charts_root)]
        if not changed:
            return Ok(())

        # Single-chart layout: the root itself is the chart.
        if is_chart_dir(self._root / charts_root):
            return Ok((charts_root,))

        candidates = collapse_to_candidates(changed, charts_root)
        return Ok(tuple(c for c in candidates if is_chart_dir(self._root / c)))

    def resolve(self, explicit_root: str | None) -> Result[ChangeSet, ReleaseError]:
        root = self.resolve_charts_root(explicit_root)
        if isinstance(root, Err):
            return root

        self._console.info("Looking up latest tag...")
        reference = self.resolve_reference_point()
        if isinstance(reference, Err):
            return reference

        self._console.info(f"Discovering changed charts since '{reference.value.ref}'...")
        charts = self.list_changed_chart_directories(root.value, reference.value)
        if isinstance(charts, Err):
            return charts

        return Ok(
            ChangeSet(reference=reference.value, charts_root=root.value, chart_dirs=charts.value)
        )
