from __future__ import annotations

from pathlib import Path

from cra.core.result import Err, Ok
from cra.services.release.model import (
    ChartInfo,
    ChartRelease,
    ReferencePoint,
    ReleaseSummary,
)
from cra.services.release.outputs import summary_outputs, write_outputs


def _release(path: str, outcome: str) -> ChartRelease:
    name = path.rsplit("/", 1)[-1]
    return ChartRelease(
        chart=ChartInfo(path=path, name=name, version="1.0.0"),
        tag=f"{name}-1.0.0",
        archive=Path(f"/tmp/{name}-1.0.0.tgz"),
        outcome=outcome,  # type: ignore[arg-type]
    )


def test_summary_outputs() -> None:
    summary = ReleaseSummary(
        reference=ReferencePoint(ref="app-0.9.0", kind="tag"),
        charts_root="charts",
        changed_charts=("charts/app", "charts/lib"),
        releases=(_release("charts/app", "created"), _release("charts/lib", "skipped")),
    )

    assert summary_outputs(summary) == {
        "changed_charts": "charts/app,charts/lib",
        "released_charts": "charts/app",
        "chart_version": "app-0.9.0",
    }
    assert summary.skipped_charts == ("charts/lib",)


def test_nothing_changed_outputs_are_empty() -> None:
    summary = ReleaseSummary(
        reference=ReferencePoint(ref="abc123", kind="root_commit"), charts_root="charts"
    )

    outputs = summary_outputs(summary)

    assert summary.nothing_changed is True
    assert outputs["changed_charts"] == ""
    assert outputs["released_charts"] == ""


def test_write_outputs(tmp_path: Path) -> None:
    github_output = tmp_path / "gh_output"
    github_output.write_text("previous=1\n", encoding="utf-8")
    out_dir = tmp_path / "out"

    result = write_outputs(
        {"changed_charts": "charts/app", "chart_version": "v1"},
        output_dir=out_dir,
        github_output=github_output,
    )

    assert result == Ok(None)
    assert (out_dir / "changed_charts.txt").read_text() == "changed_charts=charts/app\n"
    assert (out_dir / "chart_version.txt").read_text() == "chart_version=v1\n"
    assert github_output.read_text() == "previous=1\nchanged_charts=charts/app\nchart_version=v1\n"


def test_write_outputs_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x", encoding="utf-8")

    result = write_outputs({"changed_charts": ""}, output_dir=blocker / "out")

    assert isinstance(result, Err)
    assert result.error.kind == "output_failed"
