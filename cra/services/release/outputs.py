"""Run outputs as ``key=value`` text for the calling workflow.

Each key goes to ``<output_dir>/<key>.txt``; when ``GITHUB_OUTPUT`` is set the
same lines are appended there so later workflow steps can read them.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from cra.core.result import Err, Ok, Result
from cra.services.release.errors import ReleaseError
from cra.services.release.model import ReleaseSummary


def summary_outputs(summary: ReleaseSummary) -> dict[str, str]:
    return {
        "changed_charts": ",".join(summary.changed_charts),
        "released_charts": ",".join(summary.released_charts),
        "chart_version": summary.reference.ref,
    }


def write_outputs(
    outputs: Mapping[str, str],
    *,
    output_dir: Path,
    github_output: Path | None = None,
) -> Result[None, ReleaseError]:
    lines = [f"{key}={value}" for key, value in outputs.items()]
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        for key, line in zip(outputs, lines):
            (output_dir / f"{key}.txt").write_text(line + "\n", encoding="utf-8")
        if github_output is not None:
            with open(github_output, "a", encoding="utf-8") as f:
                f.write("".join(line + "\n" for line in lines))
    except OSError as e:
        return Err(
            ReleaseError(
                kind="output_failed",
                message=f"cannot write outputs: {e}",
                hint=str(output_dir),
            )
        )
    return Ok(None)
