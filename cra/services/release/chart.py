"""Chart descriptor (Chart.yaml) reading."""

from __future__ import annotations

from pathlib import Path

import yaml

from cra.core.result import Err, Ok, Result
from cra.core.structured import as_str_dict, get_scalar_str, get_str
from cra.services.release.errors import ReleaseError
from cra.services.release.model import ChartInfo

CHART_DESCRIPTOR = "Chart.yaml"

# Prefer the C-accelerated YAML loader when available.
_YamlLoader = getattr(yaml, "CSafeLoader", yaml.SafeLoader)


def is_chart_dir(path: Path) -> bool:
    """A chart directory directly contains Chart.yaml."""
    return (path / CHART_DESCRIPTOR).is_file()


def load_chart(repo_root: Path, chart_dir: str) -> Result[ChartInfo, ReleaseError]:
    descriptor = repo_root / chart_dir / CHART_DESCRIPTOR
    try:
        text = descriptor.read_text(encoding="utf-8")
    except OSError as e:
        return Err(
            ReleaseError(
                kind="invalid_chart",
                message=f"cannot read {chart_dir}/{CHART_DESCRIPTOR}: {e.strerror or e}",
            )
        )

    try:
        obj: object = yaml.load(text, Loader=_YamlLoader)
    except yaml.YAMLError as e:
        return Err(
            ReleaseError(
                kind="invalid_chart",
                message=f"invalid YAML in {chart_dir}/{CHART_DESCRIPTOR}",
                hint=str(e),
            )
        )

    data = as_str_dict(obj)
    if data is None:
        return Err(
            ReleaseError(
                kind="invalid_chart",
                message=f"{chart_dir}/{CHART_DESCRIPTOR} must be a mapping",
            )
        )

    name = get_str(data, "name")
    version = get_scalar_str(data, "version")
    if name is None or version is None:
        return Err(
            ReleaseError(
                kind="invalid_chart",
                message=f"{chart_dir}/{CHART_DESCRIPTOR} must define 'name' and 'version'",
            )
        )

    return Ok(
        ChartInfo(
            path=chart_dir,
            name=name,
            version=version,
            description=get_str(data, "description") or "",
        )
    )
