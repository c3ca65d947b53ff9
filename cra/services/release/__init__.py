"""Changed-chart detection and the release run built on it."""

from cra.services.release.errors import ReleaseError
from cra.services.release.model import (
    ChangeSet,
    ChartInfo,
    ChartRelease,
    ReferencePoint,
    ReleaseSummary,
)
from cra.services.release.resolver import ChangeSetResolver, derive_release_tag
from cra.services.release.service import ReleaseService, detect_changed_charts

__all__ = [
    "ChangeSet",
    "ChangeSetResolver",
    "ChartInfo",
    "ChartRelease",
    "ReferencePoint",
    "ReleaseError",
    "ReleaseService",
    "ReleaseSummary",
    "derive_release_tag",
    "detect_changed_charts",
]
