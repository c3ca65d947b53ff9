from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "config_invalid",
    "git_failed",
    "invalid_chart",
    "helm_failed",
    "gh_failed",
    "download_failed",
    "checksum_mismatch",
    "install_failed",
    "output_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
