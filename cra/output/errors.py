"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cra.core.errors import ErrorCode
from cra.output.console import Style

if TYPE_CHECKING:
    from cra.core.config import ConfigError
    from cra.output.console import ConsoleProtocol
    from cra.services.release.errors import ReleaseError

__all__ = ["print_error", "release_error_exit_code"]


def print_error(error: ReleaseError | ConfigError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error.kind:
        case "config_invalid" | "invalid_chart":
            return int(ErrorCode.USER_ERROR)
        case "git_failed":
            return int(ErrorCode.ENV_ERROR)
        case "helm_failed" | "gh_failed" | "install_failed":
            return int(ErrorCode.TOOL_ERROR)
        case "download_failed":
            return int(ErrorCode.NETWORK_ERROR)
        case "checksum_mismatch":
            return int(ErrorCode.INTEGRITY_ERROR)
        case "output_failed":
            return int(ErrorCode.IO_ERROR)
    # Fallback for exhaustiveness
    return int(ErrorCode.TOOL_ERROR)
