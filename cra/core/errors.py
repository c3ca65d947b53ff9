"""Error codes for CLI exit status.

Each failure class of a release run maps to a stable process exit code so the
calling workflow can tell a misconfiguration from a failed upload.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success (including "nothing changed")
    - 1: Configuration error (bad input, missing credential, charts dir)
    - 2: Environment error (not a git checkout, git query failed)
    - 3: Tool error (helm or gh invocation failed)
    - 4: Network error (download failed)
    - 5: I/O error (outputs could not be written)
    - 6: Integrity error (downloaded binary failed checksum)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    TOOL_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    INTEGRITY_ERROR = 6

    def __str__(self) -> str:
        """Return human-readable name."""
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
