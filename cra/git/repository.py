"""Git repository abstraction.

Read-only queries the release run needs from the checkout: the work tree
root, the latest release tag, the root commit and the changed paths since a
baseline. All operations return Result types.

Usage:
    repo = Repository(Path("."))

    match repo.latest_tag("HEAD~"):
        case Ok(tag):
            print(f"Last release: {tag}")
        case Err(e):
            print(f"No tag: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from cra.core.result import Err, Ok, Result
from cra.platform.process import ProcessError
from cra.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "DiffEntry",
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class DiffEntry:
    """A single line of ``git diff --name-status`` output.

    Attributes:
        status: Status letter(s), e.g. "M", "A", "D", "R100"
        path: Current path (destination for renames and copies)
        old_path: Source path for renames and copies, None otherwise
    """

    status: str
    path: str
    old_path: str | None = None

    @property
    def is_rename(self) -> bool:
        return self.status.startswith(("R", "C"))

    @property
    def paths(self) -> tuple[str, ...]:
        """Every path this entry touches; renames touch both sides."""
        if self.old_path is None:
            return (self.path,)
        return (self.old_path, self.path)


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Path to the work tree (any directory inside it works)
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def toplevel(self) -> Result[Path, GitError]:
        """Absolute path of the work tree root."""
        result = self._run(["rev-parse", "--show-toplevel"])
        match result:
            case Err(e):
                return Err(self._error("rev-parse --show-toplevel", e, "not a git repository"))
            case Ok(stdout):
                return Ok(Path(stdout.strip()))

    def fetch_tags(self) -> Result[None, GitError]:
        result = self._run(["fetch", "--tags"])
        match result:
            case Err(e):
                return Err(self._error("fetch --tags", e, "fetch failed"))
            case Ok(_):
                return Ok(None)

    def latest_tag(self, rev: str) -> Result[str, GitError]:
        """Nearest tag reachable from ``rev`` (``git describe --tags --abbrev=0``)."""
        result = self._run(["describe", "--tags", "--abbrev=0", rev])
        match result:
            case Err(e):
                return Err(self._error("describe --tags", e, "no tag found"))
            case Ok(stdout):
                tag = stdout.strip()
                if not tag:
                    return Err(GitError(command="describe --tags", message="no tag found"))
                return Ok(tag)

    def root_commit(self, rev: str = "HEAD") -> Result[str, GitError]:
        """Parentless commit reached by walking first parents from ``rev``."""
        result = self._run(["rev-list", "--max-parents=0", "--first-parent", rev])
        match result:
            case Err(e):
                return Err(self._error("rev-list --max-parents=0", e, "rev-list failed"))
            case Ok(stdout):
                commits = [ln.strip() for ln in stdout.splitlines() if ln.strip()]
                if not commits:
                    return Err(
                        GitError(command="rev-list --max-parents=0", message="no root commit")
                    )
                return Ok(commits[0])

    def diff_name_status(self, base: str, pathspec: str) -> Result[list[DiffEntry], GitError]:
        """Changes between ``base`` and the work tree, limited to ``pathspec``."""
        result = self._run(
            [
                "-c",
                "core.quotePath=off",
                "diff",
                "--find-renames",
                "--name-status",
                base,
                "--",
                pathspec,
            ]
        )
        match result:
            case Err(e):
                return Err(self._error("diff --name-status", e, "diff failed"))
            case Ok(stdout):
                return Ok(self._parse_name_status(stdout))

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in {"fetch", "pull"} else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    def _error(self, command: str, error: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=error.stderr.strip() or fallback,
            returncode=error.returncode,
        )

    def _parse_name_status(self, output: str) -> list[DiffEntry]:
        """Parse ``--name-status`` lines: ``M\\tpath`` or ``R100\\told\\tnew``."""
        entries: list[DiffEntry] = []
        for line in output.splitlines():
            if not line.strip():
                continue
            fields = line.split("\t")
            status = fields[0].strip()
            if len(fields) >= 3 and status.startswith(("R", "C")):
                entries.append(DiffEntry(status=status, path=fields[2], old_path=fields[1]))
            elif len(fields) >= 2:
                entries.append(DiffEntry(status=status, path=fields[1]))
        return entries
