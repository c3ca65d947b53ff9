"""Git operations used to detect changed charts.

Usage:
    from cra.git import Repository

    repo = Repository(Path("."))
    entries = repo.diff_name_status("v1.0.0", "charts")
"""

from cra.git.repository import DiffEntry, GitError, Repository

__all__ = [
    "DiffEntry",
    "GitError",
    "Repository",
]
