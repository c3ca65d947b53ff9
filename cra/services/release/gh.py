from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from time import sleep

from cra.core.result import Err, Ok, Result
from cra.core.structured import as_obj_list, as_str_dict, get_str
from cra.output.console import ConsoleProtocol, Style
from cra.platform.process import ProcessError
from cra.platform.process import run as run_process
from cra.services.release.errors import ReleaseError
from cra.services.release.timeouts import (
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
)

RELEASE_LIST_LIMIT = 1000


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "tls handshake timeout",
        "network is unreachable",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    if error.returncode == -1 and "timed out" in text:
        return True
    return any(marker in text for marker in markers)


def run_gh_read(
    *,
    repo_root: Path,
    env: Mapping[str, str] | None,
    cmd: list[str],
    message: str,
    timeout: float = GH_TIMEOUT_SECONDS,
    retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
) -> Result[str, ReleaseError]:
    attempts = max(1, retry_attempts)
    for attempt in range(attempts):
        result = run_process(cmd, cwd=repo_root, env=env, timeout=timeout)
        if isinstance(result, Ok):
            return result

        error = result.error
        if attempt < attempts - 1 and _is_transient_gh_error(error):
            sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
            continue

        return Err(ReleaseError(kind="gh_failed", message=message, hint=error.detail))

    return Err(ReleaseError(kind="gh_failed", message=message))


def run_gh_write(
    *,
    repo_root: Path,
    env: Mapping[str, str] | None,
    cmd: list[str],
    message: str,
    console: ConsoleProtocol,
    dry_run: bool,
) -> Result[None, ReleaseError]:
    # Writes are never retried.
    if dry_run:
        console.print(f"dry run: {' '.join(cmd)}", Style.DIM)
        return Ok(None)

    result = run_process(cmd, cwd=repo_root, env=env)
    if isinstance(result, Err):
        return Err(ReleaseError(kind="gh_failed", message=message, hint=result.error.detail))
    return Ok(None)


def list_release_tags(
    *,
    repo_root: Path,
    env: Mapping[str, str] | None,
    dry_run: bool = False,
) -> Result[list[str], ReleaseError]:
    """Tag names of the repository's releases (none in dry-run mode)."""
    if dry_run:
        return Ok([])

    result = run_gh_read(
        repo_root=repo_root,
        env=env,
        cmd=["gh", "release", "list", "--limit", str(RELEASE_LIST_LIMIT), "--json", "tagName"],
        message="failed to list GitHub releases",
    )
    if isinstance(result, Err):
        return result

    try:
        obj: object = json.loads(result.value or "[]")
    except json.JSONDecodeError as e:
        return Err(
            ReleaseError(kind="gh_failed", message=f"invalid JSON from gh release list: {e}")
        )

    raw = as_obj_list(obj)
    if raw is None:
        return Err(
            ReleaseError(kind="gh_failed", message="unexpected payload from gh release list")
        )

    tags: list[str] = []
    for item in raw:
        d = as_str_dict(item)
        if d is None:
            continue
        tag = get_str(d, "tagName")
        if tag is not None:
            tags.append(tag)
    return Ok(tags)


def release_exists(
    tag: str,
    *,
    repo_root: Path,
    env: Mapping[str, str] | None,
    dry_run: bool = False,
) -> Result[bool, ReleaseError]:
    tags = list_release_tags(repo_root=repo_root, env=env, dry_run=dry_run)
    if isinstance(tags, Err):
        return tags
    return Ok(tag in tags.value)


def create_release(
    tag: str,
    *,
    notes: str,
    latest: bool,
    repo_root: Path,
    env: Mapping[str, str] | None,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[None, ReleaseError]:
    cmd = [
        "gh",
        "release",
        "create",
        tag,
        "--title",
        tag,
        "--notes",
        notes,
        "--latest" if latest else "--latest=false",
    ]
    return run_gh_write(
        repo_root=repo_root,
        env=env,
        cmd=cmd,
        message=f"failed to create GitHub release '{tag}'",
        console=console,
        dry_run=dry_run,
    )


def upload_release_asset(
    tag: str,
    archive: Path,
    *,
    repo_root: Path,
    env: Mapping[str, str] | None,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[None, ReleaseError]:
    """Attach ``archive`` to release ``tag``, replacing an asset of the same name."""
    return run_gh_write(
        repo_root=repo_root,
        env=env,
        cmd=["gh", "release", "upload", tag, str(archive), "--clobber"],
        message=f"failed to upload {archive.name} to release '{tag}'",
        console=console,
        dry_run=dry_run,
    )
