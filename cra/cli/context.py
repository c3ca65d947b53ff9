from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import typer

from cra.core.config import is_github_actions
from cra.core.errors import ErrorCode
from cra.core.result import Err
from cra.git.repository import Repository
from cra.output.console import ConsoleProtocol, RichConsole
from cra.platform.detection import PlatformInfo, detect


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Process-level inputs, read once per command."""

    env: dict[str, str]
    platform: PlatformInfo
    console: ConsoleProtocol
    cwd: Path = field(default_factory=Path.cwd)

    @property
    def github_actions(self) -> bool:
        return is_github_actions(self.env)


def build_context() -> CLIContext:
    env = dict(os.environ)
    return CLIContext(
        env=env,
        platform=detect(),
        console=RichConsole(github_actions=is_github_actions(env)),
    )


def resolve_repo_root(ctx: CLIContext) -> Path:
    """Work tree root of the current checkout, or exit with ENV_ERROR."""
    result = Repository(ctx.cwd).toplevel()
    if isinstance(result, Err):
        ctx.console.error(f"not inside a git repository: {result.error.message}")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    return result.value

