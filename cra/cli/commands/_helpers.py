"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import typer

from cra.core.config import ConfigError
from cra.core.errors import ErrorCode
from cra.core.result import Err, Result
from cra.output.errors import print_error, release_error_exit_code
from cra.services.release.errors import ReleaseError

if TYPE_CHECKING:
    from cra.cli.context import CLIContext

T = TypeVar("T")


def exit_on_config_error(result: Result[T, ConfigError], ctx: CLIContext) -> T:
    """Unwrap a configuration result, or exit with USER_ERROR."""
    if isinstance(result, Err):
        print_error(result.error, ctx.console)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    return result.value


def exit_on_release_error(result: Result[T, ReleaseError], ctx: CLIContext) -> T:
    """Unwrap a release result, or exit with the code mapped from its kind."""
    if isinstance(result, Err):
        print_error(result.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(result.error))
    return result.value
