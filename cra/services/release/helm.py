"""Helm invocations: package, registry login, push.

Every call runs the binary from ``HelmSettings.install_dir`` with helm's
cache/config/data homes pinned under that directory.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from cra.core.config import HelmSettings
from cra.core.result import Err, Ok, Result
from cra.output.console import ConsoleProtocol, Style
from cra.platform.process import run as run_process
from cra.services.release.errors import ReleaseError
from cra.services.release.model import ChartInfo


class HelmClient:
    def __init__(
        self,
        *,
        settings: HelmSettings,
        repo_root: Path,
        env: Mapping[str, str],
        console: ConsoleProtocol,
        dry_run: bool = False,
    ) -> None:
        self._settings = settings
        self._repo_root = repo_root
        self._env = settings.helm_env(env)
        self._console = console
        self._dry_run = dry_run

    def _cmd(self, *args: str) -> list[str]:
        return [str(self._settings.binary), *args]

    def package(
        self, chart: ChartInfo, *, update_dependencies: bool
    ) -> Result[Path, ReleaseError]:
        """Package ``chart`` into ``<install_dir>/package/<chart dir>``."""
        destination = self._settings.package_dir / chart.path
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="helm_failed",
                    message=f"cannot create package directory: {destination}",
                    hint=str(e),
                )
            )

        cmd = self._cmd("package", chart.path, "-d", str(destination))
        if update_dependencies:
            cmd.append("-u")

        self._console.info(f"Packaging chart '{chart.path}'...")
        result = run_process(cmd, cwd=self._repo_root, env=self._env)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="helm_failed",
                    message=f"helm package failed for '{chart.path}'",
                    hint=result.error.detail,
                )
            )

        archive = destination / chart.archive_name
        if not archive.is_file():
            return Err(
                ReleaseError(
                    kind="helm_failed",
                    message=f"expected chart archive not found: {archive}",
                    hint="check that Chart.yaml name/version match the packaged chart",
                )
            )
        return Ok(archive)

    def registry_login(
        self, *, registry: str, username: str, password: str
    ) -> Result[None, ReleaseError]:
        """``helm registry login`` with the password passed on stdin."""
        host = registry.split("/", 1)[0]
        if self._dry_run:
            self._console.print(
                f"dry run: helm registry login -u {username} --password-stdin {host}", Style.DIM
            )
            return Ok(None)

        result = run_process(
            self._cmd("registry", "login", "-u", username, "--password-stdin", host),
            cwd=self._repo_root,
            env=self._env,
            input_text=password,
        )
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="helm_failed",
                    message=f"helm registry login to '{host}' failed",
                    hint=result.error.detail,
                )
            )
        return Ok(None)

    def push(self, archive: Path, *, remote: str) -> Result[None, ReleaseError]:
        """Push ``archive`` to ``remote`` (an ``oci://`` reference)."""
        if self._dry_run:
            self._console.print(f"dry run: helm push {archive.name} {remote}", Style.DIM)
            return Ok(None)

        result = run_process(
            self._cmd("push", str(archive), remote), cwd=self._repo_root, env=self._env
        )
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="helm_failed",
                    message=f"helm push of {archive.name} to {remote} failed",
                    hint=result.error.detail,
                )
            )
        return Ok(None)
