"""Release run orchestration.

One run, strictly sequential:

1. resolve the changed charts (nothing changed -> empty outputs, success)
2. install helm if needed, package every changed chart
3. log in to the OCI registry (unless skipped)
4. per chart: query the release, create it when missing, push, upload
5. write outputs

Rerunning after a partial failure is safe: releases are looked up by tag
before anything is created.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from cra.core.config import HelmSettings, ReleaseConfig
from cra.core.result import Err, Ok, Result
from cra.output.console import ConsoleProtocol, Style
from cra.services.release import gh
from cra.services.release.chart import load_chart
from cra.services.release.errors import ReleaseError
from cra.services.release.helm import HelmClient
from cra.services.release.model import (
    ChangeSet,
    ChartInfo,
    ChartRelease,
    ReleaseSummary,
)
from cra.services.release.outputs import summary_outputs, write_outputs
from cra.services.release.resolver import (
    ChangeSetResolver,
    derive_release_tag,
    tag_prefix,
)
from cra.services.release.timeouts import HELM_DOWNLOAD_TIMEOUT_SECONDS
from cra.tools.helm_installer import HelmInstaller
from cra.tools.http import HttpClient, RealHttpClient


class _Resolver(Protocol):
    def resolve(self, explicit_root: str | None) -> Result[ChangeSet, ReleaseError]: ...


def install_helm(
    settings: HelmSettings,
    *,
    console: ConsoleProtocol,
    http: HttpClient | None = None,
) -> Result[Path, ReleaseError]:
    """Ensure the helm binary exists in the configured install directory."""
    installer = HelmInstaller(
        http=http or RealHttpClient(timeout=HELM_DOWNLOAD_TIMEOUT_SECONDS),
        console=console,
    )
    result = installer.ensure(settings)
    if isinstance(result, Err):
        e = result.error
        return Err(ReleaseError(kind=e.kind, message=e.message, hint=e.hint))
    return result


class ReleaseService:
    def __init__(
        self,
        *,
        config: ReleaseConfig,
        repo_root: Path,
        env: Mapping[str, str],
        console: ConsoleProtocol,
        resolver: _Resolver | None = None,
        http: HttpClient | None = None,
    ) -> None:
        self._config = config
        self._root = repo_root
        self._env = env
        self._console = console
        self._resolver = resolver or ChangeSetResolver(repo_root=repo_root, console=console)
        self._http = http

    def run(self) -> Result[ReleaseSummary, ReleaseError]:
        changes = self._resolver.resolve(self._config.charts_dir)
        if isinstance(changes, Err):
            return changes

        change_set = changes.value
        summary = ReleaseSummary(
            reference=change_set.reference,
            charts_root=change_set.charts_root,
            changed_charts=change_set.chart_dirs,
        )
        if summary.nothing_changed:
            self._console.info("Nothing to do. No chart changes detected.")
            return self._finish(summary)

        self._console.print(f"Changed charts: {', '.join(summary.changed_charts)}")

        charts: list[ChartInfo] = []
        for chart_dir in change_set.chart_dirs:
            chart = load_chart(self._root, chart_dir)
            if isinstance(chart, Err):
                return chart
            charts.append(chart.value)

        installed = install_helm(self._config.helm, console=self._console, http=self._http)
        if isinstance(installed, Err):
            return installed

        helm = HelmClient(
            settings=self._config.helm,
            repo_root=self._root,
            env=self._env,
            console=self._console,
            dry_run=self._config.dry_run,
        )

        packaged: list[tuple[ChartInfo, Path]] = []
        for chart in charts:
            archive = helm.package(chart, update_dependencies=self._config.update_dependencies)
            if isinstance(archive, Err):
                return archive
            packaged.append((chart, archive.value))

        if not self._config.skip_registry_login:
            login = self._login(helm)
            if isinstance(login, Err):
                return login

        releases: list[ChartRelease] = []
        for chart, archive in packaged:
            release = self._release_chart(helm, chart, archive)
            if isinstance(release, Err):
                return release
            releases.append(release.value)

        summary = ReleaseSummary(
            reference=summary.reference,
            charts_root=summary.charts_root,
            changed_charts=summary.changed_charts,
            releases=tuple(releases),
        )
        return self._finish(summary)

    def _login(self, helm: HelmClient) -> Result[None, ReleaseError]:
        username = self._config.oci_username
        password = self._config.registry_password
        if username is None or password is None:
            return Err(
                ReleaseError(kind="config_invalid", message="registry credentials are missing")
            )
        self._console.info(f"Logging in to {self._config.oci_registry}...")
        return helm.registry_login(
            registry=self._config.oci_registry, username=username, password=password
        )

    def _release_chart(
        self, helm: HelmClient, chart: ChartInfo, archive: Path
    ) -> Result[ChartRelease, ReleaseError]:
        cfg = self._config
        tag = derive_release_tag(chart.name, chart.version, cfg.naming_pattern)
        remote = f"oci://{cfg.oci_registry}/{tag_prefix(chart.name, cfg.naming_pattern)}"

        if cfg.skip_release_creation:
            pushed = helm.push(archive, remote=remote)
            if isinstance(pushed, Err):
                return pushed
            self._console.success(f"{chart.path}: pushed {archive.name} to {remote}")
            return Ok(ChartRelease(chart=chart, tag=tag, archive=archive, outcome="pushed"))

        exists = gh.release_exists(tag, repo_root=self._root, env=self._env, dry_run=cfg.dry_run)
        if isinstance(exists, Err):
            return exists

        if exists.value and cfg.skip_existing:
            self._console.info(f"Release already exists. Skipping {tag}...")
            return Ok(ChartRelease(chart=chart, tag=tag, archive=archive, outcome="skipped"))

        if not exists.value:
            self._console.info(f"Creating release {tag}...")
            created = gh.create_release(
                tag,
                notes=chart.description,
                latest=cfg.mark_as_latest,
                repo_root=self._root,
                env=self._env,
                console=self._console,
                dry_run=cfg.dry_run,
            )
            if isinstance(created, Err):
                return created
        else:
            self._console.print(f"Release {tag} exists, updating its chart archive", Style.DIM)

        pushed = helm.push(archive, remote=remote)
        if isinstance(pushed, Err):
            return pushed

        uploaded = gh.upload_release_asset(
            tag,
            archive,
            repo_root=self._root,
            env=self._env,
            console=self._console,
            dry_run=cfg.dry_run,
        )
        if isinstance(uploaded, Err):
            return uploaded

        self._console.success(f"{chart.path}: released {tag}")
        return Ok(
            ChartRelease(
                chart=chart,
                tag=tag,
                archive=archive,
                outcome="updated" if exists.value else "created",
            )
        )

    def _finish(self, summary: ReleaseSummary) -> Result[ReleaseSummary, ReleaseError]:
        return publish_summary(
            summary, output_dir=self._config.output_dir or self._root, env=self._env
        )


def publish_summary(
    summary: ReleaseSummary, *, output_dir: Path, env: Mapping[str, str]
) -> Result[ReleaseSummary, ReleaseError]:
    github_output = env.get("GITHUB_OUTPUT")
    written = write_outputs(
        summary_outputs(summary),
        output_dir=output_dir,
        github_output=Path(github_output) if github_output else None,
    )
    if isinstance(written, Err):
        return written
    return Ok(summary)


def detect_changed_charts(
    *,
    resolver: _Resolver,
    charts_dir: str | None,
    output_dir: Path,
    env: Mapping[str, str],
    console: ConsoleProtocol,
) -> Result[ReleaseSummary, ReleaseError]:
    """Resolve changed charts and write outputs; nothing is packaged or published."""
    changes = resolver.resolve(charts_dir)
    if isinstance(changes, Err):
        return changes

    summary = ReleaseSummary(
        reference=changes.value.reference,
        charts_root=changes.value.charts_root,
        changed_charts=changes.value.chart_dirs,
    )
    if summary.nothing_changed:
        console.info("Nothing to do. No chart changes detected.")
    else:
        for chart_dir in summary.changed_charts:
            console.print(chart_dir)
    return publish_summary(summary, output_dir=output_dir, env=env)
