from __future__ import annotations

from pathlib import Path

import typer

from cra.cli.commands._helpers import exit_on_config_error, exit_on_release_error
from cra.cli.context import build_context, resolve_repo_root
from cra.core.config import (
    DEFAULT_HELM_VERSION,
    HelmSettings,
    ReleaseConfig,
    normalize_charts_dir,
    validate_naming_pattern,
)
from cra.output.console import Style
from cra.services.release.resolver import ChangeSetResolver
from cra.services.release.service import (
    ReleaseService,
    detect_changed_charts,
    install_helm,
)


def release(
    oci_registry: str | None = typer.Option(
        None, "--oci-registry", "-r", help="OCI registry, e.g. ghcr.io/owner (required)."
    ),
    oci_username: str | None = typer.Option(
        None, "--oci-username", "-u", help="OCI registry user (required unless login is skipped)."
    ),
    charts_dir: str | None = typer.Option(
        None, "--charts-dir", "-d", help="Charts directory (default: one of helm, chart, charts)."
    ),
    naming_pattern: str | None = typer.Option(
        None,
        "--naming-pattern",
        "-p",
        help="Release and repository naming, must contain {chartName} (e.g. '{chartName}-chart').",
    ),
    helm_version: str = typer.Option(
        DEFAULT_HELM_VERSION, "--helm-version", "-v", help="Helm version to install."
    ),
    install_dir: Path | None = typer.Option(
        None, "--install-dir", "-n", help="Helm install directory (default: tool cache)."
    ),
    skip_dependency_update: bool = typer.Option(
        False, "--skip-dependency-update", help="Do not run 'helm package -u'."
    ),
    skip_existing: bool = typer.Option(
        False, "--skip-existing", help="Skip charts whose release already exists."
    ),
    skip_registry_login: bool = typer.Option(
        False, "--skip-registry-login", help="Do not log in to the OCI registry."
    ),
    mark_as_latest: bool = typer.Option(
        True, "--mark-as-latest/--no-mark-as-latest", help="Mark created releases as latest."
    ),
    skip_release_creation: bool = typer.Option(
        False, "--skip-release-creation", help="Only push to the registry, no GitHub release."
    ),
    dry_run: bool | None = typer.Option(
        None,
        "--dry-run/--no-dry-run",
        help="Log registry and release writes instead of running them "
        "(default: dry run outside GitHub Actions).",
    ),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", help="Where key=value output files go (default: repository root)."
    ),
) -> None:
    """Package changed charts, push them and publish GitHub releases."""
    ctx = build_context()

    helm = exit_on_config_error(
        HelmSettings.create(
            version=helm_version, install_dir=install_dir, platform=ctx.platform, env=ctx.env
        ),
        ctx,
    )
    config = exit_on_config_error(
        ReleaseConfig.create(
            helm=helm,
            env=ctx.env,
            oci_registry=oci_registry,
            oci_username=oci_username,
            charts_dir=charts_dir,
            naming_pattern=naming_pattern,
            skip_dependency_update=skip_dependency_update,
            skip_existing=skip_existing,
            skip_registry_login=skip_registry_login,
            mark_as_latest=mark_as_latest,
            skip_release_creation=skip_release_creation,
            dry_run=dry_run,
            output_dir=output_dir,
        ),
        ctx,
    )

    repo_root = resolve_repo_root(ctx)
    if config.dry_run:
        ctx.console.warning("dry run: registry and release writes are only logged")

    service = ReleaseService(config=config, repo_root=repo_root, env=ctx.env, console=ctx.console)
    summary = exit_on_release_error(service.run(), ctx)

    for item in summary.releases:
        ctx.console.print(f"{item.chart.path}: {item.tag} ({item.outcome})", Style.DIM)
    if summary.releases:
        ctx.console.success(f"{len(summary.released_charts)} chart(s) released")


def changed(
    charts_dir: str | None = typer.Option(
        None, "--charts-dir", "-d", help="Charts directory (default: one of helm, chart, charts)."
    ),
    naming_pattern: str | None = typer.Option(
        None, "--naming-pattern", "-p", help="Validated like 'release' does."
    ),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", help="Where key=value output files go (default: repository root)."
    ),
) -> None:
    """List charts changed since the last release; publishes nothing."""
    ctx = build_context()
    exit_on_config_error(validate_naming_pattern(naming_pattern), ctx)

    repo_root = resolve_repo_root(ctx)
    exit_on_release_error(
        detect_changed_charts(
            resolver=ChangeSetResolver(repo_root=repo_root, console=ctx.console),
            charts_dir=normalize_charts_dir(charts_dir),
            output_dir=(output_dir or repo_root).expanduser().resolve(),
            env=ctx.env,
            console=ctx.console,
        ),
        ctx,
    )


def install(
    helm_version: str = typer.Option(
        DEFAULT_HELM_VERSION, "--helm-version", "-v", help="Helm version to install."
    ),
    install_dir: Path | None = typer.Option(
        None, "--install-dir", "-n", help="Helm install directory (default: tool cache)."
    ),
) -> None:
    """Install helm only; no chart is released."""
    ctx = build_context()
    helm = exit_on_config_error(
        HelmSettings.create(
            version=helm_version, install_dir=install_dir, platform=ctx.platform, env=ctx.env
        ),
        ctx,
    )

    binary = exit_on_release_error(install_helm(helm, console=ctx.console), ctx)
    ctx.console.success(f"helm ready: {binary}")
