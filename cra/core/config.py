"""Typed run configuration and its validation.

All inputs of a release run are validated here, before any git query or
network call is made. The process environment is read once by the caller and
passed in as a mapping.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from .result import Err, Ok, Result

if TYPE_CHECKING:
    from cra.platform.detection import PlatformInfo

__all__ = [
    "CHART_NAME_PLACEHOLDER",
    "DEFAULT_HELM_VERSION",
    "ConfigError",
    "HelmSettings",
    "ReleaseConfig",
    "is_github_actions",
    "normalize_charts_dir",
    "validate_naming_pattern",
]

DEFAULT_HELM_VERSION = "v3.13.2"
CHART_NAME_PLACEHOLDER = "{chartName}"

REGISTRY_TOKEN_ENV = "OCI_REGISTRY_TOKEN"
GITHUB_TOKEN_ENVS = ("GH_TOKEN", "GITHUB_TOKEN")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Invalid or missing run input."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class HelmSettings:
    """Where helm lives and which release of it to use.

    Attributes:
        version: Helm release tag, e.g. "v3.13.2"
        target: Archive target, e.g. "linux-amd64"
        install_dir: Directory holding the helm binary and its state dirs
    """

    version: str
    target: str
    install_dir: Path

    @property
    def binary(self) -> Path:
        return self.install_dir / "helm"

    @property
    def package_dir(self) -> Path:
        """Root under which packaged chart archives are assembled."""
        return self.install_dir / "package"

    def helm_env(self, base: Mapping[str, str]) -> dict[str, str]:
        """Environment for helm invocations with state kept under install_dir."""
        env = dict(base)
        env["HELM_CACHE_HOME"] = str(self.install_dir / ".cache")
        env["HELM_CONFIG_HOME"] = str(self.install_dir / ".config")
        env["HELM_DATA_HOME"] = str(self.install_dir / ".share")
        env["PATH"] = f"{self.install_dir}:{base.get('PATH', '')}"
        return env

    @classmethod
    def create(
        cls,
        *,
        version: str | None,
        install_dir: Path | None,
        platform: PlatformInfo,
        env: Mapping[str, str],
    ) -> Result[HelmSettings, ConfigError]:
        resolved_version = (version or "").strip() or DEFAULT_HELM_VERSION

        target = platform.helm_target
        if target is None:
            return Err(
                ConfigError(
                    f"unsupported platform for helm: {platform}",
                    hint="helm binaries are published for linux and darwin on amd64/arm64",
                )
            )

        if install_dir is None:
            cache_root = env.get("RUNNER_TOOL_CACHE") or "/tmp"
            install_dir = Path(cache_root) / "cra" / target

        # Absolute, since helm runs with the repository root as cwd.
        return Ok(
            cls(
                version=resolved_version,
                target=target,
                install_dir=install_dir.expanduser().resolve(),
            )
        )


def validate_naming_pattern(pattern: str | None) -> Result[str | None, ConfigError]:
    """Accept an empty/absent pattern, or one containing ``{chartName}``."""
    if pattern is None or not pattern.strip():
        return Ok(None)
    if CHART_NAME_PLACEHOLDER not in pattern:
        return Err(
            ConfigError(
                f"naming pattern must contain '{CHART_NAME_PLACEHOLDER}': {pattern!r}",
                hint=f"example: '{CHART_NAME_PLACEHOLDER}-chart'",
            )
        )
    return Ok(pattern.strip())


def normalize_charts_dir(charts_dir: str | None) -> str | None:
    """Normalize a user supplied charts directory to a relative POSIX path.

    ``./charts/`` and ``charts`` name the same directory; ``.`` means the
    repository root itself.
    """
    if charts_dir is None or not charts_dir.strip():
        return None
    parts = [p for p in PurePosixPath(charts_dir.strip().replace("\\", "/")).parts if p != "."]
    if not parts:
        return "."
    return PurePosixPath(*parts).as_posix()


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes"}


def is_github_actions(env: Mapping[str, str]) -> bool:
    """True when running as a GitHub Actions step."""
    return _truthy(env.get("GITHUB_ACTIONS"))


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Validated inputs for one release run."""

    helm: HelmSettings
    oci_registry: str
    oci_username: str | None = None
    registry_password: str | None = None
    charts_dir: str | None = None
    naming_pattern: str | None = None
    skip_dependency_update: bool = False
    skip_existing: bool = False
    skip_registry_login: bool = False
    mark_as_latest: bool = True
    skip_release_creation: bool = False
    dry_run: bool = False
    output_dir: Path | None = None

    @property
    def update_dependencies(self) -> bool:
        return not self.skip_dependency_update

    @classmethod
    def create(
        cls,
        *,
        helm: HelmSettings,
        env: Mapping[str, str],
        oci_registry: str | None,
        oci_username: str | None = None,
        charts_dir: str | None = None,
        naming_pattern: str | None = None,
        skip_dependency_update: bool = False,
        skip_existing: bool = False,
        skip_registry_login: bool = False,
        mark_as_latest: bool = True,
        skip_release_creation: bool = False,
        dry_run: bool | None = None,
        output_dir: Path | None = None,
    ) -> Result[ReleaseConfig, ConfigError]:
        """Validate raw inputs.

        Args:
            helm: Resolved helm settings
            env: Process environment (secrets and GitHub Actions markers)
            dry_run: None means "dry run unless running inside GitHub Actions"

        Returns:
            Ok(ReleaseConfig), or Err(ConfigError) naming the first problem
        """
        pattern = validate_naming_pattern(naming_pattern)
        if isinstance(pattern, Err):
            return pattern

        registry = (oci_registry or "").strip().removeprefix("oci://").rstrip("/")
        if not registry:
            return Err(ConfigError("'--oci-registry' is required"))

        username = (oci_username or "").strip() or None
        password = env.get(REGISTRY_TOKEN_ENV) or None
        if not skip_registry_login:
            if username is None:
                return Err(
                    ConfigError(
                        "'--oci-username' is required",
                        hint="pass --skip-registry-login when already authenticated",
                    )
                )
            if password is None:
                return Err(
                    ConfigError(
                        f"environment variable {REGISTRY_TOKEN_ENV} must be set",
                        hint="pass --skip-registry-login when already authenticated",
                    )
                )

        if output_dir is not None:
            output_dir = output_dir.expanduser().resolve()

        if dry_run is None:
            dry_run = not is_github_actions(env)

        if not skip_release_creation and not dry_run:
            if not any(env.get(name) for name in GITHUB_TOKEN_ENVS):
                return Err(
                    ConfigError(
                        "a GitHub token is required to create releases",
                        hint="set GH_TOKEN (or GITHUB_TOKEN), or pass --skip-release-creation",
                    )
                )

        return Ok(
            cls(
                helm=helm,
                oci_registry=registry,
                oci_username=username,
                registry_password=password,
                charts_dir=normalize_charts_dir(charts_dir),
                naming_pattern=pattern.value,
                skip_dependency_update=skip_dependency_update,
                skip_existing=skip_existing,
                skip_registry_login=skip_registry_login,
                mark_as_latest=mark_as_latest,
                skip_release_creation=skip_release_creation,
                dry_run=dry_run,
                output_dir=output_dir,
            )
        )
