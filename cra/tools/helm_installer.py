"""Helm binary installation.

Downloads the official helm release archive for the detected platform,
verifies it against the published sha256 digest and extracts only the
``helm`` executable into the configured install directory. An archive that
fails verification is deleted and never extracted.
"""

from __future__ import annotations

import hashlib
import os
import re
import shutil
import tarfile
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from cra.core.config import HelmSettings
from cra.core.result import Err, Ok, Result
from cra.output.console import ConsoleProtocol, Style
from cra.tools.http import HttpClient

__all__ = ["HELM_DOWNLOAD_BASE", "HelmInstallError", "HelmInstaller", "sha256_file"]

HELM_DOWNLOAD_BASE = "https://get.helm.sh"

_SHA256_RE = re.compile(r"^[0-9a-f]{64}$")


@dataclass(frozen=True, slots=True)
class HelmInstallError:
    kind: Literal["download_failed", "checksum_mismatch", "install_failed"]
    message: str
    hint: str | None = None


def sha256_file(path: Path) -> str:
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def parse_sha256sum(text: str) -> str | None:
    """First token of a ``sha256sum`` line, if it is a hex digest."""
    tokens = text.split()
    if not tokens:
        return None
    digest = tokens[0].lower()
    return digest if _SHA256_RE.match(digest) else None


class HelmInstaller:
    """Installs a pinned helm release into ``HelmSettings.install_dir``.

    Usage:
        installer = HelmInstaller(http=RealHttpClient(), console=console)
        match installer.ensure(settings):
            case Ok(binary):
                print(f"helm at {binary}")
            case Err(e):
                print(e.message)
    """

    def __init__(self, *, http: HttpClient, console: ConsoleProtocol) -> None:
        self._http = http
        self._console = console

    @staticmethod
    def archive_url(settings: HelmSettings) -> str:
        return f"{HELM_DOWNLOAD_BASE}/helm-{settings.version}-{settings.target}.tar.gz"

    def ensure(self, settings: HelmSettings) -> Result[Path, HelmInstallError]:
        """Return the helm binary, installing it first when missing."""
        binary = settings.binary
        if binary.is_file() and os.access(binary, os.X_OK):
            self._console.print(
                f"Helm is found in the install directory {settings.install_dir}", Style.DIM
            )
            return Ok(binary)

        self._console.info(f"Installing Helm ({settings.version}) to {settings.install_dir}...")
        try:
            settings.install_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Err(
                HelmInstallError(
                    kind="install_failed",
                    message=f"cannot create install directory: {settings.install_dir}",
                    hint=str(e),
                )
            )

        url = self.archive_url(settings)
        checksum = self._http.get_text(f"{url}.sha256sum")
        if isinstance(checksum, Err):
            return Err(
                HelmInstallError(
                    kind="download_failed",
                    message="failed to download helm checksum",
                    hint=str(checksum.error),
                )
            )
        expected = parse_sha256sum(checksum.value)
        if expected is None:
            return Err(
                HelmInstallError(
                    kind="checksum_mismatch",
                    message="published helm checksum is malformed",
                    hint=f"{url}.sha256sum",
                )
            )

        archive = settings.install_dir / f"helm-{settings.version}-{settings.target}.tar.gz"
        downloaded = self._http.download(url, archive)
        if isinstance(downloaded, Err):
            archive.unlink(missing_ok=True)
            return Err(
                HelmInstallError(
                    kind="download_failed",
                    message="failed to download helm",
                    hint=str(downloaded.error),
                )
            )

        try:
            actual = sha256_file(archive)
            if actual != expected:
                return Err(
                    HelmInstallError(
                        kind="checksum_mismatch",
                        message="Aborting, helm checksum is invalid",
                        hint=f"expected {expected}, got {actual}",
                    )
                )
            self._console.print("helm checksum verified", Style.DIM)
            return self._extract(archive, settings)
        finally:
            archive.unlink(missing_ok=True)

    def _extract(self, archive: Path, settings: HelmSettings) -> Result[Path, HelmInstallError]:
        member_name = f"{settings.target}/helm"
        binary = settings.binary
        try:
            with tarfile.open(archive, "r:gz") as tar:
                try:
                    member = tar.getmember(member_name)
                except KeyError:
                    return Err(
                        HelmInstallError(
                            kind="install_failed",
                            message=f"'{member_name}' not found in {archive.name}",
                        )
                    )
                if not member.isreg():
                    return Err(
                        HelmInstallError(
                            kind="install_failed",
                            message=f"'{member_name}' is not a regular file",
                        )
                    )
                src = tar.extractfile(member)
                if src is None:
                    return Err(
                        HelmInstallError(
                            kind="install_failed", message=f"cannot read {member_name}"
                        )
                    )
                with src, open(binary, "wb") as dst:
                    shutil.copyfileobj(src, dst)
            binary.chmod(0o755)
        except tarfile.TarError as e:
            binary.unlink(missing_ok=True)
            return Err(
                HelmInstallError(kind="install_failed", message=f"Tar extraction failed: {e}")
            )
        except OSError as e:
            binary.unlink(missing_ok=True)
            return Err(HelmInstallError(kind="install_failed", message=f"IO error: {e}"))

        self._console.success(f"helm {settings.version} installed")
        return Ok(binary)
