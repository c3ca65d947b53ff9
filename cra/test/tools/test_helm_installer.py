"""Tests for tools/helm_installer.py."""

from __future__ import annotations

import hashlib
import io
import os
import tarfile
from pathlib import Path

from cra.core.config import HelmSettings
from cra.core.result import Err, Ok
from cra.output.console import MockConsole
from cra.tools.helm_installer import HelmInstaller, parse_sha256sum, sha256_file
from cra.tools.http import HttpError, MockHttpClient

VERSION = "v3.13.2"
TARGET = "linux-amd64"
URL = f"https://get.helm.sh/helm-{VERSION}-{TARGET}.tar.gz"


def _helm_archive(*, member: str = f"{TARGET}/helm", content: bytes = b"#!/bin/sh\n") -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for name, data in ((member, content), (f"{TARGET}/LICENSE", b"Apache-2.0")):
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


def _settings(tmp_path: Path) -> HelmSettings:
    return HelmSettings(version=VERSION, target=TARGET, install_dir=tmp_path / "helm")


def _client(archive: bytes, *, digest: str | None = None) -> MockHttpClient:
    client = MockHttpClient()
    checksum = digest or hashlib.sha256(archive).hexdigest()
    client.set_text(f"{URL}.sha256sum", f"{checksum}  helm-{VERSION}-{TARGET}.tar.gz\n")
    client.set_download(URL, archive)
    return client


class TestChecksumHelpers:
    def test_parse_sha256sum(self) -> None:
        digest = "a" * 64
        assert parse_sha256sum(f"{digest}  helm.tar.gz\n") == digest
        assert parse_sha256sum(digest.upper()) == digest

    def test_parse_sha256sum_rejects_garbage(self) -> None:
        assert parse_sha256sum("") is None
        assert parse_sha256sum("<html>Not Found</html>") is None

    def test_sha256_file(self, tmp_path: Path) -> None:
        path = tmp_path / "f"
        path.write_bytes(b"abc")
        assert sha256_file(path) == hashlib.sha256(b"abc").hexdigest()


class TestHelmInstaller:
    def test_archive_url(self, tmp_path: Path) -> None:
        assert HelmInstaller.archive_url(_settings(tmp_path)) == URL

    def test_installs_verified_binary(self, tmp_path: Path) -> None:
        archive = _helm_archive(content=b"helm-binary")
        client = _client(archive)
        console = MockConsole()
        settings = _settings(tmp_path)

        result = HelmInstaller(http=client, console=console).ensure(settings)

        assert result == Ok(settings.binary)
        assert settings.binary.read_bytes() == b"helm-binary"
        assert os.access(settings.binary, os.X_OK)
        assert not (settings.install_dir / "LICENSE").exists()
        assert not (settings.install_dir / f"helm-{VERSION}-{TARGET}.tar.gz").exists()
        assert console.find(f"helm {VERSION} installed")
        assert client.calls == [("get_text", f"{URL}.sha256sum"), ("download", URL)]

    def test_reuses_existing_binary(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path)
        settings.install_dir.mkdir(parents=True)
        settings.binary.write_bytes(b"existing")
        settings.binary.chmod(0o755)
        client = MockHttpClient()
        console = MockConsole()

        result = HelmInstaller(http=client, console=console).ensure(settings)

        assert result == Ok(settings.binary)
        assert client.calls == []
        assert console.find("Helm is found in the install directory")

    def test_checksum_mismatch_deletes_archive(self, tmp_path: Path) -> None:
        client = _client(_helm_archive(), digest="0" * 64)
        settings = _settings(tmp_path)

        result = HelmInstaller(http=client, console=MockConsole()).ensure(settings)

        assert isinstance(result, Err)
        assert result.error.kind == "checksum_mismatch"
        assert result.error.message == "Aborting, helm checksum is invalid"
        assert not settings.binary.exists()
        assert list(settings.install_dir.iterdir()) == []

    def test_malformed_checksum_file(self, tmp_path: Path) -> None:
        client = MockHttpClient()
        client.set_text(f"{URL}.sha256sum", "Not Found")

        result = HelmInstaller(http=client, console=MockConsole()).ensure(_settings(tmp_path))

        assert isinstance(result, Err)
        assert result.error.kind == "checksum_mismatch"
        assert ("download", URL) not in client.calls

    def test_checksum_download_failure(self, tmp_path: Path) -> None:
        client = MockHttpClient()
        client.set_text(f"{URL}.sha256sum", HttpError(url=URL, status=0, message="offline"))

        result = HelmInstaller(http=client, console=MockConsole()).ensure(_settings(tmp_path))

        assert isinstance(result, Err)
        assert result.error.kind == "download_failed"

    def test_archive_download_failure(self, tmp_path: Path) -> None:
        archive = _helm_archive()
        client = _client(archive)
        client.set_download(URL, HttpError(url=URL, status=502, message="Bad Gateway"))
        settings = _settings(tmp_path)

        result = HelmInstaller(http=client, console=MockConsole()).ensure(settings)

        assert isinstance(result, Err)
        assert result.error.kind == "download_failed"
        assert "Bad Gateway" in (result.error.hint or "")
        assert not settings.binary.exists()

    def test_archive_without_helm_binary(self, tmp_path: Path) -> None:
        client = _client(_helm_archive(member="other/helm"))
        settings = _settings(tmp_path)

        result = HelmInstaller(http=client, console=MockConsole()).ensure(settings)

        assert isinstance(result, Err)
        assert result.error.kind == "install_failed"
        assert not settings.binary.exists()
