"""Tests for cra.platform.detection module."""

from __future__ import annotations

import pytest

from cra.platform import detection
from cra.platform.detection import Arch, Platform, PlatformInfo


@pytest.fixture(autouse=True)
def _clear_caches() -> None:
    detection.detect_platform.cache_clear()
    detection.detect_arch.cache_clear()


class TestHelmTarget:
    @pytest.mark.parametrize(
        ("platform", "arch", "expected"),
        [
            (Platform.LINUX, Arch.X64, "linux-amd64"),
            (Platform.LINUX, Arch.ARM64, "linux-arm64"),
            (Platform.MACOS, Arch.X64, "darwin-amd64"),
            (Platform.MACOS, Arch.ARM64, "darwin-arm64"),
            (Platform.WINDOWS, Arch.X64, None),
            (Platform.LINUX, Arch.UNKNOWN, None),
        ],
    )
    def test_helm_target(self, platform: Platform, arch: Arch, expected: str | None) -> None:
        assert PlatformInfo(platform=platform, arch=arch).helm_target == expected

    def test_str(self) -> None:
        assert str(PlatformInfo(platform=Platform.LINUX, arch=Arch.X64)) == "linux-x64"


class TestDetect:
    def test_detect_platform_linux(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(detection._sys, "platform", "linux")
        assert detection.detect_platform() == Platform.LINUX

    def test_detect_platform_darwin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(detection._sys, "platform", "darwin")
        assert detection.detect_platform() == Platform.MACOS

    def test_detect_platform_unknown(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(detection._sys, "platform", "sunos5")
        assert detection.detect_platform() == Platform.UNKNOWN

    @pytest.mark.parametrize(
        ("machine", "expected"),
        [
            ("x86_64", Arch.X64),
            ("AMD64", Arch.X64),
            ("aarch64", Arch.ARM64),
            ("riscv64", Arch.UNKNOWN),
        ],
    )
    def test_detect_arch(
        self, monkeypatch: pytest.MonkeyPatch, machine: str, expected: Arch
    ) -> None:
        monkeypatch.setattr(detection._platform, "machine", lambda: machine)
        assert detection.detect_arch() == expected
