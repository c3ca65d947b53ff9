"""Platform and architecture detection.

Helm publishes one release archive per ``<os>-<arch>`` pair; this module maps
the running interpreter onto that naming.
"""

from __future__ import annotations

import platform as _platform
import sys as _sys
from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache

__all__ = [
    "Platform",
    "Arch",
    "PlatformInfo",
    "detect",
    "detect_arch",
    "detect_platform",
]


class Platform(Enum):
    """Operating system platform."""

    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def helm_os(self) -> str | None:
        """Operating system component of helm release archive names."""
        return {
            Platform.LINUX: "linux",
            Platform.MACOS: "darwin",
        }.get(self)


class Arch(Enum):
    """CPU architecture."""

    X64 = auto()
    ARM64 = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def helm_arch(self) -> str | None:
        return {
            Arch.X64: "amd64",
            Arch.ARM64: "arm64",
        }.get(self)


@dataclass(frozen=True, slots=True)
class PlatformInfo:
    """Detected platform information."""

    platform: Platform
    arch: Arch

    @property
    def helm_target(self) -> str | None:
        """Helm archive target such as ``linux-amd64``; None if unsupported."""
        os_name = self.platform.helm_os
        arch = self.arch.helm_arch
        if os_name is None or arch is None:
            return None
        return f"{os_name}-{arch}"

    def __str__(self) -> str:
        return f"{self.platform}-{self.arch}"


@lru_cache(maxsize=1)
def detect_platform() -> Platform:
    """Detect the current operating system (cached)."""
    system = _sys.platform.lower()
    if system.startswith("linux"):
        return Platform.LINUX
    if system.startswith("darwin"):
        return Platform.MACOS
    if system.startswith(("win32", "cygwin", "msys")):
        return Platform.WINDOWS
    return Platform.UNKNOWN


@lru_cache(maxsize=1)
def detect_arch() -> Arch:
    """Detect the current CPU architecture (cached)."""
    machine = _platform.machine().lower()
    if machine in ("x86_64", "amd64"):
        return Arch.X64
    if machine in ("aarch64", "arm64"):
        return Arch.ARM64
    return Arch.UNKNOWN


def detect() -> PlatformInfo:
    return PlatformInfo(platform=detect_platform(), arch=detect_arch())
