"""Host detection: OS, CPU architecture, Linux distro family and GPU.

The installer needs (OS, arch, GPU) to pick a prebuilt variant; the setup
wizard needs the distro family to pick a package manager for the Vulkan
toolchain. Everything except ``detect_gpu`` is cached for the process.
"""

from __future__ import annotations

import platform as _platform
import shutil
import sys
from dataclasses import dataclass
from enum import Enum, auto
from functools import lru_cache
from pathlib import Path

__all__ = [
    "Platform",
    "Arch",
    "LinuxDistro",
    "PlatformInfo",
    "detect",
    "detect_gpu",
    "is_macos",
    "parse_arch",
    "parse_os_release",
]


class Platform(Enum):
    LINUX = auto()
    MACOS = auto()
    WINDOWS = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()


class Arch(Enum):
    X64 = auto()
    ARM64 = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return {Arch.X64: "x86_64", Arch.ARM64: "arm64"}.get(self, "unknown")


class LinuxDistro(Enum):
    """Distribution family, as far as package management goes."""

    DEBIAN = auto()
    FEDORA = auto()
    ARCH = auto()
    SUSE = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()


# os-release ID / ID_LIKE values per family
_DISTRO_IDS: dict[LinuxDistro, frozenset[str]] = {
    LinuxDistro.DEBIAN: frozenset({"debian", "ubuntu", "linuxmint", "pop"}),
    LinuxDistro.FEDORA: frozenset({"fedora", "rhel", "centos", "rocky", "almalinux"}),
    LinuxDistro.ARCH: frozenset({"arch", "manjaro", "endeavouros", "cachyos"}),
    LinuxDistro.SUSE: frozenset({"suse", "opensuse", "opensuse-leap", "opensuse-tumbleweed", "sles"}),
}


@dataclass(frozen=True, slots=True)
class PlatformInfo:
    platform: Platform
    arch: Arch
    distro: LinuxDistro

    @property
    def is_linux(self) -> bool:
        return self.platform == Platform.LINUX

    @property
    def is_macos(self) -> bool:
        return self.platform == Platform.MACOS

    def __str__(self) -> str:
        if self.is_linux and self.distro != LinuxDistro.UNKNOWN:
            return f"{self.platform}-{self.distro}-{self.arch}"
        return f"{self.platform}-{self.arch}"


def parse_arch(machine: str) -> Arch:
    machine = machine.lower()
    if machine in ("x86_64", "amd64"):
        return Arch.X64
    if machine in ("aarch64", "arm64"):
        return Arch.ARM64
    return Arch.UNKNOWN


def parse_os_release(content: str) -> LinuxDistro:
    """Classify an ``/etc/os-release`` body by its ID and ID_LIKE fields."""
    fields: dict[str, list[str]] = {}
    for line in content.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            fields[key.strip()] = value.strip().strip("\"'").lower().split()

    # The distro's own ID wins over what it claims to be like
    for candidate in [*fields.get("ID", []), *fields.get("ID_LIKE", [])]:
        for family, known in _DISTRO_IDS.items():
            if candidate in known:
                return family
    return LinuxDistro.UNKNOWN


@lru_cache(maxsize=1)
def _detect_platform() -> Platform:
    if sys.platform.startswith("linux"):
        return Platform.LINUX
    if sys.platform == "darwin":
        return Platform.MACOS
    if sys.platform.startswith(("win32", "cygwin", "msys")):
        return Platform.WINDOWS
    return Platform.UNKNOWN


def _detect_distro() -> LinuxDistro:
    if _detect_platform() != Platform.LINUX:
        return LinuxDistro.UNKNOWN
    try:
        content = Path("/etc/os-release").read_text(encoding="utf-8")
    except OSError:
        return LinuxDistro.UNKNOWN
    return parse_os_release(content)


@lru_cache(maxsize=1)
def detect() -> PlatformInfo:
    return PlatformInfo(
        platform=_detect_platform(),
        arch=parse_arch(_platform.machine()),
        distro=_detect_distro(),
    )


def detect_gpu() -> bool:
    """Whether the Vulkan variant can run here: ``vulkaninfo`` is on PATH.

    Not cached, since the setup wizard may install the toolchain mid-run.
    """
    return shutil.which("vulkaninfo") is not None


def is_macos() -> bool:
    return _detect_platform() == Platform.MACOS
