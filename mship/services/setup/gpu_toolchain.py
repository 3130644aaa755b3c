# SPDX-License-Identifier: MIT
"""Vulkan build toolchain presence check and install.

Only a fixed allowlist of package-manager commands is ever executed, and
the install runs only after explicit confirmation. Distros without a known
package set get a manual step instead.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path

from mship.core.result import Err, Ok, Result
from mship.output.console import ConsoleProtocol
from mship.platform.detection import LinuxDistro, Platform, PlatformInfo
from mship.platform.process import ProcessError
from mship.platform.process import run as run_process
from mship.platform.process import run_silent

__all__ = ["ToolchainPlan", "install_toolchain", "is_toolchain_present", "vulkan_toolchain_plan"]

_CHECK_TIMEOUT_SECONDS = 30.0
_INSTALL_TIMEOUT_SECONDS = 30 * 60.0


@dataclass(frozen=True, slots=True)
class ToolchainPlan:
    packages: tuple[str, ...]
    check: tuple[str, ...]
    install: tuple[str, ...]

    @property
    def check_argv(self) -> list[str]:
        return [*self.check, *self.packages]

    @property
    def install_argv(self) -> list[str]:
        return [*self.install, *self.packages]

    @property
    def display(self) -> str:
        return shlex.join(self.install_argv)


_PLANS: dict[LinuxDistro, ToolchainPlan] = {
    LinuxDistro.ARCH: ToolchainPlan(
        packages=("vulkan-headers", "vulkan-icd-loader", "shaderc"),
        check=("pacman", "-Q"),
        install=("sudo", "pacman", "-S", "--needed"),
    ),
    LinuxDistro.DEBIAN: ToolchainPlan(
        packages=("libvulkan-dev", "glslc"),
        check=("dpkg", "-s"),
        install=("sudo", "apt", "install", "-y"),
    ),
    LinuxDistro.FEDORA: ToolchainPlan(
        packages=("vulkan-headers", "vulkan-loader-devel", "glslc"),
        check=("rpm", "-q"),
        install=("sudo", "dnf", "install", "-y"),
    ),
    LinuxDistro.SUSE: ToolchainPlan(
        packages=("vulkan-devel", "shaderc"),
        check=("rpm", "-q"),
        install=("sudo", "zypper", "install", "-y"),
    ),
}


def vulkan_toolchain_plan(host: PlatformInfo) -> ToolchainPlan | None:
    """The package set for this host, or None where none is needed or known.

    macOS uses Metal and needs nothing; see ``needs_toolchain``.
    """
    if host.platform != Platform.LINUX:
        return None
    return _PLANS.get(host.distro)


def needs_toolchain(host: PlatformInfo) -> bool:
    return host.platform == Platform.LINUX


def is_toolchain_present(plan: ToolchainPlan) -> bool:
    result = run_process(plan.check_argv, cwd=Path.cwd(), timeout=_CHECK_TIMEOUT_SECONDS)
    return isinstance(result, Ok)


def install_toolchain(plan: ToolchainPlan, *, console: ConsoleProtocol) -> Result[None, ProcessError]:
    argv = plan.install_argv
    console.command(argv)
    result = run_silent(argv, cwd=Path.cwd(), timeout=_INSTALL_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return result
    if not is_toolchain_present(plan):
        return Err(
            ProcessError(
                command=tuple(plan.check_argv),
                returncode=1,
                stdout="",
                stderr="packages still missing after install",
            )
        )
    return Ok(None)
