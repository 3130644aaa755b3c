"""Remove the service, stop the daemon, and optionally delete config and data.

The binary itself is left for the operator to delete (it may be the one
running); the exact ``rm`` lines are printed instead.
"""

from __future__ import annotations

import shutil
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from mship.core.config import ProjectSettings
from mship.output.console import ConsoleProtocol, Style
from mship.platform.process import run as run_process
from mship.services.binary import stop_running_instance
from mship.services.setup.prompts import Prompter
from mship.services.setup.steps import SetupPaths

_SYSTEMCTL_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class UninstallReport:
    removed: tuple[Path, ...]
    kept: tuple[Path, ...]
    cancelled: bool = False


def _dir_size_mb(path: Path) -> int:
    total = 0
    for p in path.rglob("*"):
        if p.is_file() and not p.is_symlink():
            total += p.stat().st_size
    return total // (1024 * 1024)


def _systemctl(args: list[str], *, console: ConsoleProtocol) -> None:
    cmd = ["systemctl", "--user", *args]
    console.command(cmd)
    run_process(cmd, cwd=Path.cwd(), timeout=_SYSTEMCTL_TIMEOUT_SECONDS)


def run_uninstall(
    *,
    project: ProjectSettings,
    paths: SetupPaths,
    binary: Path,
    settle_seconds: float,
    console: ConsoleProtocol,
    prompter: Prompter,
    assume_yes: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> UninstallReport:
    """Uninstall the application.

    ``assume_yes`` confirms the uninstall itself. Config and data are only
    removed when the prompter agrees.
    """
    service = paths.service_file
    has_binary = binary.exists()
    has_service = service.exists()
    has_config = paths.config_dir.exists()
    has_data = paths.data_dir.exists()

    if not (has_binary or has_service or has_config or has_data):
        console.info(f"{project.name} does not appear to be installed")
        return UninstallReport(removed=(), kept=())

    console.print("This will remove:", Style.BOLD)
    if has_binary:
        console.print(f"  - binary: {binary} (printed, not deleted)")
    if has_service:
        console.print(f"  - systemd service: {service}")
    if has_config:
        console.print(f"  - config directory: {paths.config_dir} (asks first)")
    if has_data:
        console.print(f"  - data directory: {paths.data_dir} (asks first)")

    if not assume_yes and not prompter.confirm("Proceed with uninstallation?", default=False):
        console.info("uninstallation cancelled")
        return UninstallReport(removed=(), kept=(), cancelled=True)

    _systemctl(["stop", service.name], console=console)
    stop_running_instance(
        pattern=project.daemon_pattern,
        settle_seconds=settle_seconds,
        console=console,
        sleep=sleep,
    )

    removed: list[Path] = []
    kept: list[Path] = []

    if has_service:
        _systemctl(["disable", service.name], console=console)
        service.unlink(missing_ok=True)
        _systemctl(["daemon-reload"], console=console)
        removed.append(service)

    if has_config:
        if prompter.confirm(f"Remove configuration directory ({paths.config_dir})?", default=False):
            shutil.rmtree(paths.config_dir)
            removed.append(paths.config_dir)
        else:
            kept.append(paths.config_dir)

    if has_data and paths.data_dir.exists():
        size = _dir_size_mb(paths.data_dir)
        console.print(f"data directory holds recordings, models and the meeting database (~{size} MB)")
        if prompter.confirm(f"Remove data directory ({paths.data_dir})?", default=False):
            shutil.rmtree(paths.data_dir)
            removed.append(paths.data_dir)
        else:
            kept.append(paths.data_dir)

    for p in removed:
        console.success(f"removed {p}")

    if has_binary:
        console.newline()
        console.print("To finish, remove the binary:", Style.BOLD)
        console.print(f"  rm {binary}")

    if kept:
        console.newline()
        console.print("Kept (remove manually if needed):", Style.BOLD)
        for p in kept:
            console.print(f"  rm -rf {p}")

    return UninstallReport(removed=tuple(removed), kept=tuple(kept))
