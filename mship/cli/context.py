from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from mship.core.config import Settings, load_settings
from mship.core.errors import ErrorCode
from mship.core.result import Err
from mship.output.console import ConsoleProtocol, RichConsole
from mship.platform.detection import PlatformInfo, detect


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo_root: Path
    platform: PlatformInfo
    settings: Settings
    console: ConsoleProtocol


def build_context(repo_root: Path | None = None) -> CLIContext:
    root = (repo_root or Path.cwd()).resolve()
    console = RichConsole()

    settings_result = load_settings(root)
    if isinstance(settings_result, Err):
        console.error(settings_result.error.message)
        raise typer.Exit(code=int(ErrorCode.FAILURE))

    return CLIContext(
        repo_root=root,
        platform=detect(),
        settings=settings_result.value,
        console=console,
    )
