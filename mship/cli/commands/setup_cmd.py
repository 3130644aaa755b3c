from __future__ import annotations

from pathlib import Path

import typer

from mship.cli.context import CLIContext, build_context
from mship.cli.prompter import TyperPrompter
from mship.core.errors import ErrorCode
from mship.platform.paths import install_dir
from mship.services.setup.app_binary import AppBinary
from mship.services.setup.prompts import AutoPrompter, Prompter
from mship.services.setup.steps import STEP_NAMES, SetupContext, SetupPaths
from mship.services.setup.wizard import run_wizard, unknown_steps


def run_setup(ctx: CLIContext, *, binary: Path, skip: list[str], assume_yes: bool) -> None:
    prompter: Prompter = AutoPrompter() if assume_yes else TyperPrompter()
    setup_ctx = SetupContext(
        console=ctx.console,
        prompter=prompter,
        app=AppBinary(binary),
        host=ctx.platform,
        paths=SetupPaths.detect(ctx.settings.project.name),
    )
    run_wizard(setup_ctx, skip=skip)


def setup(
    skip: list[str] = typer.Option(
        [],
        "--skip",
        help=f"Skip a step (repeatable): {', '.join(STEP_NAMES)}",
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Accept every default without prompting"),
) -> None:
    """Configure the installed application (idempotent; safe to re-run)."""
    ctx = build_context()

    unknown = unknown_steps(skip)
    if unknown:
        ctx.console.error(f"unknown step(s): {', '.join(unknown)}")
        ctx.console.print(f"steps: {', '.join(STEP_NAMES)}")
        raise typer.Exit(code=int(ErrorCode.FAILURE))

    binary = install_dir() / ctx.settings.project.name
    run_setup(ctx, binary=binary, skip=skip, assume_yes=yes)
