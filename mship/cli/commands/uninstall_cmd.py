from __future__ import annotations

import typer

from mship.cli.context import build_context
from mship.cli.prompter import TyperPrompter
from mship.platform.paths import install_dir
from mship.services.setup.prompts import AutoPrompter, Prompter
from mship.services.setup.steps import SetupPaths
from mship.services.setup.uninstall import run_uninstall


def uninstall(
    yes: bool = typer.Option(False, "--yes", "-y", help="Proceed without asking (config and data are kept)"),
) -> None:
    """Stop and remove the service; optionally delete config and data."""
    ctx = build_context()
    project = ctx.settings.project
    prompter: Prompter = AutoPrompter() if yes else TyperPrompter()

    run_uninstall(
        project=project,
        paths=SetupPaths.detect(project.name),
        binary=install_dir() / project.name,
        settle_seconds=ctx.settings.install.settle_seconds,
        console=ctx.console,
        prompter=prompter,
        assume_yes=yes,
    )
