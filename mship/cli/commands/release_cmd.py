from __future__ import annotations

import typer

from mship.cli.commands._helpers import value_or_exit
from mship.cli.context import build_context
from mship.output.console import Style
from mship.services.release.pipeline import run_release


def release(
    bump: str = typer.Argument(..., metavar="patch|minor|major|X.Y.Z", help="Version bump or explicit version"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Release from a non-release branch without asking"),
    skip_local_install: bool = typer.Option(
        False,
        "--skip-local-install",
        help="Do not replace the locally installed binary",
    ),
) -> None:
    """Build, tag and publish a new release of the application.

    Quality gates run before anything is changed. The version bump is
    committed, tagged and pushed only after every backend has built.
    """
    ctx = build_context()
    result = run_release(
        repo_root=ctx.repo_root,
        settings=ctx.settings,
        instruction=bump,
        console=ctx.console,
        confirm=lambda msg: typer.confirm(msg, default=False),
        assume_yes=yes,
        skip_local_install=skip_local_install,
    )
    outcome = value_or_exit(result, ctx)

    ctx.console.newline()
    ctx.console.success(f"released {outcome.tag}")
    for name in outcome.artifacts:
        ctx.console.print(f"  {name}", Style.DIM)
    ctx.console.print(outcome.release_url)
