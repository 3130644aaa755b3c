from __future__ import annotations

import typer

from mship import __version__
from mship.cli.commands.install_cmd import install
from mship.cli.commands.release_cmd import release
from mship.cli.commands.setup_cmd import setup
from mship.cli.commands.uninstall_cmd import uninstall
from mship.cli.commands.variant_cmd import variant

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(release)
app.command()(install)
app.command()(setup)
app.command()(uninstall)
app.command()(variant)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Release, install and set up muesli."""


def main() -> None:
    app()
