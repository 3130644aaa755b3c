from __future__ import annotations

from pathlib import Path

import typer

from mship.cli.commands._helpers import value_or_exit
from mship.cli.commands.setup_cmd import run_setup
from mship.cli.context import build_context
from mship.platform.detection import detect_gpu
from mship.platform.paths import install_dir as default_install_dir
from mship.services.install.installer import install as install_binary
from mship.tools.http import RealHttpClient


def install(
    version: str | None = typer.Argument(None, help="Release tag to install (default: latest)"),
    install_dir: Path | None = typer.Option(
        None,
        "--install-dir",
        help="Target directory (default: $INSTALL_DIR or ~/.local/bin)",
    ),
    strict_checksum: bool = typer.Option(
        False,
        "--strict-checksum",
        help="Fail when the checksum does not match",
    ),
    skip_setup: bool = typer.Option(False, "--skip-setup", help="Do not run the setup wizard afterwards"),
) -> None:
    """Install the application binary for this machine.

    Downloads the matching prebuilt variant, or builds from source when no
    release or download is available, then runs the setup wizard.
    """
    ctx = build_context()
    target = (install_dir or default_install_dir()).expanduser()

    result = install_binary(
        settings=ctx.settings,
        version=version,
        target_dir=target,
        host=ctx.platform,
        gpu=detect_gpu(),
        http=RealHttpClient(),
        console=ctx.console,
        strict_checksum=strict_checksum,
    )
    installed = value_or_exit(result, ctx)

    if skip_setup:
        return
    run_setup(ctx, binary=installed.binary, skip=[], assume_yes=False)
