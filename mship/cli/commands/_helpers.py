"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

import typer

from mship.core.errors import ErrorCode
from mship.core.result import Err, Result
from mship.output.console import Style

if TYPE_CHECKING:
    from mship.cli.context import CLIContext


def value_or_exit[T, E](result: Result[T, E], ctx: CLIContext) -> T:
    """Return the Ok value, or report the error and exit 1.

    Errors carry ``message`` and, optionally, ``hint``: the command the
    operator can run by hand to retry or recover.
    """
    if isinstance(result, Err):
        error = result.error
        ctx.console.error(getattr(error, "message", str(error)))
        hint: str | None = getattr(error, "hint", None)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.FAILURE))
    return result.value
