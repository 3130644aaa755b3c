"""typer-backed implementation of the wizard's ``Prompter``."""

from __future__ import annotations

from collections.abc import Callable

import typer

from mship.core.result import Err, Result
from mship.services.setup.errors import UserInputError


class TyperPrompter:
    def confirm(self, message: str, *, default: bool) -> bool:
        return typer.confirm(message, default=default)

    def ask[T](
        self,
        message: str,
        parse: Callable[[str], Result[T, UserInputError]],
        *,
        default: str = "",
    ) -> T:
        while True:
            raw: str = typer.prompt(message, default=default, show_default=bool(default))
            result = parse(raw)
            if isinstance(result, Err):
                typer.secho(f"  {result.error.message}", fg=typer.colors.YELLOW)
                continue
            return result.value
