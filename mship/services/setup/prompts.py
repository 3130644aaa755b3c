from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from mship.core.result import Err, Result
from mship.services.setup.errors import UserInputError


class Prompter(Protocol):
    """Interactive questions asked by the wizard."""

    def confirm(self, message: str, *, default: bool) -> bool: ...

    def ask[T](
        self,
        message: str,
        parse: Callable[[str], Result[T, UserInputError]],
        *,
        default: str = "",
    ) -> T:
        """Ask until ``parse`` accepts the answer."""
        ...


class AutoPrompter:
    """Answers every question with its default (``--yes``)."""

    def confirm(self, message: str, *, default: bool) -> bool:
        return default

    def ask[T](
        self,
        message: str,
        parse: Callable[[str], Result[T, UserInputError]],
        *,
        default: str = "",
    ) -> T:
        result = parse(default)
        if isinstance(result, Err):
            raise ValueError(f"no usable default for: {message}")
        return result.value


class ScriptedPrompter:
    """Replays canned answers, for tests.

    ``confirms`` answers ``confirm`` calls in order; ``answers`` is raw text
    for ``ask`` calls, rejected entries are recorded in ``rejected``.
    """

    def __init__(self, *, confirms: list[bool] | None = None, answers: list[str] | None = None) -> None:
        self.confirms = list(confirms or [])
        self.answers = list(answers or [])
        self.asked: list[str] = []
        self.rejected: list[str] = []

    def confirm(self, message: str, *, default: bool) -> bool:
        self.asked.append(message)
        if not self.confirms:
            return default
        return self.confirms.pop(0)

    def ask[T](
        self,
        message: str,
        parse: Callable[[str], Result[T, UserInputError]],
        *,
        default: str = "",
    ) -> T:
        self.asked.append(message)
        while True:
            raw = self.answers.pop(0) if self.answers else default
            result = parse(raw)
            if isinstance(result, Err):
                self.rejected.append(raw)
                if not self.answers:
                    raise ValueError(f"ran out of answers for: {message}")
                continue
            return result.value
