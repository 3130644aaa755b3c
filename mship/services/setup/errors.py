from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SetupStepFailure:
    """A wizard step that could not finish.

    ``manual_command`` is what the operator can run later to do it by hand.
    """

    message: str
    manual_command: str | None = None


@dataclass(frozen=True, slots=True)
class UserInputError:
    """Input that does not parse; the prompter asks again."""

    message: str
