"""Error types for the release pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "invalid_version",
    "duplicate_version",
    "invalid_settings",
    "working_tree_dirty",
    "branch_unconfirmed",
    "git_failed",
    "gate_failed",
    "build_failed",
    "publish_failed",
    "push_failed",
    "release_failed",
    "install_failed",
    "gh_missing",
]

ErrorCategory = Literal[
    "user_input",
    "precondition",
    "external_tool",
    "irreversible",
    "environment",
]

_CATEGORY: dict[str, ErrorCategory] = {
    "invalid_version": "user_input",
    "duplicate_version": "user_input",
    "invalid_settings": "precondition",
    "working_tree_dirty": "precondition",
    "branch_unconfirmed": "precondition",
    "git_failed": "precondition",
    "gh_missing": "environment",
    "gate_failed": "external_tool",
    "build_failed": "external_tool",
    "publish_failed": "external_tool",
    "push_failed": "irreversible",
    "release_failed": "irreversible",
    "install_failed": "environment",
}


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Release failure payload.

    ``hint`` carries the exact command the operator can re-run by hand.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORY[self.kind]

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
