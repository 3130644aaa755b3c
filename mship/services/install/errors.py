from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

InstallErrorKind = Literal[
    "unsupported_platform",
    "download_failed",
    "toolchain_missing",
    "clone_failed",
    "build_failed",
    "install_failed",
    "integrity_failed",
]


@dataclass(frozen=True, slots=True)
class InstallError:
    kind: InstallErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


@dataclass(frozen=True, slots=True)
class IntegrityWarning:
    """Installed binary does not match its published checksum."""

    path: Path
    expected: str
    actual: str

    def __str__(self) -> str:
        return (
            f"checksum mismatch for {self.path.name}: expected {self.expected[:12]}..., got {self.actual[:12]}..."
        )
