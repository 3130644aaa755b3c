"""Version resolution: current version + bump instruction -> next version.

Pure functions, no side effects.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

from mship.core.result import Err, Ok, Result

ReleaseBump = Literal["major", "minor", "patch"]

BUMPS: tuple[ReleaseBump, ...] = ("patch", "minor", "major")

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


@dataclass(frozen=True, slots=True, order=True)
class Version:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_tag(self) -> str:
        return f"v{self}"

    def bump(self, kind: ReleaseBump) -> Version:
        match kind:
            case "major":
                return Version(self.major + 1, 0, 0)
            case "minor":
                return Version(self.major, self.minor + 1, 0)
            case "patch":
                return Version(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


@dataclass(frozen=True, slots=True)
class InvalidVersionFormat:
    literal: str

    @property
    def message(self) -> str:
        return f"invalid version format '{self.literal}' (expected X.Y.Z)"


@dataclass(frozen=True, slots=True)
class DuplicateVersion:
    version: Version

    @property
    def message(self) -> str:
        return f"new version is the same as current ({self.version})"


VersionError = InvalidVersionFormat | DuplicateVersion


def parse_version(text: str) -> Result[Version, InvalidVersionFormat]:
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return Err(InvalidVersionFormat(literal=text))
    return Ok(Version(int(m.group(1)), int(m.group(2)), int(m.group(3))))


def resolve_version(current: str, instruction: str) -> Result[Version, VersionError]:
    """Compute the next version.

    Args:
        current: Current version, ``X.Y.Z``.
        instruction: ``patch``, ``minor``, ``major``, or an explicit ``X.Y.Z``.

    Returns:
        Ok(Version), or Err(InvalidVersionFormat) for a malformed literal,
        or Err(DuplicateVersion) when the result equals ``current``.
    """
    cur = parse_version(current)
    if isinstance(cur, Err):
        return cur

    token = instruction.strip()
    if token in BUMPS:
        new = cur.value.bump(token)  # type: ignore[arg-type]
    else:
        literal = parse_version(token)
        if isinstance(literal, Err):
            return literal
        new = literal.value

    if new == cur.value:
        return Err(DuplicateVersion(version=new))
    return Ok(new)
