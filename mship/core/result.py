"""Ok/Err values for failures a caller is expected to handle.

A dirty tree, a failed gate or a 404 on a release asset is not exceptional
for this tool: each one decides what happens next (abort the release, fall
back to a source build, mark a setup step as failed). Services therefore
return ``Ok(value)`` or ``Err(error)`` and callers branch with
``isinstance(result, Err)`` or a ``match`` statement.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
