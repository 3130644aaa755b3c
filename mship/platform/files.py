"""Atomic file replacement.

Config files and the installed binary are always replaced whole: content
goes to a hidden sibling temp file which is then renamed over the target.
An interrupted run leaves the old file in place, never a truncated one.
"""

from __future__ import annotations

import os
import shutil
import stat
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

__all__ = ["atomic_copy_executable", "atomic_write_text"]

_EXEC_BITS = stat.S_IRUSR | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


@contextmanager
def _replacing(target: Path) -> Iterator[Path]:
    """Yield a temp path next to ``target``; rename it over ``target`` on success."""
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    os.close(fd)
    tmp = Path(name)
    try:
        yield tmp
        os.replace(tmp, target)
    finally:
        tmp.unlink(missing_ok=True)


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    with _replacing(path) as tmp:
        with tmp.open("w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())


def atomic_copy_executable(src: Path, dest: Path) -> None:
    """Copy ``src`` over ``dest`` and mark the result executable."""
    with _replacing(dest) as tmp:
        shutil.copyfile(src, tmp)
        tmp.chmod(tmp.stat().st_mode | _EXEC_BITS)
