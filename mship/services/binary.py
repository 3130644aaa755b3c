"""Replacing the installed application binary.

Both the release pipeline's local install and the distribution installer
overwrite a binary that a background daemon may be executing. Replacement
is always preceded by terminate-then-settle: signal any process whose
command line matches the daemon pattern, tolerate there being none, then
wait a fixed interval. This is best-effort exclusion, not a lock.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from mship.core.result import Err, Ok, Result
from mship.output.console import ConsoleProtocol
from mship.platform.files import atomic_copy_executable
from mship.platform.process import ProcessError
from mship.platform.process import run as run_process

__all__ = [
    "BinaryError",
    "query_version",
    "replace_binary",
    "stop_running_instance",
]

_PKILL_NO_MATCH = 1
_VERSION_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class BinaryError:
    message: str
    hint: str | None = None


def stop_running_instance(
    *,
    pattern: str,
    settle_seconds: float,
    console: ConsoleProtocol,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Signal processes matching ``pattern`` and wait ``settle_seconds``.

    Returns True if a process was signalled. "Not running" is not an error.
    """
    cmd = ["pkill", "-f", pattern]
    console.command(cmd)
    result = run_process(cmd, cwd=Path.cwd(), timeout=_VERSION_TIMEOUT_SECONDS)

    signalled = False
    if isinstance(result, Err):
        if result.error.returncode != _PKILL_NO_MATCH:
            console.warning(f"could not signal '{pattern}': {result.error.stderr.strip() or result.error}")
    else:
        signalled = True
        console.info(f"stopped running instance ({pattern})")

    sleep(settle_seconds)
    return signalled


def replace_binary(*, source: Path, dest: Path) -> Result[Path, BinaryError]:
    """Atomically overwrite ``dest`` with ``source`` (mode +x)."""
    try:
        atomic_copy_executable(source, dest)
    except OSError as e:
        return Err(
            BinaryError(
                message=f"failed to install {dest}: {e}",
                hint=f"cp {source} {dest} && chmod +x {dest}",
            )
        )
    return Ok(dest)


def query_version(binary: Path) -> Result[str, ProcessError]:
    """Run ``<binary> --version`` and return its first output line."""
    result = run_process([str(binary), "--version"], cwd=binary.parent, timeout=_VERSION_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return result
    lines = result.value.strip().splitlines()
    return Ok(lines[0] if lines else "")
