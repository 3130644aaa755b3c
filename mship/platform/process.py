"""Run external commands (git, cargo, gh, the muesli binary) as Results.

``run`` captures output for commands whose stdout is parsed. ``run_silent``
lets output stream to the terminal for long builds, test suites and model
downloads. Neither raises: a non-zero exit, a missing executable and a
timeout all come back as ``ProcessError``.
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

from mship.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_silent"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that did not exit 0. ``returncode`` is -1 if it never ran."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def command_line(self) -> str:
        """The command shell-quoted, ready to paste into a terminal."""
        return shlex.join(self.command)

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


def _execute(
    cmd: list[str],
    cwd: Path,
    *,
    capture: bool,
    timeout: float | None,
) -> Result[str, ProcessError]:
    command = tuple(cmd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=capture,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(ProcessError(command, -1, "", f"timed out after {timeout}s"))
    except OSError as e:
        return Err(ProcessError(command, -1, "", str(e)))

    stdout = proc.stdout or ""
    if proc.returncode != 0:
        return Err(ProcessError(command, proc.returncode, stdout, proc.stderr or ""))
    return Ok(stdout)


def run(cmd: list[str], cwd: Path, *, timeout: float | None = None) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and return its stdout."""
    return _execute(cmd, cwd, capture=True, timeout=timeout)


def run_silent(cmd: list[str], cwd: Path, *, timeout: float | None = None) -> Result[None, ProcessError]:
    """Run ``cmd`` with output going straight to the terminal.

    The returned error carries only the command and exit code.
    """
    result = _execute(cmd, cwd, capture=False, timeout=timeout)
    if isinstance(result, Err):
        return result
    return Ok(None)
