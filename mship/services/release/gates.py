from __future__ import annotations

from pathlib import Path

from mship.core.result import Err, Ok, Result
from mship.output.console import ConsoleProtocol
from mship.platform.process import run_silent
from mship.services.release.errors import ReleaseError
from mship.services.release.timeouts import GATE_TIMEOUT_SECONDS


def run_gates(
    *,
    repo_root: Path,
    commands: tuple[tuple[str, ...], ...],
    console: ConsoleProtocol,
) -> Result[int, ReleaseError]:
    """Run every quality gate in order; stop at the first failure.

    Returns the number of gates that passed.
    """
    for argv in commands:
        cmd = list(argv)
        console.command(cmd)
        result = run_silent(cmd, cwd=repo_root, timeout=GATE_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            detail = result.error.stderr.strip()
            return Err(
                ReleaseError(
                    kind="gate_failed",
                    message=f"quality gate failed: {result.error.command_line}"
                    + (f" ({detail})" if detail else ""),
                    hint=result.error.command_line,
                )
            )
        console.success(" ".join(cmd))
    return Ok(len(commands))
