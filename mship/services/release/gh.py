from __future__ import annotations

import shlex
import shutil
from pathlib import Path

from mship.core.result import Err, Ok, Result
from mship.output.console import ConsoleProtocol
from mship.platform.process import run as run_process
from mship.services.release.errors import ReleaseError
from mship.services.release.timeouts import GH_RELEASE_TIMEOUT_SECONDS, GIT_TIMEOUT_SECONDS


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def ensure_gh_auth(*, repo_root: Path) -> Result[None, ReleaseError]:
    result = run_process(["gh", "auth", "status"], cwd=repo_root, timeout=GIT_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="gh_missing",
                message="gh auth required",
                hint="Run: gh auth login",
            )
        )
    return Ok(None)


def release_create_command(*, tag: str, files: list[Path]) -> list[str]:
    return ["gh", "release", "create", tag, "--title", tag, "--generate-notes", *(str(f) for f in files)]


def create_release(
    *,
    repo_root: Path,
    tag: str,
    files: list[Path],
    release_url: str,
    console: ConsoleProtocol,
) -> Result[str, ReleaseError]:
    """Create the remote release for ``tag`` and upload ``files``.

    Returns the release page URL.
    """
    cmd = release_create_command(tag=tag, files=files)
    console.command(cmd)
    result = run_process(cmd, cwd=repo_root, timeout=GH_RELEASE_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        detail = result.error.stderr.strip()
        return Err(
            ReleaseError(
                kind="release_failed",
                message=f"gh release create {tag} failed (tag is already pushed)"
                + (f": {detail}" if detail else ""),
                hint=shlex.join(cmd),
            )
        )

    printed = result.value.strip().splitlines()
    if printed and printed[-1].startswith("https://"):
        return Ok(printed[-1])
    return Ok(release_url)
