"""Fallback path: shallow clone + local cargo build."""

from __future__ import annotations

import shutil
from pathlib import Path

from mship.core.config import ProjectSettings
from mship.core.result import Err, Ok, Result
from mship.output.console import ConsoleProtocol
from mship.platform.process import run as run_process
from mship.platform.process import run_silent
from mship.services.install.errors import InstallError

_CLONE_TIMEOUT_SECONDS = 10 * 60.0
_BUILD_TIMEOUT_SECONDS = 60 * 60.0

_REQUIRED_TOOLS: tuple[tuple[str, str], ...] = (
    ("cargo", "Install Rust: https://rustup.rs/"),
    ("git", "Install git to build from source"),
)


def ensure_build_tools() -> Result[None, InstallError]:
    for tool, hint in _REQUIRED_TOOLS:
        if shutil.which(tool) is None:
            return Err(
                InstallError(
                    kind="toolchain_missing",
                    message=f"{tool}: missing (needed to build from source)",
                    hint=hint,
                )
            )
    return Ok(None)


def _checkout_tag(*, src: Path, tag: str, console: ConsoleProtocol) -> bool:
    fetch = ["git", "-C", str(src), "fetch", "--depth", "1", "origin", f"refs/tags/{tag}"]
    console.command(fetch)
    fetched = run_process(fetch, cwd=src, timeout=_CLONE_TIMEOUT_SECONDS)
    if isinstance(fetched, Err):
        return False

    checkout = ["git", "-C", str(src), "checkout", "-q", "FETCH_HEAD"]
    console.command(checkout)
    return isinstance(run_process(checkout, cwd=src, timeout=_CLONE_TIMEOUT_SECONDS), Ok)


def build_from_source(
    *,
    project: ProjectSettings,
    tag: str | None,
    work_dir: Path,
    console: ConsoleProtocol,
) -> Result[Path, InstallError]:
    """Clone into ``work_dir`` and build. Returns the built binary's path.

    A tag that cannot be fetched is not fatal: the default branch is built
    instead and a warning is printed.
    """
    tools = ensure_build_tools()
    if isinstance(tools, Err):
        return tools

    src = work_dir / project.name
    clone = ["git", "clone", "--depth", "1", project.clone_url, str(src)]
    console.command(clone)
    cloned = run_silent(clone, cwd=work_dir, timeout=_CLONE_TIMEOUT_SECONDS)
    if isinstance(cloned, Err):
        return Err(
            InstallError(
                kind="clone_failed",
                message="failed to clone source repository",
                hint=cloned.error.command_line,
            )
        )

    if tag:
        if _checkout_tag(src=src, tag=tag, console=console):
            console.info(f"building tag {tag} from source")
        else:
            console.warning(f"could not check out tag {tag}, building default branch instead")

    build = ["cargo", "build", "--release"]
    console.command(build)
    built = run_silent(build, cwd=src, timeout=_BUILD_TIMEOUT_SECONDS)
    if isinstance(built, Err):
        return Err(
            InstallError(
                kind="build_failed",
                message="cargo build failed",
                hint=f"git clone {project.clone_url} && cd {project.name} && cargo build --release",
            )
        )

    binary = src / "target" / "release" / project.name
    if not binary.is_file():
        return Err(
            InstallError(
                kind="build_failed",
                message=f"build produced no binary at {binary}",
                hint=f"git clone {project.clone_url} && cd {project.name} && cargo build --release",
            )
        )
    return Ok(binary)
