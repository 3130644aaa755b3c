from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from mship.core.result import Err, Ok, Result
from mship.output.console import ConsoleProtocol
from mship.platform.process import ProcessError
from mship.platform.process import run as run_process
from mship.services.release.errors import ReleaseError, ReleaseErrorKind
from mship.services.release.timeouts import GIT_NETWORK_TIMEOUT_SECONDS, GIT_TIMEOUT_SECONDS


def _run_git_command(
    *, cmd: list[str], repo_root: Path, network: bool = False
) -> Result[str, ProcessError]:
    timeout = GIT_NETWORK_TIMEOUT_SECONDS if network else GIT_TIMEOUT_SECONDS
    return run_process(cmd, cwd=repo_root, timeout=timeout)


@dataclass(frozen=True, slots=True)
class RepoState:
    """Snapshot of the checkout, taken once before anything is mutated."""

    branch: str
    head_sha: str
    dirty_paths: tuple[str, ...]

    @property
    def is_clean(self) -> bool:
        return not self.dirty_paths


def read_repo_state(*, repo_root: Path) -> Result[RepoState, ReleaseError]:
    status = _run_git_command(cmd=["git", "status", "--porcelain"], repo_root=repo_root)
    if isinstance(status, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message="failed to check git status",
                hint=status.error.stderr.strip() or "git status",
            )
        )

    branch = _run_git_command(
        cmd=["git", "rev-parse", "--abbrev-ref", "HEAD"], repo_root=repo_root
    )
    if isinstance(branch, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message="failed to read current branch",
                hint=branch.error.stderr.strip() or "git rev-parse --abbrev-ref HEAD",
            )
        )

    head = _run_git_command(cmd=["git", "rev-parse", "HEAD"], repo_root=repo_root)
    if isinstance(head, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message="failed to read HEAD sha",
                hint=head.error.stderr.strip() or "git rev-parse HEAD",
            )
        )

    dirty = tuple(line[3:] for line in status.value.splitlines() if line.strip())
    return Ok(RepoState(branch=branch.value.strip(), head_sha=head.value.strip(), dirty_paths=dirty))


def check_preconditions(
    *,
    state: RepoState,
    release_branches: tuple[str, ...],
    console: ConsoleProtocol,
    confirm: Callable[[str], bool] | None,
    assume_yes: bool,
) -> Result[None, ReleaseError]:
    """Refuse a dirty tree; require confirmation off a release branch."""
    if not state.is_clean:
        shown = ", ".join(state.dirty_paths[:5])
        if len(state.dirty_paths) > 5:
            shown += ", ..."
        return Err(
            ReleaseError(
                kind="working_tree_dirty",
                message=f"working tree is dirty: {shown}",
                hint="Commit or stash changes first: git stash",
            )
        )

    if state.branch in release_branches:
        return Ok(None)

    console.warning(
        f"releasing from branch '{state.branch}', not {'/'.join(release_branches)}"
    )
    if assume_yes:
        return Ok(None)
    if confirm is not None and confirm("Continue?"):
        return Ok(None)
    return Err(
        ReleaseError(
            kind="branch_unconfirmed",
            message=f"release from '{state.branch}' not confirmed",
            hint=f"git checkout {release_branches[0]}, or pass --yes",
        )
    )


def head_sha(*, repo_root: Path) -> Result[str, ReleaseError]:
    head = _run_git_command(cmd=["git", "rev-parse", "HEAD"], repo_root=repo_root)
    if isinstance(head, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message="failed to read HEAD sha",
                hint=head.error.stderr.strip() or "git rev-parse HEAD",
            )
        )
    return Ok(head.value.strip())


def _git_step(
    *,
    cmd: list[str],
    repo_root: Path,
    console: ConsoleProtocol,
    message: str,
    kind: ReleaseErrorKind = "push_failed",
    network: bool = False,
) -> Result[str, ReleaseError]:
    console.command(cmd)
    result = _run_git_command(cmd=cmd, repo_root=repo_root, network=network)
    if isinstance(result, Err):
        detail = result.error.stderr.strip()
        return Err(
            ReleaseError(
                kind=kind,
                message=f"{message}: {detail}" if detail else message,
                hint=result.error.command_line,
            )
        )
    return result


def commit_version(
    *, repo_root: Path, paths: list[Path], tag: str, console: ConsoleProtocol
) -> Result[str, ReleaseError]:
    """Commit the bumped files as a single commit named ``tag``. Returns the sha."""
    rels = [str(p.relative_to(repo_root)) for p in paths if p.exists()]

    added = _git_step(
        cmd=["git", "add", "--", *rels],
        repo_root=repo_root,
        console=console,
        message="git add failed",
        kind="git_failed",
    )
    if isinstance(added, Err):
        return added

    committed = _git_step(
        cmd=["git", "commit", "-m", tag],
        repo_root=repo_root,
        console=console,
        message="git commit failed",
        kind="git_failed",
    )
    if isinstance(committed, Err):
        # Unstage the bump so the index matches the restored files
        _run_git_command(cmd=["git", "reset", "-q", "--", *rels], repo_root=repo_root)
        return committed

    return head_sha(repo_root=repo_root)


def create_tag(*, repo_root: Path, tag: str, console: ConsoleProtocol) -> Result[None, ReleaseError]:
    tagged = _git_step(
        cmd=["git", "tag", "-a", tag, "-m", tag],
        repo_root=repo_root,
        console=console,
        message=f"git tag {tag} failed (the release commit exists locally)",
    )
    if isinstance(tagged, Err):
        return tagged
    return Ok(None)


def push_release(
    *, repo_root: Path, remote: str, branch: str, tag: str, console: ConsoleProtocol
) -> Result[None, ReleaseError]:
    """Push the release commit, then the tag."""
    for cmd in (["git", "push", remote, branch], ["git", "push", remote, tag]):
        pushed = _git_step(
            cmd=cmd,
            repo_root=repo_root,
            console=console,
            message=f"{' '.join(cmd)} failed (commit and tag {tag} exist locally)",
            network=True,
        )
        if isinstance(pushed, Err):
            return pushed
    return Ok(None)
