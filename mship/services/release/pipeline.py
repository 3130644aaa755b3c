"""Release pipeline: a fail-fast state machine over the release stages.

Stages run strictly in order. Every handler returns a Result; the driver
stops at the first Err. Nothing before TAG_AND_PUSH is visible outside the
local checkout: the manifest bump is written at the start of the build and
rolled back from a snapshot if the run stops before tagging, and built
artifacts only ever live in the staging directory, which is removed on
every exit path.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from mship.core.config import Settings
from mship.core.result import Err, Ok, Result
from mship.output.console import ConsoleProtocol, Style
from mship.platform.paths import install_dir
from mship.services.binary import query_version, replace_binary, stop_running_instance
from mship.services.release.errors import ReleaseError
from mship.services.release.gates import run_gates
from mship.services.release.gh import create_release, ensure_gh_auth, ensure_gh_available
from mship.services.release.git import (
    RepoState,
    check_preconditions,
    commit_version,
    create_tag,
    push_release,
    read_repo_state,
)
from mship.services.release.manifest import ManifestSnapshot, read_version, write_version
from mship.services.release.matrix import ReleaseArtifact, build_matrix
from mship.services.release.publish import PublishSet, prepare_publish
from mship.services.release.semver import DuplicateVersion, Version, resolve_version


class Stage(Enum):
    CHECK_PRECONDITIONS = "check preconditions"
    BUMP_VERSION = "bump version"
    RUN_QUALITY_GATES = "run quality gates"
    BUILD_MATRIX = "build matrix"
    PUBLISH = "publish"
    TAG_AND_PUSH = "tag and push"
    CREATE_RELEASE = "create release"
    LOCAL_INSTALL = "local install"
    CLEANUP = "cleanup"

    def __str__(self) -> str:
        return self.value


STAGES: tuple[Stage, ...] = tuple(Stage)


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    version: Version
    tag: str
    release_url: str
    artifacts: tuple[str, ...]
    installed_version: str | None
    completed: tuple[Stage, ...]
    skipped: tuple[Stage, ...]


@dataclass(slots=True)
class _Run:
    repo_root: Path
    settings: Settings
    instruction: str
    console: ConsoleProtocol
    confirm: Callable[[str], bool] | None
    assume_yes: bool
    skip_local_install: bool
    staging: Path

    state: RepoState | None = None
    current: str | None = None
    version: Version | None = None
    snapshot: ManifestSnapshot | None = None
    artifacts: list[ReleaseArtifact] = field(default_factory=list)
    publish_set: PublishSet | None = None
    committed: bool = False
    release_url: str | None = None
    installed_version: str | None = None

    @property
    def manifest(self) -> Path:
        return self.repo_root / self.settings.project.manifest

    @property
    def lockfile(self) -> Path:
        return self.repo_root / self.settings.project.lockfile

    @property
    def tag(self) -> str:
        assert self.version is not None
        return self.version.to_tag()


@contextmanager
def staging_directory(path: Path) -> Iterator[Path]:
    """Create ``path`` and always remove it afterwards. ``path`` must not exist."""
    path.mkdir(parents=True)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


def _check_preconditions(run: _Run) -> Result[None, ReleaseError]:
    state = read_repo_state(repo_root=run.repo_root)
    if isinstance(state, Err):
        return state
    run.state = state.value

    ok = check_preconditions(
        state=state.value,
        release_branches=run.settings.release.branches,
        console=run.console,
        confirm=run.confirm,
        assume_yes=run.assume_yes,
    )
    if isinstance(ok, Err):
        return ok

    # CREATE_RELEASE runs after the push; a missing gh must be caught now.
    gh = ensure_gh_available()
    if isinstance(gh, Err):
        return gh
    auth = ensure_gh_auth(repo_root=run.repo_root)
    if isinstance(auth, Err):
        return auth

    run.console.print(f"branch: {state.value.branch} @ {state.value.head_sha[:8]}", Style.DIM)
    return Ok(None)


def _bump_version(run: _Run) -> Result[None, ReleaseError]:
    current = read_version(run.manifest)
    if isinstance(current, Err):
        return current
    run.current = current.value

    resolved = resolve_version(current.value, run.instruction)
    if isinstance(resolved, Err):
        e = resolved.error
        kind = "duplicate_version" if isinstance(e, DuplicateVersion) else "invalid_version"
        return Err(ReleaseError(kind=kind, message=e.message, hint="mship release patch|minor|major|X.Y.Z"))

    run.version = resolved.value
    run.console.info(f"{current.value} -> {resolved.value}")
    return Ok(None)


def _run_quality_gates(run: _Run) -> Result[None, ReleaseError]:
    passed = run_gates(
        repo_root=run.repo_root,
        commands=run.settings.gates.commands,
        console=run.console,
    )
    if isinstance(passed, Err):
        return passed
    return Ok(None)


def _build_matrix(run: _Run) -> Result[None, ReleaseError]:
    assert run.state is not None and run.version is not None

    run.snapshot = ManifestSnapshot.take([run.manifest, run.lockfile])
    written = write_version(run.manifest, str(run.version))
    if isinstance(written, Err):
        return written

    release = run.settings.release
    artifacts = build_matrix(
        repo_root=run.repo_root,
        staging=run.staging,
        project=run.settings.project.name,
        platform=release.platform,
        backends=release.backends,
        build_trigger=release.build_trigger,
        expected_sha=run.state.head_sha,
        console=run.console,
    )
    if isinstance(artifacts, Err):
        return artifacts
    run.artifacts = artifacts.value
    return Ok(None)


def _publish(run: _Run) -> Result[None, ReleaseError]:
    prepared = prepare_publish(run.artifacts)
    if isinstance(prepared, Err):
        return prepared
    run.publish_set = prepared.value
    for path in prepared.value.files:
        run.console.print(f"  {path.name}", Style.DIM)
    return Ok(None)


def _tag_and_push(run: _Run) -> Result[None, ReleaseError]:
    assert run.state is not None and run.snapshot is not None

    committed = commit_version(
        repo_root=run.repo_root,
        paths=run.snapshot.paths,
        tag=run.tag,
        console=run.console,
    )
    if isinstance(committed, Err):
        return committed
    # From here on the bump is part of history and must not be rolled back.
    run.committed = True

    tagged = create_tag(repo_root=run.repo_root, tag=run.tag, console=run.console)
    if isinstance(tagged, Err):
        return tagged

    return push_release(
        repo_root=run.repo_root,
        remote=run.settings.release.remote,
        branch=run.state.branch,
        tag=run.tag,
        console=run.console,
    )


def _create_release(run: _Run) -> Result[None, ReleaseError]:
    assert run.publish_set is not None

    base = run.settings.project.release_url_base
    url = create_release(
        repo_root=run.repo_root,
        tag=run.tag,
        files=run.publish_set.files,
        release_url=f"{base}/tag/{run.tag}",
        console=run.console,
    )
    if isinstance(url, Err):
        return url
    run.release_url = url.value
    return Ok(None)


def _local_install(run: _Run) -> Result[None, ReleaseError]:
    wanted = run.settings.release.install_backend
    artifact = next((a for a in run.artifacts if a.backend == wanted), None)
    if artifact is None:
        return Err(
            ReleaseError(
                kind="install_failed",
                message=f"no '{wanted}' artifact to install (release {run.tag} is published)",
                hint=f"mship install {run.version}",
            )
        )

    dest = install_dir() / run.settings.project.name
    stop_running_instance(
        pattern=run.settings.project.daemon_pattern,
        settle_seconds=run.settings.install.settle_seconds,
        console=run.console,
    )

    replaced = replace_binary(source=artifact.binary_path, dest=dest)
    if isinstance(replaced, Err):
        return Err(
            ReleaseError(
                kind="install_failed",
                message=f"{replaced.error.message} (release {run.tag} is published)",
                hint=replaced.error.hint,
            )
        )

    version = query_version(dest)
    if isinstance(version, Err):
        return Err(
            ReleaseError(
                kind="install_failed",
                message=f"installed binary does not run: {version.error}",
                hint=f"{dest} --version",
            )
        )
    run.installed_version = version.value
    run.console.success(f"installed {dest} ({version.value})")
    return Ok(None)


_HANDLERS: dict[Stage, Callable[[_Run], Result[None, ReleaseError]]] = {
    Stage.CHECK_PRECONDITIONS: _check_preconditions,
    Stage.BUMP_VERSION: _bump_version,
    Stage.RUN_QUALITY_GATES: _run_quality_gates,
    Stage.BUILD_MATRIX: _build_matrix,
    Stage.PUBLISH: _publish,
    Stage.TAG_AND_PUSH: _tag_and_push,
    Stage.CREATE_RELEASE: _create_release,
    Stage.LOCAL_INSTALL: _local_install,
}


def _rollback(run: _Run) -> None:
    if run.snapshot is None or run.committed:
        return
    restored = run.snapshot.restore()
    for path in restored:
        run.console.print(f"restored {path.name}", Style.DIM)


def run_release(
    *,
    repo_root: Path,
    settings: Settings,
    instruction: str,
    console: ConsoleProtocol,
    confirm: Callable[[str], bool] | None = None,
    assume_yes: bool = False,
    skip_local_install: bool = False,
) -> Result[ReleaseOutcome, ReleaseError]:
    """Run the whole release. Returns the outcome or the first stage error."""
    staging_path = repo_root / settings.release.staging_dir
    if staging_path.exists():
        return Err(
            ReleaseError(
                kind="invalid_settings",
                message=f"staging directory already exists: {staging_path}",
                hint=f"rm -rf {staging_path}",
            )
        )

    completed: list[Stage] = []
    skipped: list[Stage] = []

    with staging_directory(staging_path) as staging:
        run = _Run(
            repo_root=repo_root,
            settings=settings,
            instruction=instruction,
            console=console,
            confirm=confirm,
            assume_yes=assume_yes,
            skip_local_install=skip_local_install,
            staging=staging,
        )
        try:
            for stage in STAGES:
                if stage is Stage.CLEANUP:
                    continue
                if stage is Stage.LOCAL_INSTALL and skip_local_install:
                    console.print(f"{stage}: skipped", Style.DIM)
                    skipped.append(stage)
                    continue

                console.header(str(stage))
                result = _HANDLERS[stage](run)
                if isinstance(result, Err):
                    console.print(f"stopped at: {stage}", Style.DIM)
                    return result
                completed.append(stage)
        finally:
            _rollback(run)

    completed.append(Stage.CLEANUP)
    assert run.version is not None and run.release_url is not None
    return Ok(
        ReleaseOutcome(
            version=run.version,
            tag=run.tag,
            release_url=run.release_url,
            artifacts=tuple(a.binary_path.name for a in run.artifacts),
            installed_version=run.installed_version,
            completed=tuple(completed),
            skipped=tuple(skipped),
        )
    )
