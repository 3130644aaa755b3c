"""Build one checksummed artifact per compute backend.

Every backend is built from the same working tree. Before each build the
HEAD sha is compared with the snapshot taken at precondition time and the
build-trigger file is touched so cargo re-runs the build script; otherwise
features enabled for one backend could leak into the next backend's binary.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from mship.core.config import Backend
from mship.core.result import Err, Ok, Result
from mship.output.console import ConsoleProtocol
from mship.platform.process import run_silent
from mship.services.checksums import sha256_file, write_checksum_file
from mship.services.release.errors import ReleaseError
from mship.services.release.git import head_sha
from mship.services.release.timeouts import BUILD_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class ReleaseArtifact:
    platform: str
    backend: str
    binary_path: Path
    checksum: str

    @property
    def checksum_path(self) -> Path:
        return self.binary_path.with_name(self.binary_path.name + ".sha256")


def artifact_name(*, project: str, platform: str, backend: str) -> str:
    return f"{project}-{platform}-{backend}"


def cargo_build_command(backend: Backend) -> list[str]:
    cmd = ["cargo", "build", "--release"]
    if backend.features:
        cmd += ["--features", ",".join(backend.features)]
    return cmd


def _touch_trigger(path: Path) -> None:
    if path.exists():
        path.touch()


def build_matrix(
    *,
    repo_root: Path,
    staging: Path,
    project: str,
    platform: str,
    backends: tuple[Backend, ...],
    build_trigger: str,
    expected_sha: str,
    console: ConsoleProtocol,
) -> Result[list[ReleaseArtifact], ReleaseError]:
    artifacts: list[ReleaseArtifact] = []
    built = repo_root / "target" / "release" / project

    for backend in backends:
        sha = head_sha(repo_root=repo_root)
        if isinstance(sha, Err):
            return sha
        if sha.value != expected_sha:
            return Err(
                ReleaseError(
                    kind="build_failed",
                    message=f"HEAD moved during the build ({expected_sha[:8]} -> {sha.value[:8]})",
                    hint="git log -1",
                )
            )

        console.info(f"building {backend.name}")
        _touch_trigger(repo_root / build_trigger)

        cmd = cargo_build_command(backend)
        console.command(cmd)
        result = run_silent(cmd, cwd=repo_root, timeout=BUILD_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="build_failed",
                    message=f"build failed for backend '{backend.name}'",
                    hint=result.error.command_line,
                )
            )

        if not built.is_file():
            return Err(
                ReleaseError(
                    kind="build_failed",
                    message=f"build produced no binary at {built}",
                    hint=" ".join(cmd),
                )
            )

        name = artifact_name(project=project, platform=platform, backend=backend.name)
        dest = staging / name
        try:
            shutil.copy2(built, dest)
            write_checksum_file(dest)
        except OSError as e:
            return Err(
                ReleaseError(
                    kind="build_failed",
                    message=f"failed to stage {name}: {e}",
                    hint=f"cp {built} {dest}",
                )
            )

        artifact = ReleaseArtifact(
            platform=platform,
            backend=backend.name,
            binary_path=dest,
            checksum=sha256_file(dest),
        )
        artifacts.append(artifact)
        console.success(f"{name} ({artifact.checksum[:12]})")

    return Ok(artifacts)
