from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mship.core.result import Err, Ok, Result
from mship.services.checksums import parse_checksum, sha256_file
from mship.services.release.errors import ReleaseError
from mship.services.release.matrix import ReleaseArtifact


@dataclass(frozen=True, slots=True)
class PublishSet:
    """Verified artifact + checksum pairs, in upload order."""

    artifacts: tuple[ReleaseArtifact, ...]

    @property
    def files(self) -> list[Path]:
        out: list[Path] = []
        for a in self.artifacts:
            out += [a.binary_path, a.checksum_path]
        return out


def _verify_pair(artifact: ReleaseArtifact) -> Result[None, ReleaseError]:
    name = artifact.binary_path.name
    if not artifact.binary_path.is_file():
        return Err(
            ReleaseError(kind="publish_failed", message=f"missing artifact: {name}", hint=str(artifact.binary_path))
        )

    sidecar = artifact.checksum_path
    try:
        recorded = parse_checksum(sidecar.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(
            ReleaseError(kind="publish_failed", message=f"missing checksum for {name}: {e}", hint=str(sidecar))
        )

    actual = sha256_file(artifact.binary_path)
    if recorded is None or recorded != actual or actual != artifact.checksum:
        return Err(
            ReleaseError(
                kind="publish_failed",
                message=f"checksum does not match artifact: {name}",
                hint=f"sha256sum -c {sidecar}",
            )
        )
    return Ok(None)


def prepare_publish(artifacts: list[ReleaseArtifact]) -> Result[PublishSet, ReleaseError]:
    """Check that each artifact has exactly one matching checksum file."""
    if not artifacts:
        return Err(ReleaseError(kind="publish_failed", message="no artifacts to publish"))

    seen: set[str] = set()
    for a in artifacts:
        if a.backend in seen:
            return Err(
                ReleaseError(kind="publish_failed", message=f"backend built twice: {a.backend}")
            )
        seen.add(a.backend)

        ok = _verify_pair(a)
        if isinstance(ok, Err):
            return ok

    return Ok(PublishSet(artifacts=tuple(artifacts)))
