"""Read and rewrite the package version in the repository manifest.

Only the ``version = "..."`` line of the ``[package]`` table is touched;
everything else in the file is preserved byte-for-byte. Before the first
write the pipeline takes a ``ManifestSnapshot`` of the manifest and lockfile
so a failure before tagging can put both back exactly as they were.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from mship.core.result import Err, Ok, Result
from mship.platform.files import atomic_write_text
from mship.services.release.errors import ReleaseError

_VERSION_LINE = re.compile(r'(?m)^version[ \t]*=[ \t]*"([^"]+)"[ \t]*$')
_SECTION_LINE = re.compile(r"(?m)^\s*\[")


def _package_span(text: str) -> tuple[int, int] | None:
    start = text.find("[package]")
    if start < 0:
        return None
    body = start + len("[package]")
    nxt = _SECTION_LINE.search(text, body)
    return (start, nxt.start() if nxt else len(text))


def _read(path: Path) -> Result[str, ReleaseError]:
    try:
        return Ok(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(
            ReleaseError(
                kind="invalid_settings",
                message=f"failed to read {path.name}: {e}",
                hint=str(path),
            )
        )


def read_version(path: Path) -> Result[str, ReleaseError]:
    text = _read(path)
    if isinstance(text, Err):
        return text

    span = _package_span(text.value)
    if span is None:
        return Err(
            ReleaseError(
                kind="invalid_settings",
                message=f"missing [package] section in {path.name}",
                hint=str(path),
            )
        )

    m = _VERSION_LINE.search(text.value, span[0], span[1])
    if m is None:
        return Err(
            ReleaseError(
                kind="invalid_settings",
                message=f"missing package version in {path.name}",
                hint=str(path),
            )
        )
    return Ok(m.group(1))


def write_version(path: Path, version: str) -> Result[bool, ReleaseError]:
    """Rewrite the package version. Ok(False) if it was already ``version``."""
    text = _read(path)
    if isinstance(text, Err):
        return text

    content = text.value
    span = _package_span(content)
    m = _VERSION_LINE.search(content, span[0], span[1]) if span else None
    if m is None:
        return Err(
            ReleaseError(
                kind="invalid_settings",
                message=f"missing package version in {path.name}",
                hint=str(path),
            )
        )

    if m.group(1) == version:
        return Ok(False)

    out = content[: m.start()] + f'version = "{version}"' + content[m.end() :]
    try:
        atomic_write_text(path, out)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="build_failed",
                message=f"failed to write {path.name}: {e}",
                hint=str(path),
            )
        )
    return Ok(True)


@dataclass(frozen=True, slots=True)
class ManifestSnapshot:
    """Original bytes of the files a version bump may change.

    ``None`` marks a file that did not exist when the snapshot was taken.
    """

    files: tuple[tuple[Path, bytes | None], ...]

    @classmethod
    def take(cls, paths: list[Path]) -> ManifestSnapshot:
        files: list[tuple[Path, bytes | None]] = []
        for p in paths:
            files.append((p, p.read_bytes() if p.exists() else None))
        return cls(files=tuple(files))

    @property
    def paths(self) -> list[Path]:
        return [p for p, _ in self.files]

    def restore(self) -> list[Path]:
        """Write every file back to its snapshot state. Returns changed paths."""
        changed: list[Path] = []
        for path, original in self.files:
            if original is None:
                if path.exists():
                    path.unlink()
                    changed.append(path)
                continue
            if not path.exists() or path.read_bytes() != original:
                path.write_bytes(original)
                changed.append(path)
        return changed
