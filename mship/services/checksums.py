"""SHA-256 digests and ``.sha256`` sidecar files.

Sidecars use the ``sha256sum`` format (``<hex>  <filename>``) so operators
can verify a download by hand with ``sha256sum -c``.
"""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

__all__ = [
    "CHECKSUM_SUFFIX",
    "checksum_line",
    "parse_checksum",
    "sha256_file",
    "write_checksum_file",
]

CHECKSUM_SUFFIX = ".sha256"

_DIGEST_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def checksum_line(*, digest: str, filename: str) -> str:
    return f"{digest}  {filename}\n"


def write_checksum_file(artifact: Path) -> Path:
    """Write ``<artifact>.sha256`` next to the artifact and return its path."""
    digest = sha256_file(artifact)
    out = artifact.with_name(artifact.name + CHECKSUM_SUFFIX)
    out.write_text(checksum_line(digest=digest, filename=artifact.name), encoding="utf-8")
    return out


def parse_checksum(text: str) -> str | None:
    """Extract the digest from sidecar text, lowercased. None if malformed."""
    for line in text.splitlines():
        fields = line.strip().split()
        if not fields:
            continue
        if _DIGEST_RE.match(fields[0]):
            return fields[0].lower()
        return None
    return None
