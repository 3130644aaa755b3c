from __future__ import annotations

from pathlib import Path

from mship.core.result import Err, Ok
from mship.services.release.manifest import ManifestSnapshot, read_version, write_version

MANIFEST = """\
[package]
name = "muesli"
version = "0.2.7"
edition = "2021"

[dependencies]
tokio = { version = "1", features = ["full"] }

[dev-dependencies]
version = "not-a-package-version"
"""


def test_read_version(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    path.write_text(MANIFEST, encoding="utf-8")

    assert read_version(path) == Ok("0.2.7")


def test_write_version_touches_only_the_package_line(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    path.write_text(MANIFEST, encoding="utf-8")

    assert write_version(path, "0.3.0") == Ok(True)

    text = path.read_text(encoding="utf-8")
    assert text == MANIFEST.replace('version = "0.2.7"', 'version = "0.3.0"')
    assert 'version = "not-a-package-version"' in text


def test_write_version_is_noop_for_same_version(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    path.write_text(MANIFEST, encoding="utf-8")

    assert write_version(path, "0.2.7") == Ok(False)
    assert path.read_text(encoding="utf-8") == MANIFEST


def test_read_version_missing_package_section(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    path.write_text('[workspace]\nmembers = ["a"]\n', encoding="utf-8")

    result = read_version(path)
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_settings"
    assert "[package]" in result.error.message


def test_read_version_missing_file(tmp_path: Path) -> None:
    result = read_version(tmp_path / "Cargo.toml")
    assert isinstance(result, Err)
    assert result.error.hint == str(tmp_path / "Cargo.toml")


def test_snapshot_restore_puts_bytes_back(tmp_path: Path) -> None:
    manifest = tmp_path / "Cargo.toml"
    lockfile = tmp_path / "Cargo.lock"
    manifest.write_text(MANIFEST, encoding="utf-8")

    snapshot = ManifestSnapshot.take([manifest, lockfile])
    write_version(manifest, "9.9.9")
    lockfile.write_text("generated during build\n", encoding="utf-8")

    restored = snapshot.restore()

    assert restored == [manifest, lockfile]
    assert manifest.read_text(encoding="utf-8") == MANIFEST
    assert not lockfile.exists()


def test_snapshot_restore_without_changes(tmp_path: Path) -> None:
    manifest = tmp_path / "Cargo.toml"
    manifest.write_text(MANIFEST, encoding="utf-8")

    snapshot = ManifestSnapshot.take([manifest])

    assert snapshot.restore() == []
    assert snapshot.paths == [manifest]


def test_write_version_keeps_following_blank_line(tmp_path: Path) -> None:
    path = tmp_path / "Cargo.toml"
    path.write_text('[package]\nname = "muesli"\nversion = "0.2.7"\n\n[dependencies]\n', encoding="utf-8")

    write_version(path, "0.2.8")

    assert path.read_text(encoding="utf-8") == '[package]\nname = "muesli"\nversion = "0.2.8"\n\n[dependencies]\n'
