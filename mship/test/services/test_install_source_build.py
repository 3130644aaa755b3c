from __future__ import annotations

import shutil
from pathlib import Path

import pytest

import mship.services.install.source_build as source_mod
from mship.core.config import ProjectSettings
from mship.core.result import Err, Ok, Result
from mship.output.console import MockConsole
from mship.platform.process import ProcessError
from mship.services.install.source_build import build_from_source, ensure_build_tools


def _tools_present(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(shutil, "which", lambda name: f"/usr/bin/{name}")


def _fake_silent(seen: list[list[str]], *, fail: str | None = None, produce: bool = True):
    def fake_run_silent(cmd: list[str], *, cwd: Path, timeout: float | None = None) -> Result[None, ProcessError]:
        seen.append(cmd)
        if fail is not None and cmd[0] == fail:
            return Err(ProcessError(command=tuple(cmd), returncode=1, stdout="", stderr=""))
        if cmd[:2] == ["git", "clone"]:
            Path(cmd[-1]).mkdir(parents=True)
        if cmd[:2] == ["cargo", "build"] and produce:
            out = cwd / "target" / "release" / "muesli"
            out.parent.mkdir(parents=True)
            out.write_bytes(b"local build")
        return Ok(None)

    return fake_run_silent


def test_ensure_build_tools_reports_missing_cargo(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(shutil, "which", lambda name: None if name == "cargo" else f"/usr/bin/{name}")

    result = ensure_build_tools()

    assert isinstance(result, Err)
    assert result.error.kind == "toolchain_missing"
    assert result.error.hint == "Install Rust: https://rustup.rs/"


def test_build_from_source_checks_out_tag(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _tools_present(monkeypatch)
    silent: list[list[str]] = []
    captured: list[list[str]] = []

    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None) -> Result[str, ProcessError]:
        captured.append(cmd)
        return Ok("")

    monkeypatch.setattr(source_mod, "run_silent", _fake_silent(silent))
    monkeypatch.setattr(source_mod, "run_process", fake_run)

    result = build_from_source(project=ProjectSettings(), tag="v0.3.0", work_dir=tmp_path, console=MockConsole())

    src = tmp_path / "muesli"
    assert result == Ok(src / "target" / "release" / "muesli")
    assert silent == [
        ["git", "clone", "--depth", "1", "https://github.com/itsameandrea/muesli.git", str(src)],
        ["cargo", "build", "--release"],
    ]
    assert captured == [
        ["git", "-C", str(src), "fetch", "--depth", "1", "origin", "refs/tags/v0.3.0"],
        ["git", "-C", str(src), "checkout", "-q", "FETCH_HEAD"],
    ]


def test_unfetchable_tag_builds_default_branch(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _tools_present(monkeypatch)
    silent: list[list[str]] = []
    console = MockConsole()

    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None) -> Result[str, ProcessError]:
        return Err(ProcessError(command=tuple(cmd), returncode=128, stdout="", stderr="couldn't find remote ref"))

    monkeypatch.setattr(source_mod, "run_silent", _fake_silent(silent))
    monkeypatch.setattr(source_mod, "run_process", fake_run)

    result = build_from_source(project=ProjectSettings(), tag="v9.9.9", work_dir=tmp_path, console=console)

    assert isinstance(result, Ok)
    assert console.find("building default branch instead")


def test_clone_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _tools_present(monkeypatch)
    silent: list[list[str]] = []
    monkeypatch.setattr(source_mod, "run_silent", _fake_silent(silent, fail="git"))

    result = build_from_source(project=ProjectSettings(), tag=None, work_dir=tmp_path, console=MockConsole())

    assert isinstance(result, Err)
    assert result.error.kind == "clone_failed"
    assert len(silent) == 1


def test_build_without_binary_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _tools_present(monkeypatch)
    silent: list[list[str]] = []
    monkeypatch.setattr(source_mod, "run_silent", _fake_silent(silent, produce=False))

    result = build_from_source(project=ProjectSettings(), tag=None, work_dir=tmp_path, console=MockConsole())

    assert isinstance(result, Err)
    assert result.error.kind == "build_failed"
    assert "cargo build --release" in (result.error.hint or "")
