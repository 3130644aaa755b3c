from __future__ import annotations

import shutil
from pathlib import Path

import pytest

import mship.services.release.gh as gh_mod
from mship.core.result import Err, Ok, Result
from mship.output.console import MockConsole
from mship.platform.process import ProcessError
from mship.services.release.gh import create_release, ensure_gh_auth, ensure_gh_available, release_create_command


def test_release_create_command() -> None:
    files = [Path("/r/muesli-linux-x86_64-cpu"), Path("/r/muesli-linux-x86_64-cpu.sha256")]
    assert release_create_command(tag="v1.3.0", files=files) == [
        "gh",
        "release",
        "create",
        "v1.3.0",
        "--title",
        "v1.3.0",
        "--generate-notes",
        "/r/muesli-linux-x86_64-cpu",
        "/r/muesli-linux-x86_64-cpu.sha256",
    ]


def test_ensure_gh_available_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(shutil, "which", lambda _name: None)

    result = ensure_gh_available()

    assert isinstance(result, Err)
    assert result.error.kind == "gh_missing"
    assert result.error.hint == "Install GitHub CLI: https://cli.github.com/"


def test_ensure_gh_auth_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None) -> Result[str, ProcessError]:
        return Err(ProcessError(command=tuple(cmd), returncode=1, stdout="", stderr="not logged in"))

    monkeypatch.setattr(gh_mod, "run_process", fake_run)

    result = ensure_gh_auth(repo_root=tmp_path)

    assert isinstance(result, Err)
    assert result.error.hint == "Run: gh auth login"


def test_create_release_returns_printed_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[list[str]] = []

    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None) -> Result[str, ProcessError]:
        seen.append(cmd)
        return Ok("https://github.com/itsameandrea/muesli/releases/tag/v1.3.0\n")

    monkeypatch.setattr(gh_mod, "run_process", fake_run)

    result = create_release(
        repo_root=tmp_path,
        tag="v1.3.0",
        files=[tmp_path / "a"],
        release_url="fallback",
        console=MockConsole(),
    )

    assert result == Ok("https://github.com/itsameandrea/muesli/releases/tag/v1.3.0")
    assert seen[0][:4] == ["gh", "release", "create", "v1.3.0"]


def test_create_release_falls_back_to_known_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None) -> Result[str, ProcessError]:
        return Ok("")

    monkeypatch.setattr(gh_mod, "run_process", fake_run)

    result = create_release(repo_root=tmp_path, tag="v1.3.0", files=[], release_url="fallback", console=MockConsole())

    assert result == Ok("fallback")


def test_create_release_failure_is_irreversible(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None) -> Result[str, ProcessError]:
        return Err(ProcessError(command=tuple(cmd), returncode=1, stdout="", stderr="HTTP 422"))

    monkeypatch.setattr(gh_mod, "run_process", fake_run)

    result = create_release(
        repo_root=tmp_path,
        tag="v1.3.0",
        files=[tmp_path / "muesli-linux-x86_64-cpu"],
        release_url="fallback",
        console=MockConsole(),
    )

    assert isinstance(result, Err)
    assert result.error.kind == "release_failed"
    assert result.error.category == "irreversible"
    assert result.error.hint is not None
    assert result.error.hint.startswith("gh release create v1.3.0")
