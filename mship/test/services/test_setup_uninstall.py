from __future__ import annotations

from pathlib import Path

import pytest

import mship.services.setup.uninstall as uninstall_mod
from mship.core.config import ProjectSettings
from mship.core.result import Ok, Result
from mship.output.console import MockConsole
from mship.platform.process import ProcessError
from mship.services.setup.prompts import AutoPrompter, ScriptedPrompter
from mship.services.setup.steps import SetupPaths
from mship.services.setup.uninstall import run_uninstall


def _paths(tmp_path: Path) -> SetupPaths:
    return SetupPaths(
        config_dir=tmp_path / "config" / "muesli",
        data_dir=tmp_path / "data" / "muesli",
        systemd_dir=tmp_path / "systemd",
        hypr_dir=tmp_path / "hypr",
        waybar_dir=tmp_path / "waybar",
    )


def _installed(tmp_path: Path) -> tuple[SetupPaths, Path]:
    paths = _paths(tmp_path)
    paths.config_dir.mkdir(parents=True)
    paths.config_file.write_text("[llm]\n", encoding="utf-8")
    (paths.data_dir / "models").mkdir(parents=True)
    (paths.data_dir / "models" / "base.bin").write_bytes(b"weights")
    paths.systemd_dir.mkdir(parents=True)
    paths.service_file.write_text("[Unit]\n", encoding="utf-8")
    binary = tmp_path / "bin" / "muesli"
    binary.parent.mkdir()
    binary.write_bytes(b"elf")
    return paths, binary


@pytest.fixture
def calls(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    seen: list[str] = []

    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None) -> Result[str, ProcessError]:
        seen.append(" ".join(cmd))
        return Ok("")

    def fake_stop(*, pattern: str, settle_seconds: float, console: object, sleep: object) -> bool:
        seen.append(f"stop {pattern}")
        return True

    monkeypatch.setattr(uninstall_mod, "run_process", fake_run)
    monkeypatch.setattr(uninstall_mod, "stop_running_instance", fake_stop)
    return seen


def test_uninstall_keeps_config_and_data_by_default(tmp_path: Path, calls: list[str]) -> None:
    paths, binary = _installed(tmp_path)
    console = MockConsole()

    report = run_uninstall(
        project=ProjectSettings(),
        paths=paths,
        binary=binary,
        settle_seconds=0.0,
        console=console,
        prompter=AutoPrompter(),
        assume_yes=True,
    )

    assert calls == [
        "systemctl --user stop muesli.service",
        "stop muesli daemon",
        "systemctl --user disable muesli.service",
        "systemctl --user daemon-reload",
    ]
    assert report.removed == (paths.service_file,)
    assert report.kept == (paths.config_dir, paths.data_dir)
    assert not paths.service_file.exists()
    assert paths.config_file.exists()
    assert binary.exists()
    assert console.find(f"rm {binary}")
    assert console.find(f"rm -rf {paths.data_dir}")


def test_uninstall_removes_confirmed_directories(tmp_path: Path, calls: list[str]) -> None:
    paths, binary = _installed(tmp_path)
    prompter = ScriptedPrompter(confirms=[True, True, False])

    report = run_uninstall(
        project=ProjectSettings(),
        paths=paths,
        binary=binary,
        settle_seconds=0.0,
        console=MockConsole(),
        prompter=prompter,
    )

    assert report.removed == (paths.service_file, paths.config_dir)
    assert report.kept == (paths.data_dir,)
    assert not paths.config_dir.exists()
    assert (paths.data_dir / "models" / "base.bin").exists()


def test_uninstall_cancelled(tmp_path: Path, calls: list[str]) -> None:
    paths, binary = _installed(tmp_path)

    report = run_uninstall(
        project=ProjectSettings(),
        paths=paths,
        binary=binary,
        settle_seconds=0.0,
        console=MockConsole(),
        prompter=ScriptedPrompter(confirms=[False]),
    )

    assert report.cancelled is True
    assert calls == []
    assert paths.service_file.exists()


def test_uninstall_nothing_installed(tmp_path: Path, calls: list[str]) -> None:
    console = MockConsole()

    report = run_uninstall(
        project=ProjectSettings(),
        paths=_paths(tmp_path),
        binary=tmp_path / "bin" / "muesli",
        settle_seconds=0.0,
        console=console,
        prompter=AutoPrompter(),
    )

    assert report.removed == ()
    assert calls == []
    assert console.find("does not appear to be installed")
