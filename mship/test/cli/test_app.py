from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

import mship.cli.commands.setup_cmd as setup_cmd
from mship import __version__
from mship.cli.app import app

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for name in ("release", "install", "setup", "uninstall", "variant"):
        assert name in result.stdout


def test_invalid_settings_exit_nonzero(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "mship.toml").write_text("[project\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(app, ["variant"])

    assert result.exit_code == 1


def test_setup_rejects_unknown_step(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    ran: list[object] = []
    monkeypatch.setattr(setup_cmd, "run_setup", lambda *args, **kwargs: ran.append(args))

    result = runner.invoke(app, ["setup", "--skip", "nonsense"])

    assert result.exit_code == 1
    assert ran == []
