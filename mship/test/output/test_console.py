"""Tests for mship.output.console module."""

from __future__ import annotations

import pytest

from mship.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DIM) == "dim"

    def test_all_styles_exist(self) -> None:
        expected = {"DEFAULT", "SUCCESS", "ERROR", "WARNING", "INFO", "DIM", "BOLD", "HEADER"}
        assert {s.name for s in Style} == expected


class TestMockConsole:
    def test_levels_are_prefixed(self) -> None:
        console = MockConsole()
        console.success("built")
        console.warning("checksum unavailable")
        console.error("gate failed")
        console.info("1.2.3 -> 1.3.0")

        assert console.messages == [
            "OK built",
            "warning: checksum unavailable",
            "error: gate failed",
            "info: 1.2.3 -> 1.3.0",
        ]
        assert console.has_success()
        assert console.has_warning()
        assert console.has_error()

    def test_command_is_shell_quoted(self) -> None:
        console = MockConsole()
        console.command(["git", "commit", "-m", "v1.3.0 release"])

        assert console.outputs[0].message == "$ git commit -m 'v1.3.0 release'"
        assert console.outputs[0].style == Style.DIM

    def test_find_count_and_clear(self) -> None:
        console = MockConsole()
        console.header("build matrix")
        console.newline()
        console.print("  muesli-linux-x86_64-cpu", Style.DIM)

        assert len(console.find("muesli-")) == 1
        assert console.count(Style.HEADER) == 1
        assert console.text == "build matrix\n\n  muesli-linux-x86_64-cpu"

        console.clear()
        assert console.outputs == []


class TestProtocol:
    def test_implementations_match_protocol(self) -> None:
        consoles: list[ConsoleProtocol] = [MockConsole(), RichConsole()]
        for console in consoles:
            assert callable(console.command)
            assert callable(console.header)

    def test_rich_console_does_not_interpret_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("[bold]literal[/bold]")
        console.success("[red]x[/red]")

        out = capsys.readouterr().out
        assert "[bold]literal[/bold]" in out
        assert "[red]x[/red]" in out
