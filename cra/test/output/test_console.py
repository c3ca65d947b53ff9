"""Tests for cra.output.console module."""

from __future__ import annotations

import pytest

from cra.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DIM) == "dim"


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs[0].message == "hello"
        assert console.outputs[0].style == Style.DEFAULT

    def test_levels_are_prefixed(self) -> None:
        console = MockConsole()
        console.success("released")
        console.info("looking up tags")
        console.warning("no tags fetched")
        console.error("push failed")
        assert console.messages == [
            "OK released",
            "info: looking up tags",
            "warning: no tags fetched",
            "error: push failed",
        ]
        assert console.has_error()
        assert console.has_warning()

    def test_find_and_text(self) -> None:
        console = MockConsole()
        console.print("charts/app")
        console.print("charts/lib")
        assert [o.message for o in console.find("lib")] == ["charts/lib"]
        assert console.text == "charts/app\ncharts/lib"

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.header("Release")


class TestRichConsole:
    def test_info_goes_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().info("Looking up latest tag...")
        captured = capsys.readouterr()
        assert "info: Looking up latest tag..." in captured.out
        assert captured.err == ""

    def test_error_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().error("boom")
        captured = capsys.readouterr()
        assert "error: boom" in captured.err
        assert "::error::" not in captured.err

    def test_github_actions_annotations(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole(github_actions=True)
        console.error("boom")
        console.warning("careful")
        captured = capsys.readouterr()
        assert "::error::boom" in captured.err
        assert "::warning::careful" in captured.err
        assert "warning: careful" in captured.out

    def test_brackets_in_messages_are_literal(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.error("helm push: bad [/oops] tag")
        console.info("values [red] kept")
        console.print("closing [/bold] only", Style.DIM)
        captured = capsys.readouterr()
        assert "error: helm push: bad [/oops] tag" in captured.err
        assert "info: values [red] kept" in captured.out
        assert "closing [/bold] only" in captured.out
