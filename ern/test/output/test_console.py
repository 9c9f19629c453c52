"""Tests for ern.output.console module."""

from __future__ import annotations

import pytest

from ern.output.console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DIM) == "dim"
        assert str(Style.DEFAULT) == "default"


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("cauldron: transaction started", Style.DIM)
        assert console.outputs == [OutputRecord("cauldron: transaction started", Style.DIM)]

    def test_prefixed_helpers(self) -> None:
        console = MockConsole()
        console.success("published")
        console.error("not found")
        console.warning("skipping 1.x")
        console.info("fyi")
        assert console.messages == [
            "OK published",
            "error: not found",
            "warning: skipping 1.x",
            "info: fyi",
        ]
        assert console.has_error()
        assert console.has_warning()

    def test_header_and_newline(self) -> None:
        console = MockConsole()
        console.header("Container")
        console.newline()
        assert console.outputs[0].style == Style.HEADER
        assert console.outputs[1].message == ""

    def test_text_and_find(self) -> None:
        console = MockConsole()
        console.print("myapp:android:1.0.0")
        console.print("myapp:ios:1.0.0")
        assert console.text == "myapp:android:1.0.0\nmyapp:ios:1.0.0"
        assert len(console.find("android")) == 1
        assert console.find("windows") == []

    def test_no_error_by_default(self) -> None:
        console = MockConsole()
        console.print("plain")
        assert not console.has_error()
        assert not console.has_warning()

    def test_implements_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.newline()


class TestRichConsole:
    def test_plain_print(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("myapp:android:1.0.0")
        assert "myapp:android:1.0.0" in capsys.readouterr().out

    def test_markup_in_message_is_escaped(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.warning("range [1.0.0] has no match")
        out = capsys.readouterr().out
        assert "warning:" in out
        assert "[1.0.0]" in out

    def test_error_prefix(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().error("boom")
        assert "error: boom" in capsys.readouterr().out
