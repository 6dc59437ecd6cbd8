#!/usr/bin/env python3
"""Tests for external-command sinks and notifiers."""
import logging
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeResolver
from cliplisten.sink import SinkKind, SinkVariant
from cliplisten.sink_command import (
    CommandNotifier,
    CommandSink,
    CommandSpec,
    InputMode,
    SinkUnavailable,
)


def completed(returncode: int = 0) -> MagicMock:
    """Create a fake CompletedProcess."""
    result = MagicMock()
    result.returncode = returncode
    return result


class TestCommandSpec:
    """Tests for CommandSpec parsing and rendering."""

    def test_parse_stdin_command(self) -> None:
        """Test a command without {text} pipes its input."""
        spec = CommandSpec.parse("xclip -selection clipboard")
        assert spec.argv == ("xclip", "-selection", "clipboard")
        assert spec.mode is InputMode.STDIN

    def test_parse_args_command(self) -> None:
        """Test a command with {text} takes the text as an argument."""
        spec = CommandSpec.parse("notify-send '{title}' '{text}'")
        assert spec.argv == ("notify-send", "{title}", "{text}")
        assert spec.mode is InputMode.ARGS

    def test_parse_empty_raises(self) -> None:
        """Test an empty command line is refused."""
        with pytest.raises(ValueError):
            CommandSpec.parse("   ")

    def test_render_substitutes_placeholders(self) -> None:
        """Test ARGS rendering substitutes title and text."""
        spec = CommandSpec(("notify-send", "{title}", "{text}"), InputMode.ARGS)
        assert spec.render("(5) clipboard:xsel", "Hello") == [
            "notify-send", "(5) clipboard:xsel", "Hello",
        ]

    def test_render_stdin_keeps_text_out_of_argv(self) -> None:
        """Test STDIN rendering only substitutes the title."""
        spec = CommandSpec(("growlnotify", "-t", "{title}"), InputMode.STDIN)
        assert spec.render("T", "{text}") == ["growlnotify", "-t", "T"]

    def test_with_program_and_name(self) -> None:
        """Test replacing the program keeps arguments and derives the name."""
        spec = CommandSpec(("xsel", "--input")).with_program("/usr/bin/xsel")
        assert spec.argv == ("/usr/bin/xsel", "--input")
        assert spec.name == "xsel"
        assert CommandSpec(("C:\\Windows\\system32\\clip.exe",)).name == "clip.exe"


class TestCommandSink:
    """Tests for CommandSink writes."""

    def test_write_pipes_bytes_to_stdin(self) -> None:
        """Test the transcoded bytes are piped unchanged."""
        sink = CommandSink(SinkKind.CLIPBOARD, CommandSpec(("/usr/bin/xsel", "--input")))
        with patch("subprocess.run", return_value=completed()) as mock_run:
            sink.write(b"\x93\xfa")

        mock_run.assert_called_once_with(
            ["/usr/bin/xsel", "--input"],
            input=b"\x93\xfa",
            stdout=subprocess.DEVNULL,
            check=False,
        )
        assert sink.variant is SinkVariant.COMMAND
        assert sink.label == "clipboard:xsel"

    def test_write_args_mode_decodes_with_output_encoding(self) -> None:
        """Test ARGS-mode sinks get the text decoded from the output charset."""
        spec = CommandSpec(("setclip", "{text}"), InputMode.ARGS)
        sink = CommandSink(SinkKind.CLIPBOARD, spec, encoding="shift_jis")
        with patch("subprocess.run", return_value=completed()) as mock_run:
            sink.write("日本".encode("shift_jis"))
        assert mock_run.call_args.args[0] == ["setclip", "日本"]

    def test_nonzero_exit_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a failing command is logged, not raised."""
        sink = CommandSink(SinkKind.CLIPBOARD, CommandSpec(("pbcopy",)))
        with patch("subprocess.run", return_value=completed(1)):
            with caplog.at_level(logging.WARNING):
                sink.write(b"x")
        assert "exited with status 1" in caplog.text

    def test_start_failure_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test a command that cannot start is logged, not raised."""
        sink = CommandSink(SinkKind.CLIPBOARD, CommandSpec(("pbcopy",)))
        with patch("subprocess.run", side_effect=FileNotFoundError("gone")):
            with caplog.at_level(logging.WARNING):
                sink.write(b"x")
        assert "Failed to run pbcopy" in caplog.text

    def test_from_candidates_picks_first_executable(self) -> None:
        """Test the first available candidate is wrapped with its full path."""
        candidates = [CommandSpec(("xsel", "--input")), CommandSpec(("xclip",))]
        sink = CommandSink.from_candidates(
            SinkKind.CLIPBOARD, candidates, FakeResolver({"xsel", "xclip"})
        )
        assert sink.spec.argv == ("/usr/bin/xsel", "--input")

    def test_from_candidates_raises_with_programs_tried(self) -> None:
        """Test no executable candidate raises SinkUnavailable listing them."""
        candidates = [CommandSpec(("xsel",)), CommandSpec(("xclip",))]
        with pytest.raises(SinkUnavailable) as exc_info:
            CommandSink.from_candidates(SinkKind.CLIPBOARD, candidates, FakeResolver())
        assert exc_info.value.tried == ["xsel", "xclip"]
        assert "xsel, xclip" in str(exc_info.value)


class TestCommandNotifier:
    """Tests for CommandNotifier invocations."""

    def test_args_mode_substitutes_title_and_text(self) -> None:
        """Test notify-send style commands get both as arguments."""
        notifier = CommandNotifier(CommandSpec(("notify-send", "{title}", "{text}"), InputMode.ARGS))
        with patch("subprocess.run", return_value=completed()) as mock_run:
            notifier.notify("(6) clipboard:xsel", "Hello")
        assert mock_run.call_args.args[0] == ["notify-send", "(6) clipboard:xsel", "Hello"]
        assert mock_run.call_args.kwargs["input"] == b""

    def test_stdin_mode_pipes_text(self) -> None:
        """Test growlnotify style commands get the text on stdin."""
        notifier = CommandNotifier(CommandSpec(("growlnotify", "-t", "{title}")))
        with patch("subprocess.run", return_value=completed()) as mock_run:
            notifier.notify("T", "日本")
        assert mock_run.call_args.args[0] == ["growlnotify", "-t", "T"]
        assert mock_run.call_args.kwargs["input"] == "日本".encode("utf-8")

    def test_from_candidates_raises_when_missing(self) -> None:
        """Test a missing notifier command raises SinkUnavailable."""
        with pytest.raises(SinkUnavailable, match="notifier"):
            CommandNotifier.from_candidates([CommandSpec(("notify-send",))], FakeResolver())
