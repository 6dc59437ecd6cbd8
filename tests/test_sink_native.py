#!/usr/bin/env python3
"""Tests for native clipboard API probing."""
import sys
from unittest.mock import MagicMock, patch

import pytest

from conftest import FakeResolver
from cliplisten.sink import SinkKind, SinkVariant
from cliplisten.sink_factory import SinkFactory
from cliplisten.sink_native import NativeBackend, Win32BalloonNotifier, Win32ClipboardSink


def fake_win32clipboard() -> MagicMock:
    """Create a stand-in win32clipboard module."""
    module = MagicMock()
    module.CF_TEXT = 1
    module.CF_UNICODETEXT = 13
    return module


def fake_win32gui_modules() -> dict[str, MagicMock]:
    """Create stand-in win32gui, win32con and win32api modules."""
    gui = MagicMock()
    gui.NIF_MESSAGE, gui.NIF_ICON, gui.NIF_TIP, gui.NIF_INFO = 1, 2, 4, 16
    gui.NIM_ADD, gui.NIM_MODIFY, gui.NIM_DELETE = 0, 1, 2
    gui.CreateWindow.return_value = 1234
    con = MagicMock()
    con.WM_USER = 1024
    con.WS_OVERLAPPED, con.WS_SYSMENU, con.CW_USEDEFAULT = 0, 0x80000, -1
    return {"win32gui": gui, "win32con": con, "win32api": MagicMock()}


def test_disabled_by_environment() -> None:
    """Test CLIPLISTEN_NO_NATIVE turns off native probing."""
    backend = NativeBackend("win32", "shift_jis", {"CLIPLISTEN_NO_NATIVE": "1"})
    with patch.dict(sys.modules, {"win32clipboard": fake_win32clipboard()}):
        assert backend.clipboard_sink(SinkKind.CLIPBOARD) is None


def test_unknown_platform_has_no_native_sink() -> None:
    """Test platforms without a native API return None."""
    assert NativeBackend("darwin", "utf-8", {}).clipboard_sink(SinkKind.CLIPBOARD) is None


def test_win32_without_pywin32() -> None:
    """Test a missing win32clipboard module means no native sink."""
    with patch.dict(sys.modules, {"win32clipboard": None}):
        backend = NativeBackend("win32", "shift_jis", {})
        assert backend.clipboard_sink(SinkKind.CLIPBOARD) is None


def test_win32_primary_not_supported() -> None:
    """Test Windows has no native primary selection."""
    with patch.dict(sys.modules, {"win32clipboard": fake_win32clipboard()}):
        backend = NativeBackend("win32", "shift_jis", {})
        assert backend.clipboard_sink(SinkKind.PRIMARY) is None


def test_win32_sink_sets_cf_text() -> None:
    """Test legacy charsets are stored as CF_TEXT bytes."""
    module = fake_win32clipboard()
    with patch.dict(sys.modules, {"win32clipboard": module}):
        sink = NativeBackend("cygwin", "shift_jis", {}).clipboard_sink(SinkKind.CLIPBOARD)

    assert isinstance(sink, Win32ClipboardSink)
    assert sink.variant is SinkVariant.NATIVE
    sink.write(b"\x93\xfa")
    module.OpenClipboard.assert_called_once()
    module.EmptyClipboard.assert_called_once()
    module.SetClipboardData.assert_called_once_with(1, b"\x93\xfa")
    module.CloseClipboard.assert_called_once()


def test_win32_sink_sets_unicode_text_for_utf16() -> None:
    """Test UTF-16 output is stored as CF_UNICODETEXT."""
    module = fake_win32clipboard()
    with patch.dict(sys.modules, {"win32clipboard": module}):
        sink = Win32ClipboardSink(SinkKind.CLIPBOARD, "utf-16-le")
    sink.write("日本".encode("utf-16-le"))
    module.SetClipboardData.assert_called_once_with(13, "日本")


def test_win32_sink_closes_clipboard_on_error() -> None:
    """Test the clipboard is closed even when setting data fails."""
    module = fake_win32clipboard()
    module.SetClipboardData.side_effect = OSError("busy")
    with patch.dict(sys.modules, {"win32clipboard": module}):
        sink = Win32ClipboardSink(SinkKind.CLIPBOARD, "shift_jis")
    with pytest.raises(OSError):
        sink.write(b"x")
    module.CloseClipboard.assert_called_once()


def test_x11_requires_running_loop() -> None:
    """Test X11 probing outside an event loop returns None."""
    backend = NativeBackend("linux", "utf-8", {"DISPLAY": ":0"})
    assert backend.clipboard_sink(SinkKind.CLIPBOARD) is None


@pytest.mark.asyncio
async def test_x11_without_display() -> None:
    """Test X11 probing without DISPLAY returns None."""
    backend = NativeBackend("linux", "utf-8", {})
    assert backend.clipboard_sink(SinkKind.CLIPBOARD) is None


@pytest.mark.asyncio
async def test_x11_sink_created_when_display_opens() -> None:
    """Test a reachable display yields an X11 selection sink."""
    display = MagicMock()
    display.fileno.return_value = 99
    with patch("cliplisten.x11_selection.open_display", return_value=display), \
        patch("cliplisten.x11_selection.X11SelectionSink") as mock_sink_cls:
        backend = NativeBackend("linux", "utf-8", {"DISPLAY": ":0"})
        sink = backend.clipboard_sink(SinkKind.PRIMARY)

    assert sink is mock_sink_cls.return_value
    assert mock_sink_cls.call_args.args[:2] == (SinkKind.PRIMARY, display)
    assert mock_sink_cls.call_args.args[3] == "utf-8"


def test_native_notifier_not_provided_off_windows() -> None:
    """Test non-Windows platforms offer no native notifier."""
    assert NativeBackend("linux", "utf-8", {}).notifier() is None


def test_win32_notifier_without_pywin32() -> None:
    """Test a missing win32gui module means no native notifier."""
    with patch.dict(sys.modules, {"win32gui": None}):
        assert NativeBackend("win32", "shift_jis", {}).notifier() is None


def test_win32_notifier_disabled_by_environment() -> None:
    """Test CLIPLISTEN_NO_NATIVE also turns off the native notifier."""
    backend = NativeBackend("win32", "shift_jis", {"CLIPLISTEN_NO_NATIVE": "1"})
    with patch.dict(sys.modules, fake_win32gui_modules()):
        assert backend.notifier() is None


def test_win32_balloon_shows_title_and_text() -> None:
    """Test a notification modifies the tray icon with an NIF_INFO balloon."""
    modules = fake_win32gui_modules()
    gui = modules["win32gui"]
    with patch.dict(sys.modules, modules):
        notifier = NativeBackend("cygwin", "shift_jis", {}).notifier()

    assert isinstance(notifier, Win32BalloonNotifier)
    assert notifier.variant is SinkVariant.NATIVE
    notifier.notify("(6) clipboard:win32", "Hello")
    notifier.notify("(3) clipboard:win32", "Bye")

    gui.CreateWindow.assert_called_once()
    add_call, first, second = gui.Shell_NotifyIcon.call_args_list
    assert add_call.args[0] == gui.NIM_ADD
    assert first.args[0] == gui.NIM_MODIFY
    nid = first.args[1]
    assert nid[0] == 1234
    assert nid[2] & gui.NIF_INFO
    assert nid[6] == "Hello"
    assert nid[8] == "(6) clipboard:win32"
    assert second.args[1][6] == "Bye"


def test_win32_balloon_truncates_long_text() -> None:
    """Test balloon title and body are cut to the notification area limits."""
    modules = fake_win32gui_modules()
    with patch.dict(sys.modules, modules):
        notifier = Win32BalloonNotifier()
    notifier.notify("t" * 100, "x" * 1000)
    nid = modules["win32gui"].Shell_NotifyIcon.call_args.args[1]
    assert len(nid[6]) == 255
    assert len(nid[8]) == 63


def test_win32_balloon_close_removes_icon() -> None:
    """Test close() deletes the tray icon and destroys the window."""
    modules = fake_win32gui_modules()
    gui = modules["win32gui"]
    with patch.dict(sys.modules, modules):
        notifier = Win32BalloonNotifier()
    notifier.close()
    gui.Shell_NotifyIcon.assert_not_called()

    notifier.notify("title", "text")
    notifier.close()
    gui.Shell_NotifyIcon.assert_called_with(gui.NIM_DELETE, (1234, 0))
    gui.DestroyWindow.assert_called_once_with(1234)


def test_factory_uses_balloon_on_windows() -> None:
    """Test the factory picks the native balloon notifier on Windows."""
    with patch.dict(sys.modules, fake_win32gui_modules()):
        factory = SinkFactory(platform="win32", resolver=FakeResolver(), environ={})
        assert isinstance(factory.get_notifier(), Win32BalloonNotifier)
