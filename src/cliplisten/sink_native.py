#!/usr/bin/env python3
"""Native clipboard API probing.

NativeBackend answers one question for the SinkFactory: is there a platform
clipboard API on this host, and if so, which Sink wraps it? Candidates:

- Windows and Cygwin: win32clipboard from pywin32, and a notification
  area balloon through win32gui
- X11 hosts with DISPLAY set: selection ownership through python-xlib

A None result means "not available here" and sends the factory on to the
external-command probe.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
from collections.abc import Mapping

from cliplisten.constants import NO_NATIVE_ENV
from cliplisten.sink import Notifier, Sink, SinkKind, SinkVariant

logger = logging.getLogger(__name__)

WINDOWS_PLATFORMS: frozenset[str] = frozenset({"win32", "cygwin"})

# Notification area limits, in characters, for the balloon title and body.
BALLOON_TITLE_LIMIT: int = 63
BALLOON_TEXT_LIMIT: int = 255
BALLOON_TIMEOUT_MS: int = 10000

# Platforms where clipboard selections are served by an X server.
X11_PLATFORM_PREFIXES: tuple[str, ...] = ("linux", "freebsd", "openbsd", "netbsd")


class Win32ClipboardSink(Sink):
    """Sink that sets the Windows clipboard through win32clipboard.

    Legacy charsets are stored as CF_TEXT bytes. UTF-16 output is decoded
    and stored as CF_UNICODETEXT.
    """

    variant = SinkVariant.NATIVE

    def __init__(self, kind: SinkKind, encoding: str) -> None:
        super().__init__(kind)
        import win32clipboard

        self._clipboard = win32clipboard
        self.encoding = encoding
        self.unicode = codecs.lookup(encoding).name.startswith("utf-16")

    @property
    def label(self) -> str:
        return f"{self.kind.value}:win32"

    def write(self, data: bytes) -> None:
        wc = self._clipboard
        wc.OpenClipboard()
        try:
            wc.EmptyClipboard()
            if self.unicode:
                wc.SetClipboardData(wc.CF_UNICODETEXT, data.decode(self.encoding))
            else:
                wc.SetClipboardData(wc.CF_TEXT, data)
        finally:
            wc.CloseClipboard()


class Win32BalloonNotifier(Notifier):
    """Notifier that shows a balloon tip from a notification area icon.

    The hidden owner window and the icon are created on the first
    notification and reused until close().
    """

    variant = SinkVariant.NATIVE

    # Private message id for the icon's callback messages
    CALLBACK_MESSAGE_OFFSET = 20

    def __init__(self) -> None:
        import win32api
        import win32con
        import win32gui

        self._api = win32api
        self._con = win32con
        self._gui = win32gui
        self._hwnd: int | None = None
        self._icon = None

    @property
    def callback_message(self) -> int:
        return self._con.WM_USER + self.CALLBACK_MESSAGE_OFFSET

    def _ensure_icon(self) -> int:
        if self._hwnd is not None:
            return self._hwnd
        gui, con = self._gui, self._con

        wc = gui.WNDCLASS()
        wc.hInstance = self._api.GetModuleHandle(None)
        wc.lpszClassName = "cliplisten"
        wc.lpfnWndProc = {}
        class_atom = gui.RegisterClass(wc)
        hwnd = gui.CreateWindow(
            class_atom, "cliplisten", con.WS_OVERLAPPED | con.WS_SYSMENU,
            0, 0, con.CW_USEDEFAULT, con.CW_USEDEFAULT, 0, 0, wc.hInstance, None,
        )
        self._icon = gui.LoadIcon(0, con.IDI_APPLICATION)
        flags = gui.NIF_ICON | gui.NIF_MESSAGE | gui.NIF_TIP
        gui.Shell_NotifyIcon(
            gui.NIM_ADD, (hwnd, 0, flags, self.callback_message, self._icon, "cliplisten")
        )
        self._hwnd = hwnd
        return hwnd

    def notify(self, title: str, text: str) -> None:
        hwnd = self._ensure_icon()
        gui = self._gui
        gui.Shell_NotifyIcon(
            gui.NIM_MODIFY,
            (
                hwnd, 0, gui.NIF_INFO, self.callback_message, self._icon, "cliplisten",
                text[:BALLOON_TEXT_LIMIT], BALLOON_TIMEOUT_MS, title[:BALLOON_TITLE_LIMIT],
            ),
        )

    def close(self) -> None:
        if self._hwnd is None:
            return
        self._gui.Shell_NotifyIcon(self._gui.NIM_DELETE, (self._hwnd, 0))
        self._gui.DestroyWindow(self._hwnd)
        self._hwnd = None


class NativeBackend:
    """Probe for native clipboard and notification APIs.

    Args:
        platform: Value of sys.platform to probe for.
        encoding: Output charset, needed by sinks that store text.
        environ: Environment mapping (DISPLAY, CLIPLISTEN_NO_NATIVE).
    """

    def __init__(
        self,
        platform: str,
        encoding: str,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.platform = platform
        self.encoding = encoding
        self.environ = environ if environ is not None else os.environ

    @property
    def disabled(self) -> bool:
        """True if native probing is switched off by the environment."""
        return bool(self.environ.get(NO_NATIVE_ENV))

    def clipboard_sink(self, kind: SinkKind) -> Sink | None:
        """Return a native sink for the kind, or None if unavailable."""
        if self.disabled:
            return None
        if self.platform in WINDOWS_PLATFORMS:
            return self._win32_sink(kind)
        if self.platform.startswith(X11_PLATFORM_PREFIXES):
            return self._x11_sink(kind)
        return None

    def notifier(self) -> Notifier | None:
        """Return a native notifier, or None if unavailable."""
        if self.disabled or self.platform not in WINDOWS_PLATFORMS:
            return None
        try:
            return Win32BalloonNotifier()
        except ImportError:
            logger.debug("win32gui not available")
            return None

    def _win32_sink(self, kind: SinkKind) -> Sink | None:
        if kind is not SinkKind.CLIPBOARD:
            return None
        try:
            return Win32ClipboardSink(kind, self.encoding)
        except ImportError:
            logger.debug("win32clipboard not available")
            return None

    def _x11_sink(self, kind: SinkKind) -> Sink | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Serving selection requests needs the listener's event loop
            return None
        try:
            from cliplisten.x11_selection import X11SelectionSink, open_display
        except ImportError:
            logger.debug("python-xlib not available")
            return None
        display = open_display(self.environ)
        if display is None:
            return None
        return X11SelectionSink(kind, display, loop, self.encoding)
