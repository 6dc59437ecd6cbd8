#!/usr/bin/env python3
"""Sink and notifier selection with platform fallback.

The factory picks the best available output mechanism for each sink kind
the first time that kind is requested, and reuses the same instance for
every later session. Selection order:

1. An explicit command override for the kind (no fallback: a missing
   command raises SinkUnavailable)
2. The stdout kind maps straight to StdoutSink
3. A native platform API (see sink_native)
4. The first executable command from the platform's candidate table
5. StdoutSink, which always works

Notifiers follow the same order and end with NullNotifier.

The registry is populated by one connection handler at a time; the
listener serializes handlers, so no locking is done here.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

from cliplisten.command_resolver import CommandResolver
from cliplisten.constants import SEARCH_PATH_ENV
from cliplisten.sink import Notifier, NullNotifier, Sink, SinkKind, StdoutSink
from cliplisten.sink_command import (
    CommandNotifier,
    CommandSink,
    CommandSpec,
    InputMode,
    SinkUnavailable,
)
from cliplisten.sink_native import NativeBackend, X11_PLATFORM_PREFIXES

__all__ = ["SinkFactory", "SinkUnavailable", "clipboard_commands", "notifier_commands"]

logger = logging.getLogger(__name__)


def _stdin(*argv: str) -> CommandSpec:
    return CommandSpec(tuple(argv), InputMode.STDIN)


def _args(*argv: str) -> CommandSpec:
    return CommandSpec(tuple(argv), InputMode.ARGS)


def _platform_family(platform: str) -> str:
    """Collapse sys.platform values into the keys of the command tables."""
    if platform.startswith(X11_PLATFORM_PREFIXES):
        return "x11"
    return platform


def clipboard_commands(
    kind: SinkKind, platform: str, environ: Mapping[str, str]
) -> list[CommandSpec]:
    """
    Return candidate clipboard commands for a kind, in preference order.

    Args:
        kind: CLIPBOARD or PRIMARY.
        platform: Value of sys.platform.
        environ: Environment used for WAYLAND_DISPLAY, WINDIR and
            CYGWIN_HOME.
    """
    family = _platform_family(platform)
    primary = kind is SinkKind.PRIMARY

    if family == "x11":
        candidates = []
        if environ.get("WAYLAND_DISPLAY"):
            candidates.append(_stdin("wl-copy", "--primary") if primary else _stdin("wl-copy"))
        if primary:
            candidates += [
                _stdin("xsel", "--primary", "--input"),
                _stdin("xclip", "-selection", "primary"),
            ]
        else:
            candidates += [
                _stdin("xsel", "--clipboard", "--input"),
                _stdin("xclip", "-selection", "clipboard"),
            ]
        return candidates

    if primary:
        # Only X11 has a primary selection
        return []
    if family == "darwin":
        return [_stdin("pbcopy")]
    if family == "cygwin":
        return [_stdin("putclip")]
    if family == "win32":
        windir = environ.get("WINDIR", "")
        cygwin_home = environ.get("CYGWIN_HOME", "")
        return [
            _stdin(windir + "\\system32\\clip.exe"),
            _stdin(cygwin_home + "\\usr\\bin\\putclip.exe"),
        ]
    return []


def notifier_commands(platform: str) -> list[CommandSpec]:
    """Return candidate notification commands in preference order."""
    family = _platform_family(platform)
    if family == "darwin":
        return [
            _stdin("growlnotify", "-t", "{title}"),
            _args("terminal-notifier", "-title", "{title}", "-message", "{text}"),
        ]
    if family == "x11":
        return [
            _args("notify-send", "{title}", "{text}"),
            _args("xmessage", "-buttons", "", "-timeout", "1", "{title}\n", "{text}"),
        ]
    return []


class SinkFactory:
    """
    Process-wide registry of memoized sinks and the shared notifier.

    Args:
        encoding: Output charset of the text handed to sinks.
        platform: Value of sys.platform to select tables for.
        resolver: Executable lookup. Defaults to a CommandResolver searching
            CLIPLISTEN_PATH, or PATH when that is unset.
        native: Native API probe. Defaults to a NativeBackend for the
            platform.
        command_overrides: Explicit clipboard commands per kind.
        notifier_override: Explicit notification command.
        environ: Environment mapping used by the platform tables.
    """

    def __init__(
        self,
        encoding: str = "utf-8",
        platform: str | None = None,
        resolver: CommandResolver | None = None,
        native: NativeBackend | None = None,
        command_overrides: Mapping[SinkKind, CommandSpec] | None = None,
        notifier_override: CommandSpec | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.encoding = encoding
        self.platform = platform if platform is not None else sys.platform
        self.environ = environ if environ is not None else os.environ
        self.resolver = resolver or CommandResolver(self.environ.get(SEARCH_PATH_ENV))
        self.native = native or NativeBackend(self.platform, encoding, self.environ)
        self.command_overrides = dict(command_overrides or {})
        self.notifier_override = notifier_override
        self._sinks: dict[SinkKind, Sink] = {}
        self._notifier: Notifier | None = None

    def get_sink(self, kind: SinkKind) -> Sink:
        """
        Return the sink for a kind, creating it on first use.

        Raises:
            SinkUnavailable: If an explicit override for the kind is not
                executable.
        """
        sink = self._sinks.get(kind)
        if sink is None:
            sink = self._create_sink(kind)
            self._sinks[kind] = sink
            logger.info("Using %s for %s output", sink.label, kind.value)
        return sink

    def get_notifier(self) -> Notifier:
        """
        Return the shared notifier, creating it on first use.

        Raises:
            SinkUnavailable: If an explicit notifier override is not
                executable.
        """
        if self._notifier is None:
            self._notifier = self._create_notifier()
        return self._notifier

    def close(self) -> None:
        """Close every sink and the notifier created so far."""
        for sink in self._sinks.values():
            sink.close()
        self._sinks.clear()
        if self._notifier is not None:
            self._notifier.close()
            self._notifier = None

    def _create_sink(self, kind: SinkKind) -> Sink:
        override = self.command_overrides.get(kind)
        if override is not None:
            return CommandSink.from_candidates(kind, [override], self.resolver, self.encoding)

        if kind is SinkKind.STDOUT:
            return StdoutSink(kind)

        sink = self.native.clipboard_sink(kind)
        if sink is not None:
            return sink

        candidates = clipboard_commands(kind, self.platform, self.environ)
        spec = self.resolver.find_executable(candidates)
        if spec is not None:
            return CommandSink(kind, spec, self.encoding)

        logger.warning(
            "Platform %s has no %s mechanism; echoing received text only",
            self.platform, kind.value,
        )
        return StdoutSink(kind)

    def _create_notifier(self) -> Notifier:
        if self.notifier_override is not None:
            return CommandNotifier.from_candidates([self.notifier_override], self.resolver)

        notifier = self.native.notifier()
        if notifier is not None:
            return notifier

        candidates = notifier_commands(self.platform)
        spec = self.resolver.find_executable(candidates)
        if spec is not None:
            return CommandNotifier(spec)
        return NullNotifier()
