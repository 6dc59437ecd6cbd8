#!/usr/bin/env python3
"""Pytest fixtures for cliplisten tests.

Provides fake command resolvers, native backends, and recording sinks so
sink selection and dispatch can be tested without a clipboard, PATH, or
display.
"""

import asyncio
import os

import pytest

from cliplisten.command_resolver import CommandResolver
from cliplisten.sink import Notifier, Sink, SinkKind, SinkVariant
from cliplisten.sink_factory import SinkFactory


def has_display() -> bool:
    """Check if X11 display is available."""
    return os.environ.get("DISPLAY") is not None


class FakeResolver(CommandResolver):
    """Resolver that only finds the given program names."""

    def __init__(self, available=()):
        super().__init__()
        self.available = set(available)
        self.calls: list[str] = []

    def which(self, program: str) -> str | None:
        self.calls.append(program)
        if program in self.available:
            return f"/usr/bin/{program}"
        return None


class RecordingSink(Sink):
    """Sink that records every write."""

    variant = SinkVariant.NATIVE

    def __init__(self, kind: SinkKind = SinkKind.CLIPBOARD) -> None:
        super().__init__(kind)
        self.writes: list[bytes] = []
        self.written = asyncio.Event()
        self.closed = False

    def write(self, data: bytes) -> None:
        self.writes.append(data)
        self.written.set()

    def close(self) -> None:
        self.closed = True


class RecordingNotifier(Notifier):
    """Notifier that records every notification."""

    variant = SinkVariant.NATIVE

    def __init__(self) -> None:
        self.notifications: list[tuple[str, str]] = []

    def notify(self, title: str, text: str) -> None:
        self.notifications.append((title, text))


class FakeNative:
    """Native backend returning preset sinks and counting probes."""

    def __init__(self, sinks=None, notifier=None):
        self.sinks = dict(sinks or {})
        self._notifier = notifier
        self.sink_probes: list[SinkKind] = []
        self.notifier_probes = 0

    def clipboard_sink(self, kind):
        self.sink_probes.append(kind)
        return self.sinks.get(kind)

    def notifier(self):
        self.notifier_probes += 1
        return self._notifier


@pytest.fixture
def recording_sink() -> RecordingSink:
    """Create a fresh RecordingSink for the clipboard kind."""
    return RecordingSink()


@pytest.fixture
def recording_notifier() -> RecordingNotifier:
    """Create a fresh RecordingNotifier."""
    return RecordingNotifier()


@pytest.fixture
def recording_factory(
    recording_sink: RecordingSink, recording_notifier: RecordingNotifier
) -> SinkFactory:
    """Create a SinkFactory whose native backend yields the recording fakes."""
    native = FakeNative(
        sinks={SinkKind.CLIPBOARD: recording_sink},
        notifier=recording_notifier,
    )
    return SinkFactory(
        encoding="utf-8",
        platform="linux",
        resolver=FakeResolver(),
        native=native,
        environ={},
    )
