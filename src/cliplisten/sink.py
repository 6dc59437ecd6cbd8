#!/usr/bin/env python3
"""Output sink and notifier capabilities.

A Sink receives the transcoded text of a session. A Notifier shows a short
acknowledgment after each write. Concrete implementations form a closed set
tagged by SinkVariant:

- NATIVE: platform clipboard API (see sink_native, x11_selection)
- COMMAND: external command such as xsel or pbcopy (see sink_command)
- STDOUT: echo to the listener's own standard output (this module)

This module also defines SinkKind, the logical output a sender asks for
through the "type" header.
"""

from __future__ import annotations

import enum
import logging
import sys
from abc import ABC, abstractmethod
from typing import BinaryIO

logger = logging.getLogger(__name__)


class SinkKind(enum.Enum):
    """Logical output requested by the sender's "type" header."""

    CLIPBOARD = "clipboard"
    PRIMARY = "primary"
    STDOUT = "stdout"

    @classmethod
    def from_header(cls, value: str | None) -> SinkKind:
        """Map a "type" header value to a kind.

        Absent or unknown values map to CLIPBOARD. Matching ignores case and
        surrounding whitespace.

        Args:
            value: Header value, or None if the header was not sent.

        Returns:
            The sink kind.
        """
        if value is None:
            return cls.CLIPBOARD
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.debug("Unknown sink type %r, using clipboard", value)
            return cls.CLIPBOARD


class SinkVariant(enum.Enum):
    """Implementation family of a sink or notifier."""

    NATIVE = "native"
    COMMAND = "command"
    STDOUT = "stdout"


class Sink(ABC):
    """Output target for transcoded text.

    Attributes:
        kind: The logical output this sink serves.
        variant: The implementation family.
    """

    variant: SinkVariant

    def __init__(self, kind: SinkKind) -> None:
        self.kind = kind

    @property
    def label(self) -> str:
        """Short description used in notification titles and logs."""
        return f"{self.kind.value}:{self.variant.value}"

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Deliver text already encoded in the output charset."""

    def close(self) -> None:
        """Release resources held by the sink."""


class Notifier(ABC):
    """Secondary output showing a short acknowledgment."""

    variant: SinkVariant

    @abstractmethod
    def notify(self, title: str, text: str) -> None:
        """Show a notification with a title and body."""

    def close(self) -> None:
        """Release resources held by the notifier."""


class StdoutSink(Sink):
    """Sink that echoes text to the process's standard output.

    Used when no clipboard mechanism exists on the host, or when the sender
    asks for the stdout kind explicitly. Writing always succeeds.
    """

    variant = SinkVariant.STDOUT

    def __init__(self, kind: SinkKind, stream: BinaryIO | None = None) -> None:
        super().__init__(kind)
        self._stream = stream

    def write(self, data: bytes) -> None:
        stream = self._stream if self._stream is not None else sys.stdout.buffer
        stream.write(data + b"\n")
        stream.flush()


class NullNotifier(Notifier):
    """Notifier that does nothing."""

    variant = SinkVariant.STDOUT

    def notify(self, title: str, text: str) -> None:
        pass
