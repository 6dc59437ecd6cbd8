#!/usr/bin/env python3
"""Dispatch of received text to the selected sink.

This module provides the TextDispatcher that takes a finished session's
payload and headers, runs the encoding pipeline, hands the transcoded bytes
to the sink chosen by the "type" header, and then shows a notification with
a short preview of the original text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cliplisten.constants import DEFAULT_PREVIEW_LENGTH
from cliplisten.encoding import EncodingGuess, decode_text, guess_encoding, transcode
from cliplisten.sink import SinkKind, SinkVariant

if TYPE_CHECKING:
    from collections.abc import Mapping

    from cliplisten.sink_factory import SinkFactory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of one dispatch.

    Attributes:
        kind: Sink kind the text went to.
        label: Label of the sink that received it.
        guess: Encoding guess for the payload.
        length: Length in bytes of the transcoded text.
    """

    kind: SinkKind
    label: str
    guess: EncodingGuess
    length: int


def notification_title(length: int, label: str) -> str:
    """Format the notification title from byte length and sink label."""
    return f"({length}) {label}"


def preview(text: str, length: int) -> str:
    """Return the first characters of text for a notification body."""
    return text[:length].rstrip()


class TextDispatcher:
    """Route received payloads to sinks.

    Args:
        factory: Registry that resolves and memoizes sinks.
        encoding: Output charset.
        preview_length: Characters of original text shown in notifications.
    """

    def __init__(
        self,
        factory: SinkFactory,
        encoding: str,
        preview_length: int = DEFAULT_PREVIEW_LENGTH,
    ) -> None:
        self.factory = factory
        self.encoding = encoding
        self.preview_length = preview_length

    def write_text(self, raw: bytes, headers: Mapping[str, str]) -> DispatchResult | None:
        """Transcode a payload and write it to the sink for its type.

        Empty payloads are ignored: no sink or notifier is touched.

        Args:
            raw: Payload bytes as received.
            headers: Header map from the handshake line.

        Returns:
            The dispatch result, or None for an empty payload.

        Raises:
            SinkUnavailable: If the sink or notifier cannot be constructed.
        """
        if not raw:
            logger.debug("Empty payload, nothing to dispatch")
            return None

        guess = guess_encoding(raw)
        text = decode_text(raw, guess)
        data = transcode(raw, guess, self.encoding)

        kind = SinkKind.from_header(headers.get("type"))
        sink = self.factory.get_sink(kind)
        sink.write(data)

        logger.debug("[%s] encoding: %s -> %s", sink.label, guess.name, self.encoding)
        if sink.variant is not SinkVariant.STDOUT:
            logger.debug("%s", text)

        title = notification_title(len(data), sink.label)
        notifier = self.factory.get_notifier()
        try:
            notifier.notify(title, preview(text, self.preview_length))
        except OSError as e:
            logger.warning("Notification failed: %s", e)

        return DispatchResult(kind=kind, label=sink.label, guess=guess, length=len(data))
