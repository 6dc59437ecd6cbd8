#!/usr/bin/env python3
"""Listener configuration.

This module provides the ListenerConfig dataclass that groups every
setting the listener and dispatcher need. The CLI fills it from options and
CLIPLISTEN_* environment variables; tests build it directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cliplisten.constants import (
    DEFAULT_ACCEPT_KEY,
    DEFAULT_ADDR,
    DEFAULT_ENCODING,
    DEFAULT_PORT,
    DEFAULT_PREVIEW_LENGTH,
)
from cliplisten.sink import SinkKind
from cliplisten.sink_command import CommandSpec


@dataclass
class ListenerConfig:
    """Settings for one listener process.

    Attributes:
        addr: Address to bind.
        port: TCP port to bind. 0 picks a free port.
        accept_key: Shared handshake key.
        encoding: Output charset for transcoded text.
        verbosity: 0 silent, 1 connection summaries, 2 full echo.
        preview_length: Characters of text shown in notifications.
        command_overrides: Explicit clipboard commands per sink kind.
        notifier_override: Explicit notification command.
    """

    addr: str = DEFAULT_ADDR
    port: int = DEFAULT_PORT
    accept_key: str = DEFAULT_ACCEPT_KEY
    encoding: str = DEFAULT_ENCODING
    verbosity: int = 0
    preview_length: int = DEFAULT_PREVIEW_LENGTH
    command_overrides: dict[SinkKind, CommandSpec] = field(default_factory=dict)
    notifier_override: CommandSpec | None = None
