#!/usr/bin/env python3
"""Listener state.

This module provides the ListenerState dataclass that groups everything the
connection handler shares across sessions: configuration, the dispatcher
(which owns the sink registry), the lock that serializes sessions, and the
shutdown signalling used for fatal errors.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from cliplisten.config import ListenerConfig
from cliplisten.dispatch import TextDispatcher


@dataclass
class ListenerState:
    """State shared by all connections of one listener.

    Attributes:
        config: Listener settings.
        dispatcher: Routes received text to sinks.
        lock: Held for the whole of each session, so connections are read
            and dispatched strictly one after another.
        shutdown_event: Set to stop the listener.
        exception_holder: Fatal errors raised while handling a connection,
            re-raised by the listener after shutdown.
        sessions_handled: Number of connections processed so far.
    """

    config: ListenerConfig
    dispatcher: TextDispatcher
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    shutdown_event: asyncio.Event = field(default_factory=asyncio.Event)
    exception_holder: list[Exception] = field(default_factory=list)
    sessions_handled: int = 0
