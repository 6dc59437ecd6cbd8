#!/usr/bin/env python3
"""Listener mode implementation for cliplisten.

The listener binds a TCP socket and processes senders one at a time. For
each connection it:
- Checks the handshake key on the first line
- Collects the payload until the sender closes the connection
- Closes the socket and dispatches the text to the clipboard sink
- Shows a notification with a preview of the text

A sender that connects and never closes blocks every later sender; there
is no timeout. asyncio keeps accepting while a session is open, so each
queued connection holds a socket and a handler task until its turn, and
that queue is not bounded.

The listener runs until interrupted (SIGINT/SIGTERM) or until a fatal sink
error occurs.

Usage:
    cliplisten --listen --addr localhost --port 52224
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from contextlib import suppress

from cliplisten.config import ListenerConfig
from cliplisten.constants import HANDSHAKE_LINE_LIMIT
from cliplisten.dispatch import TextDispatcher
from cliplisten.listener_handler import handle_connection
from cliplisten.listener_state import ListenerState
from cliplisten.sink_factory import SinkFactory

logger = logging.getLogger(__name__)


class BindError(Exception):
    """
    Raised when the listening socket cannot be created.

    Attributes:
        addr: Address that could not be bound.
        port: Port that could not be bound.
    """

    def __init__(self, addr: str, port: int, reason: OSError) -> None:
        self.addr = addr
        self.port = port
        super().__init__(f"Cannot listen on {addr}:{port}: {reason}")


def build_dispatcher(config: ListenerConfig) -> TextDispatcher:
    """Create the dispatcher and sink registry for a configuration."""
    factory = SinkFactory(
        encoding=config.encoding,
        command_overrides=config.command_overrides,
        notifier_override=config.notifier_override,
    )
    return TextDispatcher(factory, config.encoding, config.preview_length)


async def start_listener(state: ListenerState) -> asyncio.Server:
    """Bind the listening socket and start accepting connections.

    Args:
        state: The shared listener state.

    Returns:
        The running asyncio server.

    Raises:
        BindError: If the address cannot be bound.
    """
    config = state.config
    try:
        return await asyncio.start_server(
            lambda r, w: handle_connection(state, r, w),
            host=config.addr,
            port=config.port,
            limit=HANDSHAKE_LINE_LIMIT,
        )
    except OSError as e:
        raise BindError(config.addr, config.port, e) from e


def print_startup_message(server: asyncio.Server) -> None:
    """Print the bound addresses to stderr."""
    for sock in server.sockets:
        host, port = sock.getsockname()[:2]
        print(f"Listening on {host}:{port}", file=sys.stderr)


def _install_signal_handlers(shutdown_event: asyncio.Event) -> None:
    """Request shutdown on SIGINT/SIGTERM where the loop supports it."""
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        with suppress(NotImplementedError):
            loop.add_signal_handler(signum, shutdown_event.set)


async def run_listener(
    config: ListenerConfig, dispatcher: TextDispatcher | None = None
) -> None:
    """Run the listener until shutdown.

    Args:
        config: Listener settings.
        dispatcher: Dispatcher to use. Defaults to one built from config.

    Raises:
        BindError: If the address cannot be bound.
        SinkUnavailable: If a required sink could not be constructed.
    """
    state = ListenerState(
        config=config,
        dispatcher=dispatcher or build_dispatcher(config),
    )
    server = await start_listener(state)
    print_startup_message(server)
    _install_signal_handlers(state.shutdown_event)

    try:
        await state.shutdown_event.wait()
    finally:
        server.close()
        state.dispatcher.factory.close()

    if state.exception_holder:
        raise state.exception_holder[0]
    logger.debug("Listener stopped")
