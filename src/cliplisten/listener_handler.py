#!/usr/bin/env python3
"""Listener connection handler.

This module provides the handler for accepted connections. Each connection
is read to completion under the listener lock, closed, and its payload is
dispatched before the lock is released, so the next sender is only served
once the previous one has been fully processed.
"""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import TYPE_CHECKING

from cliplisten.session import peer_address, read_session
from cliplisten.sink_command import SinkUnavailable

if TYPE_CHECKING:
    import asyncio

    from cliplisten.listener_state import ListenerState

logger = logging.getLogger(__name__)


async def handle_connection(
    state: ListenerState,
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
) -> None:
    """Handle a single sender connection.

    Reads the session, closes the socket, and dispatches the payload. A
    rejected handshake or a connection error only ends this connection.
    Connections accepted while another session holds the lock wait here
    with their sockets open.
    SinkUnavailable is fatal: it is stored in the exception holder and the
    listener is asked to shut down.

    Args:
        state: The shared listener state.
        reader: The asyncio StreamReader for the connection.
        writer: The asyncio StreamWriter for the connection.
    """
    peer = peer_address(writer)

    async with state.lock:
        try:
            session = await read_session(reader, state.config.accept_key, peer)
        except ConnectionError as e:
            logger.error("Connection error from %s:%s: %s", peer[0], peer[1], e)
            return
        finally:
            writer.close()
            with suppress(OSError):
                await writer.wait_closed()

        state.sessions_handled += 1
        if not session.accepted:
            logger.info("(%s) *** NOT ACCEPTED ***", session.describe_peer())
            return
        logger.info(
            "(%s) *** RECEIVE TEXT *** %d", session.describe_peer(), len(session.payload)
        )

        try:
            state.dispatcher.write_text(session.text, session.headers)
        except SinkUnavailable as e:
            logger.error("Sink error: %s", e)
            state.exception_holder.append(e)
            state.shutdown_event.set()
