#!/usr/bin/env python3
"""Send mode implementation for cliplisten.

The sender connects to a listener, writes the handshake line followed by
the payload, and closes the connection to mark the end of the text. The
listener never answers, so the sender only waits for the close to finish.

Connection attempts are retried with tenacity exponential backoff for a
bounded number of attempts.
"""

from __future__ import annotations

import asyncio
import logging

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cliplisten.client_constants import (
    CONNECT_ATTEMPTS,
    INITIAL_WAIT,
    MAX_WAIT,
    WAIT_MULTIPLIER,
)
from cliplisten.handshake import HeaderMap, encode_handshake

logger = logging.getLogger(__name__)


async def connect_to_listener(
    addr: str, port: int
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Connect to a cliplisten listener.

    Args:
        addr: Listener address.
        port: Listener port.

    Returns:
        Tuple of (StreamReader, StreamWriter) for the connection.

    Raises:
        ConnectionError: If connection fails (refused, unreachable, etc).
    """
    try:
        return await asyncio.open_connection(addr, port)
    except OSError as e:
        raise ConnectionError(f"Failed to connect to {addr}:{port}: {e}") from e


@retry(
    wait=wait_exponential(
        multiplier=WAIT_MULTIPLIER,
        min=INITIAL_WAIT,
        max=MAX_WAIT,
    ),
    retry=retry_if_exception_type(ConnectionError),
    stop=stop_after_attempt(CONNECT_ATTEMPTS),
    reraise=True,
)
async def connect_with_retry(
    addr: str, port: int
) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Connect to a listener, retrying with exponential backoff.

    Raises:
        ConnectionError: If every attempt fails.
    """
    logger.debug("Connecting to listener at %s:%d", addr, port)
    try:
        return await connect_to_listener(addr, port)
    except ConnectionError:
        logger.warning("Connection to %s:%d failed, will retry", addr, port)
        raise


async def send_text(
    addr: str,
    port: int,
    accept_key: str,
    payload: bytes,
    headers: HeaderMap | None = None,
) -> None:
    """Send one payload to a listener.

    Args:
        addr: Listener address.
        port: Listener port.
        accept_key: Shared handshake key.
        payload: Text bytes to send, in any encoding the listener can guess.
        headers: Optional handshake headers such as {"type": "clipboard"}.

    Raises:
        ValueError: If the key or headers contain protocol separators.
        ConnectionError: If the listener cannot be reached.
    """
    line = encode_handshake(accept_key, headers)
    _, writer = await connect_with_retry(addr, port)
    try:
        writer.write(line)
        writer.write(payload)
        await writer.drain()
        if writer.can_write_eof():
            writer.write_eof()
    finally:
        writer.close()
        await writer.wait_closed()
    logger.debug("Sent %d bytes to %s:%d", len(payload), addr, port)
