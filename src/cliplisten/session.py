#!/usr/bin/env python3
"""Per-connection session state and reading.

A session is created for each accepted connection. It reads the handshake
line, and if the key matches, collects every remaining byte until the peer
closes its side of the connection. There is no length prefix and no idle
timeout: the peer signals completion by closing.

State machine:
    AWAITING_HANDSHAKE -> READING_PAYLOAD -> COMPLETE
    AWAITING_HANDSHAKE -> REJECTED
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field

from cliplisten.handshake import HeaderMap, parse_handshake

logger = logging.getLogger(__name__)

# Size of each payload read from the stream.
READ_CHUNK_SIZE: int = 65536


class SessionState(enum.Enum):
    """Progress of a session through the handshake protocol."""

    AWAITING_HANDSHAKE = "awaiting_handshake"
    READING_PAYLOAD = "reading_payload"
    COMPLETE = "complete"
    REJECTED = "rejected"


@dataclass
class Session:
    """One accepted connection.

    Attributes:
        peer: Remote (host, port) of the sender.
        state: Current protocol state.
        headers: Header map parsed from the handshake line.
        payload: Bytes received after the handshake line.
    """

    peer: tuple[str, int]
    state: SessionState = SessionState.AWAITING_HANDSHAKE
    headers: HeaderMap = field(default_factory=dict)
    payload: bytearray = field(default_factory=bytearray)

    @property
    def accepted(self) -> bool:
        """True once the handshake key has matched."""
        return self.state in (SessionState.READING_PAYLOAD, SessionState.COMPLETE)

    @property
    def text(self) -> bytes:
        """The received payload as immutable bytes."""
        return bytes(self.payload)

    def describe_peer(self) -> str:
        """Format the peer address as host:port."""
        return f"{self.peer[0]}:{self.peer[1]}"


def peer_address(writer: asyncio.StreamWriter) -> tuple[str, int]:
    """Return the (host, port) of the connection's remote end."""
    peername = writer.get_extra_info("peername")
    if not peername:
        return ("?", 0)
    return (str(peername[0]), int(peername[1]))


async def read_session(
    reader: asyncio.StreamReader,
    accept_key: str,
    peer: tuple[str, int] = ("?", 0),
) -> Session:
    """Read a full session from a stream.

    Reads the handshake line and checks the key. On a mismatch the session
    is rejected and nothing more is read from the stream. Otherwise all
    remaining bytes are collected verbatim until EOF.

    Args:
        reader: The asyncio StreamReader for the connection.
        accept_key: The configured shared key.
        peer: Remote address, recorded for logging.

    Returns:
        The finished session in state COMPLETE or REJECTED.
    """
    session = Session(peer=peer)

    try:
        line = await reader.readline()
    except ValueError:
        # StreamReader raises ValueError when the line exceeds its limit
        logger.debug("Handshake line from %s exceeds limit", session.describe_peer())
        session.state = SessionState.REJECTED
        return session

    if not line:
        logger.debug("Connection from %s closed before handshake", session.describe_peer())
        session.state = SessionState.REJECTED
        return session

    headers = parse_handshake(line, accept_key)
    if headers is None:
        session.state = SessionState.REJECTED
        return session

    session.headers = headers
    session.state = SessionState.READING_PAYLOAD

    while True:
        chunk = await reader.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        session.payload.extend(chunk)

    session.state = SessionState.COMPLETE
    return session
