#!/usr/bin/env python3
"""
Handshake line parsing.

Every connection starts with a single line of tab-separated fields:

    <key>[\t<name>=<value>]*\n

The first field must equal the configured accept key exactly. The remaining
fields are header pairs, split on the first "=". Everything after the line
is payload and is not looked at here.

Example: b"change_on_install\ttype=clipboard\n" is accepted with the key
"change_on_install" and yields the headers {"type": "clipboard"}.
"""
import logging

logger = logging.getLogger(__name__)

# Header map parsed from the handshake line.
HeaderMap = dict[str, str]

# Separator between fields of the handshake line.
FIELD_SEPARATOR: bytes = b"\t"


def strip_line_ending(line: bytes) -> bytes:
    """
    Remove one trailing LF and one trailing CR from a line.

    Args:
        line: Raw line as returned by StreamReader.readline().

    Returns:
        The line without its terminator.
    """
    if line.endswith(b"\n"):
        line = line[:-1]
    if line.endswith(b"\r"):
        line = line[:-1]
    return line


def key_matches(field: bytes, accept_key: str) -> bool:
    """
    Check the first handshake field against the accept key.

    The comparison is a literal, case-sensitive full match. Prefixes,
    suffixes and substrings of the key are all rejected.

    Args:
        field: First field of the handshake line.
        accept_key: The configured shared key.

    Returns:
        True if the field equals the key.
    """
    return field == accept_key.encode("utf-8")


def parse_headers(fields: list[bytes]) -> HeaderMap:
    """
    Parse "name=value" fields into a header map.

    Values may contain "=". Fields without "=" are skipped. A repeated name
    keeps the last value.

    Args:
        fields: Handshake fields following the key.

    Returns:
        Mapping of header names to values.
    """
    headers: HeaderMap = {}
    for field in fields:
        name, sep, value = field.partition(b"=")
        if not sep:
            logger.debug("Ignoring malformed header field: %r", field)
            continue
        headers[name.decode("utf-8", "replace")] = value.decode("utf-8", "replace")
    return headers


def parse_handshake(line: bytes, accept_key: str) -> HeaderMap | None:
    """
    Parse a handshake line.

    Args:
        line: The first line read from the connection, with or without its
            line terminator.
        accept_key: The configured shared key.

    Returns:
        The header map if the key matched, None if the handshake is rejected.
    """
    fields = strip_line_ending(line).split(FIELD_SEPARATOR)
    if not key_matches(fields[0], accept_key):
        return None
    return parse_headers(fields[1:])


def encode_handshake(accept_key: str, headers: HeaderMap | None = None) -> bytes:
    """
    Build a handshake line for sending.

    Args:
        accept_key: The shared key expected by the listener.
        headers: Optional header pairs.

    Returns:
        The encoded line including the trailing newline.

    Raises:
        ValueError: If the key or a header contains a tab or line break, or
            a header name contains "=".
    """
    fields = [accept_key]
    for name, value in (headers or {}).items():
        if "=" in name:
            raise ValueError(f"Header name must not contain '=': {name!r}")
        fields.append(f"{name}={value}")
    for field in fields:
        if any(c in field for c in "\t\r\n"):
            raise ValueError(f"Handshake field contains a separator: {field!r}")
    return "\t".join(fields).encode("utf-8") + b"\n"
