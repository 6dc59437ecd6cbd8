#!/usr/bin/env python3
"""
Character encoding guessing and transcoding.

Senders do not declare the charset of their payload. The listener guesses it
from a small, fixed, ordered list of candidates oriented towards Japanese
text and transcodes the payload into the configured output charset.

Guessing rules, in order:
- A byte order mark selects utf-8-sig, utf-32 or utf-16.
- Pure 7-bit data without ESC is ascii.
- Otherwise each eligible candidate is decoded strictly. ESC (0x1b) in the
  data makes iso2022_jp the only eligible candidate; without ESC it is
  skipped. Every candidate that decodes cleanly is a suspect.

With several suspects the guess is ambiguous and the first suspect in list
order is taken. The order is a plain tie-break, nothing more. With no
suspects the data is decoded as utf-8 with replacement characters.
"""
import codecs
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Ordered candidates tried on 8-bit or escaped data.
CANDIDATE_ENCODINGS: tuple[str, ...] = ("utf-8", "euc_jp", "shift_jis", "iso2022_jp")

# Candidate eligible only when the data contains ESC.
ESCAPED_ENCODING: str = "iso2022_jp"

# Codec used when no candidate decodes cleanly.
FALLBACK_ENCODING: str = "utf-8"

ESC: int = 0x1B

# Checked longest first: the UTF-32 LE BOM starts with the UTF-16 LE BOM.
BOMS: tuple[tuple[bytes, str], ...] = (
    (codecs.BOM_UTF8, "utf-8-sig"),
    (codecs.BOM_UTF32_LE, "utf-32"),
    (codecs.BOM_UTF32_BE, "utf-32"),
    (codecs.BOM_UTF16_LE, "utf-16"),
    (codecs.BOM_UTF16_BE, "utf-16"),
)


@dataclass(frozen=True)
class EncodingGuess:
    """
    Result of guessing a payload's encoding.

    Attributes:
        name: Codec name used to decode the payload.
        suspects: Every candidate that decoded cleanly, in candidate order.
            Empty when the fallback codec was used.
    """

    name: str
    suspects: tuple[str, ...] = ()

    @property
    def ambiguous(self) -> bool:
        """True if more than one candidate decoded cleanly."""
        return len(self.suspects) > 1

    @property
    def fallback(self) -> bool:
        """True if no candidate matched and the fallback codec was used."""
        return not self.suspects


def validate_encoding(name: str) -> str:
    """
    Check that a charset name is known to Python.

    Args:
        name: Charset name as given by the user.

    Returns:
        The canonical codec name.

    Raises:
        LookupError: If no codec is registered under that name.
    """
    return codecs.lookup(name).name


def _decodes(data: bytes, encoding: str) -> bool:
    """Return True if data decodes strictly with the given codec."""
    try:
        data.decode(encoding)
    except UnicodeDecodeError:
        return False
    return True


def guess_encoding(data: bytes) -> EncodingGuess:
    """
    Guess the encoding of a payload.

    Args:
        data: Raw payload bytes.

    Returns:
        The guess. Deterministic for identical input.
    """
    for bom, name in BOMS:
        if data.startswith(bom):
            return EncodingGuess(name, (name,))

    escaped = ESC in data
    if not escaped and data.isascii():
        return EncodingGuess("ascii", ("ascii",))

    if escaped:
        eligible = (ESCAPED_ENCODING,)
    else:
        eligible = tuple(e for e in CANDIDATE_ENCODINGS if e != ESCAPED_ENCODING)

    suspects = tuple(e for e in eligible if _decodes(data, e))
    if not suspects:
        logger.warning(
            "No candidate encoding matched; decoding as %s with replacement",
            FALLBACK_ENCODING,
        )
        return EncodingGuess(FALLBACK_ENCODING, ())

    if len(suspects) > 1:
        logger.debug(
            "Encoding ambiguous (%s); taking %s", " or ".join(suspects), suspects[0]
        )
    return EncodingGuess(suspects[0], suspects)


def decode_text(data: bytes, guess: EncodingGuess) -> str:
    """
    Decode a payload with a previously computed guess.

    Args:
        data: Raw payload bytes.
        guess: Result of guess_encoding() for the same bytes.

    Returns:
        The decoded text. Undecodable bytes only occur with the fallback
        codec and become U+FFFD.
    """
    return data.decode(guess.name, "replace")


def transcode(data: bytes, guess: EncodingGuess, target: str) -> bytes:
    """
    Decode a payload with a guess and re-encode it into a target charset.

    Characters the target cannot represent are replaced with "?".

    Args:
        data: Raw payload bytes.
        guess: Result of guess_encoding() for the same bytes.
        target: Output charset name.

    Returns:
        The payload encoded in the target charset.
    """
    return decode_text(data, guess).encode(target, "replace")


def detect_and_transcode(data: bytes, target: str) -> bytes:
    """
    Guess a payload's encoding and transcode it to the target charset.

    Args:
        data: Raw payload bytes.
        target: Output charset name.

    Returns:
        The transcoded bytes. Empty input gives empty output.
    """
    if not data:
        return b""
    return transcode(data, guess_encoding(data), target)
