"""Share code text form: ``AKC1-<base64url>`` around the binary payload."""

from __future__ import annotations

import base64
import binascii
import logging
import re
import zlib

from cluekit.codec.wire import CluePayload, decode, encode
from cluekit.errors import FormatError, InvalidCodeError

logger = logging.getLogger(__name__)

TAG = "AKC1"
_CODE_RE = re.compile(rf"^{TAG}-([A-Za-z0-9_-]+)$")
_BARE_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64url_decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(padded)


def build_share_code(payload: CluePayload) -> str:
    """Encode a payload as a share code (uncompressed)."""
    return f"{TAG}-{b64url_encode(encode(payload))}"


def _decode_bytes(raw: bytes) -> CluePayload:
    """Decode raw bytes; fall back to inflating deflate-compressed payloads."""
    try:
        return decode(raw)
    except FormatError as direct_err:
        try:
            inflated = zlib.decompress(raw)
        except zlib.error:
            raise direct_err
        logger.debug("Share code payload was deflate-compressed (%d -> %d bytes)", len(raw), len(inflated))
        return decode(inflated)


def parse_share_code(code: str) -> CluePayload:
    """Parse a share code into a payload.

    A bare base64url string without the tag is accepted for debugging.
    Raises InvalidCodeError for anything that does not decode.
    """
    if not code or not isinstance(code, str):
        raise InvalidCodeError("Empty code")

    text = code.strip()
    match = _CODE_RE.match(text)
    if match:
        body = match.group(1)
    elif _BARE_RE.match(text):
        body = text
    else:
        raise InvalidCodeError(f"Not a clue share code: {text[:40]!r}")

    try:
        raw = b64url_decode(body)
    except (binascii.Error, ValueError) as e:
        raise InvalidCodeError(f"Invalid base64url body: {e}") from e

    try:
        return _decode_bytes(raw)
    except FormatError as e:
        raise InvalidCodeError(f"Malformed share code payload: {e}") from e
