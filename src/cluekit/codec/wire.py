"""Binary clue payload: types + encode/decode (no I/O)."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from cluekit.errors import FormatError

VERSION = 1
UINT32_MAX = 0xFFFFFFFF
_MAX_SHIFT = 35
_U64 = struct.Struct("<Q")


# ── Payload types ──────────────────────────────────────────────


@dataclass(frozen=True)
class ClueRef:
    """One item reference: index into the story table + position + digest."""

    story_index: int
    segment_index: int
    digest64: int = 0  # 0 = unknown


@dataclass
class CluePayload:
    """Serializable projection of a clue set (no title, no timestamps)."""

    stories: list[str] = field(default_factory=list)
    items: list[ClueRef] = field(default_factory=list)
    version: int = VERSION


# ── Varint ─────────────────────────────────────────────────────


def encode_varint(value: int) -> bytes:
    """Unsigned LEB128 for values in the uint32 range."""
    if not isinstance(value, int) or value < 0 or value > UINT32_MAX:
        raise ValueError(f"varint expects an unsigned 32-bit int, got {value!r}")
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_varint(data: bytes, offset: int) -> tuple[int, int]:
    """Decode a varint at ``offset``. Returns (value, next_offset)."""
    result = 0
    shift = 0
    pos = offset
    while True:
        if pos >= len(data):
            raise FormatError("Unexpected end of data while decoding varint")
        b = data[pos]
        pos += 1
        result |= (b & 0x7F) << shift
        if not b & 0x80:
            break
        shift += 7
        if shift > _MAX_SHIFT:
            raise FormatError("varint too large")
    return result & UINT32_MAX, pos


# ── Encode ─────────────────────────────────────────────────────


def encode(payload: CluePayload) -> bytes:
    """Serialize a payload to the version-1 byte layout."""
    out = bytearray([VERSION])

    out += encode_varint(len(payload.stories))
    for story_id in payload.stories:
        raw = story_id.encode("utf-8")
        out += encode_varint(len(raw))
        out += raw

    out += encode_varint(len(payload.items))
    for ref in payload.items:
        out += encode_varint(ref.story_index)
        out += encode_varint(ref.segment_index)
        out += _U64.pack(ref.digest64 & 0xFFFFFFFFFFFFFFFF)

    return bytes(out)


# ── Decode ─────────────────────────────────────────────────────


def decode(data: bytes) -> CluePayload:
    """Parse the version-1 byte layout. Raises FormatError on bad input."""
    if not data:
        raise FormatError("Empty payload")
    version = data[0]
    if version != VERSION:
        raise FormatError(f"Unsupported version: {version}")
    pos = 1

    story_count, pos = decode_varint(data, pos)
    stories: list[str] = []
    for _ in range(story_count):
        length, pos = decode_varint(data, pos)
        if pos + length > len(data):
            raise FormatError("Invalid string length")
        try:
            stories.append(data[pos : pos + length].decode("utf-8"))
        except UnicodeDecodeError as e:
            raise FormatError(f"Story id is not valid UTF-8: {e}") from e
        pos += length

    item_count, pos = decode_varint(data, pos)
    items: list[ClueRef] = []
    for _ in range(item_count):
        story_index, pos = decode_varint(data, pos)
        segment_index, pos = decode_varint(data, pos)
        if pos + _U64.size > len(data):
            raise FormatError("Truncated digest")
        (digest,) = _U64.unpack_from(data, pos)
        pos += _U64.size
        if story_index >= len(stories):
            raise FormatError(f"Story index {story_index} out of range ({len(stories)} stories)")
        items.append(ClueRef(story_index, segment_index, digest))

    return CluePayload(stories=stories, items=items, version=version)
