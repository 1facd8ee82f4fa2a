"""Content digests for story passages (FNV-1a 64 over normalized text).

The digest identifies a passage independent of its index. Normalization
folds away formatting (width, case, punctuation, whitespace) so that
re-wrapped or re-punctuated text keeps its digest.
"""

from __future__ import annotations

import re
import unicodedata

from cluekit.content.segments import (
    DecisionSegment,
    DialogueSegment,
    NarrationSegment,
    Segment,
    StickerSegment,
    SubtitleSegment,
    SystemSegment,
)

FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3
MASK64 = 0xFFFFFFFFFFFFFFFF

_WHITESPACE_RE = re.compile(r"\s+")

# ECMAScript \s; differs from str.isspace() on U+FEFF and U+001C..U+001F.
_SPACES = frozenset(
    "\t\n\v\f\r \u00a0\u1680\u2028\u2029\u202f\u205f\u3000\ufeff"
    + "".join(chr(c) for c in range(0x2000, 0x200B))
)


def _is_stripped(ch: str) -> bool:
    return ch in _SPACES or unicodedata.category(ch)[0] in ("P", "S")


def normalize(text: str) -> str:
    """NFKC fold, lowercase, drop punctuation/symbol/whitespace code points."""
    folded = unicodedata.normalize("NFKC", text).lower()
    return "".join(ch for ch in folded if not _is_stripped(ch))


def fnv1a64(text: str) -> int:
    """FNV-1a 64-bit hash of the UTF-8 bytes of ``text``."""
    h = FNV_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        h ^= byte
        h = (h * FNV_PRIME) & MASK64
    return h


def digest64(text: str) -> int:
    return fnv1a64(normalize(text))


def digest_to_hex(digest: int) -> str:
    """Render a digest as 16 lowercase hex chars."""
    return f"{digest & MASK64:016x}"


def hex_to_digest(hex_str: str) -> int:
    """Parse a hex digest, ignoring any non-hex characters."""
    clean = re.sub(r"[^0-9a-fA-F]", "", hex_str or "")
    if not clean:
        return 0
    return int(clean, 16) & MASK64


# ── Per-segment text ───────────────────────────────────────────


def segment_text(segment: Segment) -> str:
    """Text that identifies a segment; the speaker is part of a line's identity."""
    if isinstance(segment, DialogueSegment):
        return f"{segment.character_name} {segment.text}"
    if isinstance(segment, SystemSegment):
        return f"{segment.speaker} {segment.text}" if segment.speaker else segment.text
    if isinstance(segment, (NarrationSegment, SubtitleSegment, StickerSegment)):
        return segment.text
    if isinstance(segment, DecisionSegment):
        return " ".join(segment.options)
    return ""


def segment_digest(segment: Segment) -> int:
    return digest64(segment_text(segment))


def _first_line(text: str) -> str:
    return text.split("\n", 1)[0]


def segment_preview(segment: Segment) -> str:
    """Short single-line display text for a segment ("" if it has none)."""
    if isinstance(segment, DialogueSegment):
        preview = f"{segment.character_name}: {_first_line(segment.text)}"
    elif isinstance(segment, (NarrationSegment, SystemSegment, SubtitleSegment, StickerSegment)):
        preview = _first_line(segment.text)
    else:
        return ""
    return _WHITESPACE_RE.sub(" ", preview).strip()
