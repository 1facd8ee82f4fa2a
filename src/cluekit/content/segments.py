"""Story segment types + the clean/merge pass applied before indexing.

Parsed story content arrives from the content provider as a list of JSON
objects tagged by ``type``. Bookmark indices always refer to the sequence
produced by ``prepare_segments``, never to the raw list.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Iterable

logger = logging.getLogger(__name__)


# ── Segment kinds ──────────────────────────────────────────────


@dataclass(frozen=True)
class DialogueSegment:
    """A line spoken by a named character."""

    character_name: str
    text: str
    position: str | None = None
    type: str = field(default="dialogue", init=False)


@dataclass(frozen=True)
class NarrationSegment:
    text: str
    type: str = field(default="narration", init=False)


@dataclass(frozen=True)
class DecisionSegment:
    """A multi-choice prompt; ``values`` are the branch targets if known."""

    options: tuple[str, ...]
    values: tuple[str, ...] = ()
    type: str = field(default="decision", init=False)


@dataclass(frozen=True)
class SystemSegment:
    text: str
    speaker: str | None = None
    type: str = field(default="system", init=False)


@dataclass(frozen=True)
class SubtitleSegment:
    text: str
    alignment: str | None = None
    type: str = field(default="subtitle", init=False)


@dataclass(frozen=True)
class StickerSegment:
    text: str
    alignment: str | None = None
    type: str = field(default="sticker", init=False)


@dataclass(frozen=True)
class HeaderSegment:
    title: str
    type: str = field(default="header", init=False)


@dataclass(frozen=True)
class UnknownSegment:
    """Segment kind this package does not understand; kept for index stability."""

    type: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False)


Segment = (
    DialogueSegment
    | NarrationSegment
    | DecisionSegment
    | SystemSegment
    | SubtitleSegment
    | StickerSegment
    | HeaderSegment
    | UnknownSegment
)


# ── Parsing (provider JSON -> typed segment) ───────────────────


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _opt_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def parse_segment(data: dict[str, Any] | Segment) -> Segment:
    """Parse one provider segment object into a typed segment.

    Already-typed segments pass through unchanged.
    """
    if not isinstance(data, dict):
        return data

    seg_type = data.get("type", "")

    if seg_type == "dialogue":
        return DialogueSegment(
            character_name=_str(data.get("characterName")),
            text=_str(data.get("text")),
            position=_opt_str(data.get("position")),
        )
    if seg_type == "narration":
        return NarrationSegment(text=_str(data.get("text")))
    if seg_type == "decision":
        return DecisionSegment(
            options=tuple(_str(o) for o in data.get("options") or []),
            values=tuple(_str(v) for v in data.get("values") or []),
        )
    if seg_type == "system":
        return SystemSegment(text=_str(data.get("text")), speaker=_opt_str(data.get("speaker")))
    if seg_type == "subtitle":
        return SubtitleSegment(text=_str(data.get("text")), alignment=_opt_str(data.get("alignment")))
    if seg_type == "sticker":
        return StickerSegment(text=_str(data.get("text")), alignment=_opt_str(data.get("alignment")))
    if seg_type == "header":
        return HeaderSegment(title=_str(data.get("title")))

    return UnknownSegment(type=_str(seg_type), raw=dict(data))


# ── Clean + merge ──────────────────────────────────────────────


def _clean_lines(text: str) -> str:
    lines = (line.strip() for line in text.replace("\r\n", "\n").split("\n"))
    return "\n".join(line for line in lines if line)


def _clean(segment: Segment) -> Segment | None:
    """Trim text/options. Returns None when nothing displayable remains."""
    if isinstance(segment, (DialogueSegment, NarrationSegment)):
        text = _clean_lines(segment.text)
        if not text:
            return None
        return segment if text == segment.text else replace(segment, text=text)

    if isinstance(segment, DecisionSegment):
        options = tuple(o.strip() for o in segment.options if o.strip())
        if not options:
            return None
        return segment if len(options) == len(segment.options) else replace(segment, options=options)

    return segment


def prepare_segments(raw: Iterable[dict[str, Any] | Segment]) -> list[Segment]:
    """Parse, clean, and merge a story's segments into the indexable sequence.

    Consecutive dialogue lines from the same speaker collapse into one
    segment, matching what the reader displays as a single passage.
    """
    merged: list[Segment] = []
    dropped = 0
    for item in raw:
        segment = _clean(parse_segment(item))
        if segment is None:
            dropped += 1
            continue
        if isinstance(segment, DialogueSegment) and merged:
            last = merged[-1]
            if isinstance(last, DialogueSegment) and last.character_name == segment.character_name:
                text = re.sub(r"\n{2,}", "\n", f"{last.text}\n{segment.text}")
                merged[-1] = replace(last, text=text)
                continue
        merged.append(segment)

    if dropped:
        logger.debug("Dropped %d empty segments", dropped)
    return merged
