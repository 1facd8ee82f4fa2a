"""Re-locate bookmarked passages in freshly parsed story content.

Resolution order, first success wins:
    1. direct      : segment at the stored index (digest-confirmed if known)
    2. neighborhood: digest match within ±window of the stored index
    3. preview     : first segment whose text contains the stored preview
    4. unresolved  : caller falls back to the last-known index

This is a best-effort heuristic. Repeated text resolves to its first
occurrence.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Literal, Sequence

from cluekit.clues.models import ClueItem
from cluekit.content.digest import segment_digest, segment_text
from cluekit.content.provider import StoryProvider
from cluekit.content.segments import DialogueSegment, Segment, prepare_segments
from cluekit.errors import UnresolvedReferenceError

logger = logging.getLogger(__name__)

NEIGHBORHOOD_WINDOW = 12

ResolveMethod = Literal["direct", "neighborhood", "preview", "unresolved"]

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass
class Resolution:
    item: ClueItem
    index: int | None
    segment: Segment | None
    method: ResolveMethod

    @property
    def resolved(self) -> bool:
        return self.index is not None

    @property
    def position(self) -> int:
        """Index to open the story at: resolved index, else last-known index."""
        return self.index if self.index is not None else self.item.segment_index

    def require(self) -> tuple[int, Segment]:
        if self.index is None or self.segment is None:
            raise UnresolvedReferenceError(self.item.story_id, self.item.segment_index)
        return self.index, self.segment


def _collapse(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip().casefold()


def normalize_preview(preview: str) -> str:
    """Ellipses become spaces, whitespace runs collapse, case folds."""
    return _collapse(preview.replace("…", " ").replace("...", " "))


def _display_texts(segment: Segment) -> list[str]:
    texts = [_collapse(segment_text(segment))]
    # Stored dialogue previews read "Speaker: line".
    if isinstance(segment, DialogueSegment):
        texts.append(_collapse(f"{segment.character_name}: {segment.text}"))
    return texts


def resolve(
    item: ClueItem,
    segments: Sequence[Segment],
    window: int = NEIGHBORHOOD_WINDOW,
) -> Resolution:
    """Find the passage an item refers to in ``segments`` (prepared sequence)."""
    idx = item.segment_index
    digest = item.digest or 0

    # 1. Direct hit
    if 0 <= idx < len(segments):
        seg = segments[idx]
        if not digest or segment_digest(seg) == digest:
            return Resolution(item, idx, seg, "direct")

    # 2. Neighborhood search
    if digest and segments:
        start = max(0, idx - window)
        end = min(len(segments) - 1, idx + window)
        for i in range(start, end + 1):
            if segment_digest(segments[i]) == digest:
                return Resolution(item, i, segments[i], "neighborhood")

    # 3. Preview fallback
    if item.preview:
        needle = normalize_preview(item.preview)
        if needle:
            for i, seg in enumerate(segments):
                if any(needle in text for text in _display_texts(seg)):
                    return Resolution(item, i, seg, "preview")

    return Resolution(item, None, None, "unresolved")


def resolve_many(
    items: Iterable[ClueItem],
    provider: StoryProvider,
    window: int = NEIGHBORHOOD_WINDOW,
) -> list[Resolution]:
    """Resolve a batch, loading each story once.

    A story that fails to load marks its items unresolved; the rest of the
    batch continues.
    """
    items = list(items)
    cache: dict[str, list[Segment]] = {}
    results: list[Resolution] = []

    for item in items:
        story_id = item.story_id.strip()
        if story_id not in cache:
            try:
                cache[story_id] = prepare_segments(provider.get_segments(story_id)) if story_id else []
            except Exception as e:
                logger.warning("Failed to load story %s for clue resolution: %s", story_id, e)
                cache[story_id] = []
        results.append(resolve(item, cache[story_id], window))

    unresolved = sum(1 for r in results if not r.resolved)
    if unresolved:
        logger.info("%d/%d clue items unresolved", unresolved, len(results))
    return results
