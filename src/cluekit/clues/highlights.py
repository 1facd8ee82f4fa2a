"""Bulk import of reader highlights + lazy preview population.

Both jobs read story content through a StoryProvider and write only through
ClueStore mutation methods.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from cluekit.clues.models import ClueItem
from cluekit.clues.store import ClueStore
from cluekit.content.digest import segment_digest, segment_preview
from cluekit.content.provider import StoryProvider
from cluekit.content.segments import prepare_segments

logger = logging.getLogger(__name__)


def _unique_indices(indices: Iterable[int]) -> list[int]:
    seen: dict[int, None] = {}
    for n in indices:
        try:
            seen.setdefault(int(n), None)
        except (TypeError, ValueError):
            continue
    return list(seen)


def import_highlights(
    store: ClueStore,
    set_id: str,
    highlights: Mapping[str, Iterable[int]],
    provider: StoryProvider,
) -> int:
    """Add highlighted segments (story path -> indices) to a set.

    Story paths are matched against ``StoryInfo.story_txt``; unknown paths and
    out-of-range indices are skipped. Returns the number of items added.
    """
    entries = {path: idx for path, idx in highlights.items() if idx}
    if not entries:
        return 0

    by_path = {info.story_txt: info for info in provider.list_stories()}
    to_add: list[ClueItem] = []
    for story_path, indices in entries.items():
        info = by_path.get(story_path)
        if info is None:
            logger.debug("No story for highlight path %s", story_path)
            continue
        try:
            segments = prepare_segments(provider.get_segments(info.story_id))
        except Exception as e:
            logger.warning("Failed to load highlighted story %s: %s", info.story_id, e)
            continue
        for idx in _unique_indices(indices):
            if not 0 <= idx < len(segments):
                continue
            seg = segments[idx]
            to_add.append(
                ClueItem(
                    story_id=info.story_id,
                    segment_index=idx,
                    preview=segment_preview(seg),
                    digest=segment_digest(seg),
                )
            )

    if not to_add:
        return 0
    added = store.add_items(set_id, to_add)
    logger.info("Imported %d highlights into clue set %s", added, set_id)
    return added


def fill_previews(store: ClueStore, provider: StoryProvider) -> int:
    """Compute previews for items that lack one. Returns previews written."""
    tasks: dict[str, list[tuple[str, int]]] = {}
    for clue_set in store.sorted_sets():
        for item in clue_set.items:
            if not item.preview:
                tasks.setdefault(item.story_id, []).append((clue_set.id, item.segment_index))

    written = 0
    for story_id, bucket in tasks.items():
        try:
            segments = prepare_segments(provider.get_segments(story_id))
        except Exception as e:
            logger.warning("Skipping previews for story %s: %s", story_id, e)
            continue
        for set_id, idx in bucket:
            if not 0 <= idx < len(segments):
                continue
            preview = segment_preview(segments[idx])
            if preview and store.update_item_meta(set_id, story_id, idx, preview=preview):
                written += 1

    if written:
        logger.info("Filled %d clue previews", written)
    return written
