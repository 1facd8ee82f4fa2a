"""Clue store: named clue sets, dedupe-aware CRUD, share code export/import.

The whole store is one JSON blob under a fixed backend key. It is loaded
once at construction and written back in full after every mutation.
Persistence failures are logged and recorded on ``last_persist_error``; the
in-memory state stays authoritative for the session. A snapshot that exists
but cannot be read disables persistence (``load_error``) so it is never
replaced by an empty one.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Iterable, Mapping

from cluekit.clues.backend import KeyValueBackend
from cluekit.clues.models import (
    ClueItem,
    ClueSet,
    ItemKey,
    dump_snapshot,
    generate_set_id,
    load_snapshot,
    now_ms,
)
from cluekit.codec.share_code import build_share_code, parse_share_code
from cluekit.codec.wire import ClueRef, CluePayload
from cluekit.errors import NotFoundError

logger = logging.getLogger(__name__)

STORAGE_KEY = "arknights-clue-sets-v1"
DEFAULT_SET_ID_KEY = "arknights-default-clue-set-id"

UNTITLED_SET_TITLE = "未命名线索集"
IMPORTED_SET_TITLE = "导入的线索集"
DEFAULT_SET_TITLE = "我的线索集"

MAX_TITLE_ATTEMPTS = 50


@dataclass
class ImportResult:
    set_id: str
    created: bool
    items_added: int


class ClueStore:
    """In-memory clue sets backed by a single persisted snapshot."""

    def __init__(
        self,
        backend: KeyValueBackend,
        storage_key: str = STORAGE_KEY,
        default_set_key: str = DEFAULT_SET_ID_KEY,
    ) -> None:
        self.backend = backend
        self.storage_key = storage_key
        self.default_set_key = default_set_key
        self.last_persist_error: Exception | None = None
        self.load_error: Exception | None = None
        self._sets: dict[str, ClueSet] = self._load()

    # ── Persistence ───────────────────────────────────────────

    def _load(self) -> dict[str, ClueSet]:
        try:
            raw = self.backend.get(self.storage_key)
        except (OSError, ValueError) as e:
            # Unreadable, not absent: never overwrite it with a fresh snapshot.
            logger.error("Clue store snapshot could not be read, persistence disabled: %s", e)
            self.load_error = e
            return {}
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning("Clue store snapshot is not valid JSON, starting empty: %s", e)
            return {}
        sets = load_snapshot(data)
        logger.info("Loaded %d clue sets", len(sets))
        return sets

    def _persist(self) -> None:
        """Write the full snapshot. Failures are swallowed and recorded."""
        if self.load_error is not None:
            self.last_persist_error = self.load_error
            return
        try:
            blob = json.dumps(dump_snapshot(self._sets), ensure_ascii=False)
            self.backend.set(self.storage_key, blob)
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to persist clue store (changes kept in memory only): %s", e)
            self.last_persist_error = e
            return
        self.last_persist_error = None

    def _commit(self, clue_set: ClueSet) -> None:
        clue_set.touch()
        self._persist()

    # ── Read access ───────────────────────────────────────────

    @property
    def sets(self) -> Mapping[str, ClueSet]:
        return MappingProxyType(self._sets)

    def get_set(self, set_id: str) -> ClueSet | None:
        return self._sets.get(set_id)

    def _require(self, set_id: str) -> ClueSet:
        clue_set = self._sets.get(set_id)
        if clue_set is None:
            raise NotFoundError(set_id)
        return clue_set

    def sorted_sets(self) -> list[ClueSet]:
        """Most recently updated first."""
        return sorted(self._sets.values(), key=lambda s: s.updated_at, reverse=True)

    # ── Set lifecycle ─────────────────────────────────────────

    def _unique_title(self, title: str) -> str:
        """Append " 2", " 3", ... if the title is taken; give up after a bounded number of tries."""
        taken = {s.title for s in self._sets.values()}
        if title not in taken:
            return title
        for n in range(2, MAX_TITLE_ATTEMPTS + 2):
            candidate = f"{title} {n}"
            if candidate not in taken:
                return candidate
        return title

    def create_set(self, title: str | None = None, desc: str | None = None) -> str:
        """Create an empty set and return its id."""
        set_id = generate_set_id()
        while set_id in self._sets:
            set_id = generate_set_id()
        clean = (title or "").strip() or UNTITLED_SET_TITLE
        now = now_ms()
        self._sets[set_id] = ClueSet(
            id=set_id,
            title=self._unique_title(clean),
            desc=desc,
            created_at=now,
            updated_at=now,
        )
        self._persist()
        logger.info("Created clue set %s (%s)", set_id, self._sets[set_id].title)
        return set_id

    def delete_set(self, set_id: str) -> None:
        if self._sets.pop(set_id, None) is None:
            logger.debug("Clue set %s not found for deletion", set_id)
            return
        self._persist()
        logger.info("Deleted clue set %s", set_id)

    def rename_set(self, set_id: str, title: str) -> None:
        """Rename a set. Blank titles keep the current one."""
        clue_set = self._sets.get(set_id)
        if clue_set is None:
            logger.debug("Clue set %s not found for rename", set_id)
            return
        clue_set.title = (title or "").strip() or clue_set.title
        self._commit(clue_set)

    def ensure_default_set_id(self) -> str:
        """Return the default set id, creating the default set if needed."""
        try:
            cached = (self.backend.get(self.default_set_key) or "").strip()
        except (OSError, ValueError) as e:
            logger.warning("Failed to read default clue set id: %s", e)
            cached = ""
        if cached and cached in self._sets:
            return cached

        existing = next((s for s in self._sets.values() if s.title == DEFAULT_SET_TITLE), None)
        set_id = existing.id if existing else self.create_set(DEFAULT_SET_TITLE)
        try:
            self.backend.set(self.default_set_key, set_id)
        except OSError as e:
            logger.warning("Failed to remember default clue set: %s", e)
        return set_id

    # ── Items ─────────────────────────────────────────────────

    def add_item(self, set_id: str, item: ClueItem) -> bool:
        """Append one item unless its (story, segment) is already present."""
        return self.add_items(set_id, [item]) == 1

    def add_items(self, set_id: str, items: Iterable[ClueItem]) -> int:
        """Append items whose (story, segment) key is new. Returns count added."""
        clue_set = self._require(set_id)
        seen = clue_set.keys()
        to_add: list[ClueItem] = []
        skipped = 0
        for item in items:
            if item.key in seen:
                skipped += 1
                continue
            seen.add(item.key)
            to_add.append(replace(item))

        if skipped:
            logger.debug("Skipped %d duplicate clue items in set %s", skipped, set_id)
        if not to_add:
            return 0
        clue_set.items.extend(to_add)
        self._commit(clue_set)
        return len(to_add)

    def remove_item(self, set_id: str, story_id: str, segment_index: int) -> None:
        clue_set = self._require(set_id)
        clue_set.items = [
            it for it in clue_set.items if it.key != (story_id, segment_index)
        ]
        self._commit(clue_set)

    def move_item(self, set_id: str, from_index: int, to_index: int) -> None:
        """Move one item within the set. Out-of-range indices are ignored."""
        clue_set = self._require(set_id)
        n = len(clue_set.items)
        if not (0 <= from_index < n and 0 <= to_index < n):
            return
        item = clue_set.items.pop(from_index)
        clue_set.items.insert(to_index, item)
        self._commit(clue_set)

    def set_items(self, set_id: str, items: Iterable[ClueItem]) -> None:
        """Replace the item list (used for drag reordering).

        Later duplicates of a (story, segment) key are dropped.
        """
        clue_set = self._require(set_id)
        seen: set[ItemKey] = set()
        ordered: list[ClueItem] = []
        for item in items:
            if item.key in seen:
                continue
            seen.add(item.key)
            ordered.append(replace(item))
        clue_set.items = ordered
        self._commit(clue_set)

    def update_item_meta(
        self,
        set_id: str,
        story_id: str,
        segment_index: int,
        *,
        preview: str | None = None,
        digest: int | None = None,
    ) -> bool:
        """Fill in lazily computed preview/digest. Returns False if no item matched."""
        clue_set = self._require(set_id)
        item = clue_set.find(story_id, segment_index)
        if item is None:
            return False
        if preview is not None:
            item.preview = preview
        if digest is not None:
            item.digest = digest
        self._commit(clue_set)
        return True

    # ── Share codes ───────────────────────────────────────────

    def build_payload(self, set_id: str) -> CluePayload:
        """Group items by story (first appearance order), segments ascending."""
        clue_set = self._require(set_id)
        grouped: dict[str, list[ClueItem]] = {}
        for item in clue_set.items:
            grouped.setdefault(item.story_id, []).append(item)

        stories = list(grouped)
        refs: list[ClueRef] = []
        for story_index, story_id in enumerate(stories):
            for item in sorted(grouped[story_id], key=lambda it: it.segment_index):
                refs.append(ClueRef(story_index, item.segment_index, item.digest or 0))
        return CluePayload(stories=stories, items=refs)

    def export_share_code(self, set_id: str) -> str:
        code = build_share_code(self.build_payload(set_id))
        logger.info("Exported clue set %s (%d chars)", set_id, len(code))
        return code

    def import_share_code(
        self,
        code: str,
        target_set_id: str | None = None,
        create_if_missing: bool = True,
        title_if_create: str | None = None,
    ) -> ImportResult:
        """Merge a share code into a set.

        Decoding happens before any mutation, so an invalid code
        (InvalidCodeError) leaves the store untouched.
        """
        payload = parse_share_code(code)
        imported = [
            ClueItem(
                story_id=payload.stories[ref.story_index],
                segment_index=ref.segment_index,
                digest=ref.digest64,
            )
            for ref in payload.items
        ]

        created = False
        if target_set_id and target_set_id in self._sets:
            set_id = target_set_id
        elif create_if_missing:
            set_id = self.create_set(title_if_create or IMPORTED_SET_TITLE)
            created = True
        else:
            raise NotFoundError(target_set_id or "")

        added = self.add_items(set_id, imported)
        logger.info(
            "Imported %d/%d clue items into %s%s",
            added,
            len(imported),
            set_id,
            " (new set)" if created else "",
        )
        return ImportResult(set_id=set_id, created=created, items_added=added)
