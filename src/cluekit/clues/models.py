"""Clue set data model + persisted (camelCase JSON) form.

On-disk records use the field names of the original reader app so that a
snapshot written by either side can be read by the other. Reading is
lenient: unknown fields are ignored, malformed items are coerced or dropped.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cluekit.content.digest import digest_to_hex, hex_to_digest

logger = logging.getLogger(__name__)

ItemKey = tuple[str, int]


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_set_id() -> str:
    """Local timestamp + 4 random hex digits, e.g. ``20260218093015-0af3``."""
    ts = datetime.now().strftime("%Y%m%d%H%M%S")
    return f"{ts}-{random.randrange(0xFFFF):04x}"


@dataclass
class ClueItem:
    """One bookmarked passage."""

    story_id: str
    segment_index: int
    created_at: int = field(default_factory=now_ms)
    preview: str | None = None
    digest: int | None = None  # None/0 = unknown

    @property
    def key(self) -> ItemKey:
        return (self.story_id, self.segment_index)

    @property
    def has_digest(self) -> bool:
        return bool(self.digest)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "storyId": self.story_id,
            "segmentIndex": self.segment_index,
            "createdAt": self.created_at,
        }
        if self.preview is not None:
            data["preview"] = self.preview
        if self.digest is not None:
            data["digestHex"] = digest_to_hex(self.digest)
        return data

    @classmethod
    def from_dict(cls, data: Any) -> ClueItem | None:
        """Coerce a stored item into a ClueItem. Returns None if unusable."""
        if not isinstance(data, dict):
            return None
        try:
            segment_index = int(data.get("segmentIndex") or 0)
        except (TypeError, ValueError):
            segment_index = 0
        try:
            created_at = int(data.get("createdAt") or now_ms())
        except (TypeError, ValueError):
            created_at = now_ms()
        preview = data.get("preview")
        digest_hex = data.get("digestHex")
        return cls(
            story_id=str(data.get("storyId") or ""),
            segment_index=max(segment_index, 0),
            created_at=created_at,
            preview=preview if isinstance(preview, str) else None,
            digest=hex_to_digest(digest_hex) if isinstance(digest_hex, str) else None,
        )


@dataclass
class ClueSet:
    """A named, ordered collection of clue items."""

    id: str
    title: str
    items: list[ClueItem] = field(default_factory=list)
    desc: str | None = None
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)

    def keys(self) -> set[ItemKey]:
        return {it.key for it in self.items}

    def find(self, story_id: str, segment_index: int) -> ClueItem | None:
        for it in self.items:
            if it.story_id == story_id and it.segment_index == segment_index:
                return it
        return None

    def touch(self) -> None:
        self.updated_at = now_ms()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "items": [it.to_dict() for it in self.items],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.desc is not None:
            data["desc"] = self.desc
        return data

    @classmethod
    def from_dict(cls, data: Any) -> ClueSet | None:
        """Sanitize a stored set. Sets without id or title are dropped."""
        if not isinstance(data, dict) or not data.get("id") or not data.get("title"):
            return None
        raw_items = data.get("items")
        items = []
        if isinstance(raw_items, list):
            for raw in raw_items:
                item = ClueItem.from_dict(raw)
                if item is not None:
                    items.append(item)
        desc = data.get("desc")
        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            items=items,
            desc=desc if isinstance(desc, str) else None,
            created_at=_int_or_now(data.get("createdAt")),
            updated_at=_int_or_now(data.get("updatedAt")),
        )


def _int_or_now(value: Any) -> int:
    try:
        return int(value) if value is not None else now_ms()
    except (TypeError, ValueError):
        return now_ms()


def load_snapshot(data: Any) -> dict[str, ClueSet]:
    """Build the id -> ClueSet map from a persisted ``{"sets": {...}}`` blob."""
    if not isinstance(data, dict) or not isinstance(data.get("sets"), dict):
        return {}
    sets: dict[str, ClueSet] = {}
    dropped = 0
    for set_id, raw in data["sets"].items():
        clue_set = ClueSet.from_dict(raw)
        if clue_set is None:
            dropped += 1
            continue
        sets[str(set_id)] = clue_set
    if dropped:
        logger.warning("Dropped %d malformed clue sets while loading", dropped)
    return sets


def dump_snapshot(sets: dict[str, ClueSet]) -> dict[str, Any]:
    return {"sets": {set_id: s.to_dict() for set_id, s in sets.items()}}
