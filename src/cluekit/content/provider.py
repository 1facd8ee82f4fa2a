"""Story content provider protocol + a directory-backed implementation."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass
class StoryInfo:
    """Display metadata for one story."""

    story_id: str
    name: str = ""
    code: str | None = None
    story_txt: str = ""  # content path, the key used by reader highlights


@runtime_checkable
class StoryProvider(Protocol):
    """Protocol that story content sources must implement."""

    def get_story(self, story_id: str) -> StoryInfo | None:
        """Return metadata for a story, or None if unknown."""
        ...

    def get_segments(self, story_id: str) -> list[dict[str, Any]]:
        """Return the raw parsed segments of a story (unprepared)."""
        ...

    def list_stories(self) -> list[StoryInfo]:
        """Return metadata for every known story."""
        ...


class DirectoryStoryProvider:
    """Reads ``<root>/<story_id>.json`` files.

    Each file holds ``{"storyId", "storyName", "storyCode", "storyTxt",
    "segments": [...]}``; a bare list is accepted as the segment list.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self._cache: dict[str, Any] = {}

    def _path(self, story_id: str) -> Path:
        """Content file for a story id; ids must name a file directly under root."""
        if not story_id or "/" in story_id or "\\" in story_id:
            raise ValueError(f"Invalid story id: {story_id!r}")
        path = self.root / f"{story_id}.json"
        if path.parent != self.root or story_id in (".", ".."):
            raise ValueError(f"Invalid story id: {story_id!r}")
        return path

    def _load(self, story_id: str) -> Any:
        if story_id not in self._cache:
            path = self._path(story_id)
            self._cache[story_id] = json.loads(path.read_text(encoding="utf-8"))
        return self._cache[story_id]

    def get_story(self, story_id: str) -> StoryInfo | None:
        try:
            path = self._path(story_id)
        except ValueError as e:
            logger.warning("%s", e)
            return None
        if not path.exists():
            return None
        data = self._load(story_id)
        if not isinstance(data, dict):
            return StoryInfo(story_id=story_id, story_txt=story_id)
        return StoryInfo(
            story_id=str(data.get("storyId") or story_id),
            name=str(data.get("storyName") or ""),
            code=data.get("storyCode"),
            story_txt=str(data.get("storyTxt") or story_id),
        )

    def get_segments(self, story_id: str) -> list[dict[str, Any]]:
        data = self._load(story_id)
        if isinstance(data, list):
            return data
        return list(data.get("segments") or [])

    def list_stories(self) -> list[StoryInfo]:
        stories = []
        for path in sorted(self.root.glob("*.json")):
            info = self.get_story(path.stem)
            if info:
                stories.append(info)
        return stories
