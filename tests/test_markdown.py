"""Tests for markdown clue set files."""

from __future__ import annotations

from pathlib import Path

import frontmatter
import pytest

from cluekit.clues.backend import MemoryBackend
from cluekit.clues.markdown import export_markdown, import_markdown
from cluekit.clues.models import ClueItem
from cluekit.clues.store import ClueStore
from cluekit.errors import InvalidCodeError


@pytest.fixture
def store() -> ClueStore:
    return ClueStore(MemoryBackend())


class TestMarkdown:
    def test_export_frontmatter(self, store: ClueStore, tmp_path: Path):
        set_id = store.create_set("线索 A", desc="Notes")
        store.add_items(set_id, [ClueItem("s2", 4, preview="Amiya: hi"), ClueItem("s1", 1, digest=255)])
        path = export_markdown(store, set_id, tmp_path / "out" / "clues.md")

        post = frontmatter.load(str(path))
        assert post.metadata["id"] == set_id
        assert post.metadata["title"] == "线索 A"
        assert post.metadata["desc"] == "Notes"
        assert post.metadata["share_code"] == store.export_share_code(set_id)
        assert post.metadata["items"][1] == {"story": "s1", "segment": 1, "digest": "00000000000000ff"}
        assert "## s2" in post.content
        assert "- [4] Amiya: hi" in post.content

    def test_round_trip_into_other_store(self, store: ClueStore, tmp_path: Path):
        set_id = store.create_set("Shared set")
        store.add_items(set_id, [ClueItem("s1", 1, digest=7), ClueItem("s1", 3)])
        path = export_markdown(store, set_id, tmp_path / "clues.md")

        other = ClueStore(MemoryBackend())
        result = import_markdown(other, path)
        assert result.created is True
        assert result.items_added == 2
        imported = other.get_set(result.set_id)
        assert imported.title == "Shared set"
        assert imported.items[0].digest == 7

    def test_missing_share_code(self, store: ClueStore, tmp_path: Path):
        path = tmp_path / "bad.md"
        path.write_text("---\ntitle: nothing\n---\n\nbody\n", encoding="utf-8")
        with pytest.raises(InvalidCodeError):
            import_markdown(store, path)
