"""Tests for the command-line entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from cluekit.__main__ import main


@pytest.fixture(autouse=True)
def env(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("CLUEKIT_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("CLUEKIT_CONTENT_DIR", str(tmp_path / "stories"))
    monkeypatch.delenv("CLUEKIT_RESOLVE_WINDOW", raising=False)


def _write_story(tmp_path: Path, story_id: str, texts: list[str]) -> None:
    stories = tmp_path / "stories"
    stories.mkdir(exist_ok=True)
    data = {
        "storyId": story_id,
        "storyName": story_id,
        "storyTxt": f"obt/{story_id}",
        "segments": [{"type": "narration", "text": t} for t in texts],
    }
    (stories / f"{story_id}.json").write_text(json.dumps(data), encoding="utf-8")


class TestMain:
    def test_usage_on_unknown_command(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["bogus"])
        assert exc.value.code == 1
        assert "Usage" in capsys.readouterr().out

    def test_missing_argument(self):
        with pytest.raises(SystemExit):
            main(["export"])

    def test_create_export_import(self, capsys):
        main(["create", "Mine"])
        set_id = capsys.readouterr().out.strip()

        main(["export", set_id])
        code = capsys.readouterr().out.strip()
        assert code.startswith("AKC1-")

        main(["import", code])
        assert "0 items added" in capsys.readouterr().out

        main(["list"])
        out = capsys.readouterr().out
        assert set_id in out
        assert "Mine" in out

    def test_decode(self, capsys):
        from cluekit.codec.share_code import build_share_code
        from cluekit.codec.wire import ClueRef, CluePayload

        code = build_share_code(CluePayload(stories=["a1"], items=[ClueRef(0, 3, 255)]))
        main(["decode", code])
        out = capsys.readouterr().out
        assert "1 stories, 1 items" in out
        assert "a1#3  00000000000000ff" in out

    def test_invalid_code_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["decode", "not a code"])
        assert exc.value.code == 1
        assert "Error" in capsys.readouterr().out

    def test_resolve(self, tmp_path: Path, capsys):
        from cluekit.clues.backend import JsonFileBackend
        from cluekit.clues.models import ClueItem
        from cluekit.clues.store import ClueStore
        from cluekit.content.digest import digest64

        _write_story(tmp_path, "s1", ["zero", "one", "two"])
        store = ClueStore(JsonFileBackend(tmp_path / "data"))
        set_id = store.create_set()
        store.add_items(set_id, [ClueItem("s1", 0, digest=digest64("two")), ClueItem("s1", 1)])

        main(["resolve", set_id])
        out = capsys.readouterr().out
        assert "s1#0 -> 2 [neighborhood]" in out
        assert "s1#1 -> 1 [direct]" in out

    def test_resolve_unknown_set(self):
        with pytest.raises(SystemExit):
            main(["resolve", "missing"])
