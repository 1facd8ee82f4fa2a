"""Markdown clue set files: YAML frontmatter carrying the share code.

Layout:
    ---
    id: 20260218093015-0af3
    title: 我的线索集
    share_code: AKC1-...
    created: 2026-02-18T09:30:15
    updated: 2026-02-18T09:41:02
    items:
      - {story: main_01, segment: 3, digest: 1c4f...}
    ---

    # 我的线索集

    ## main_01
    - [3] Amiya: ...
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import frontmatter

from cluekit.clues.store import ClueStore, ImportResult
from cluekit.content.digest import digest_to_hex
from cluekit.errors import InvalidCodeError

logger = logging.getLogger(__name__)


def _iso(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).isoformat(timespec="seconds")


def render_markdown(store: ClueStore, set_id: str) -> str:
    """Render a clue set as markdown with frontmatter."""
    payload = store.build_payload(set_id)
    clue_set = store.get_set(set_id)
    code = store.export_share_code(set_id)

    body = [f"# {clue_set.title}", ""]
    if clue_set.desc:
        body += [clue_set.desc, ""]
    items_meta = []
    for ref in payload.items:
        story_id = payload.stories[ref.story_index]
        items_meta.append(
            {"story": story_id, "segment": ref.segment_index, "digest": digest_to_hex(ref.digest64)}
        )
    for story_id in payload.stories:
        body.append(f"## {story_id}")
        for item in sorted(
            (it for it in clue_set.items if it.story_id == story_id),
            key=lambda it: it.segment_index,
        ):
            body.append(f"- [{item.segment_index}] {item.preview or ''}".rstrip())
        body.append("")

    metadata = {
        "id": clue_set.id,
        "title": clue_set.title,
        "share_code": code,
        "created": _iso(clue_set.created_at),
        "updated": _iso(clue_set.updated_at),
        "items": items_meta,
    }
    if clue_set.desc:
        metadata["desc"] = clue_set.desc
    post = frontmatter.Post("\n".join(body).rstrip() + "\n", **metadata)
    return frontmatter.dumps(post)


def export_markdown(store: ClueStore, set_id: str, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_markdown(store, set_id), encoding="utf-8")
    logger.info("Wrote clue set %s to %s", set_id, path)
    return path


def import_markdown(
    store: ClueStore,
    path: Path,
    target_set_id: str | None = None,
) -> ImportResult:
    """Import the share code embedded in a markdown clue set file."""
    post = frontmatter.load(str(path))
    code = post.metadata.get("share_code")
    if not isinstance(code, str) or not code.strip():
        raise InvalidCodeError(f"No share_code in {path}")
    title = post.metadata.get("title")
    return store.import_share_code(
        code,
        target_set_id=target_set_id,
        title_if_create=str(title) if title else None,
    )
