"""Entry point: python -m cluekit <command> [args]

- list                      List clue sets (most recently updated first)
- create <title>            Create an empty clue set
- export <set_id>           Print the set's share code
- import <code> [set_id]    Merge a share code into a set (new set if omitted)
- decode <code>             Print the decoded payload
- resolve <set_id>          Locate each clue in current content (needs content_dir)
- markdown <set_id> <path>  Write the set as a markdown file
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from cluekit.config import ClueConfig, load_config
from cluekit.errors import InvalidCodeError, NotFoundError

USAGE = """\
Usage: python -m cluekit <command> [args]
  list                      — List clue sets
  create <title>            — Create an empty clue set
  export <set_id>           — Print the set's share code
  import <code> [set_id]    — Merge a share code into a set
  decode <code>             — Print the decoded payload
  resolve <set_id>          — Locate clues in current content
  markdown <set_id> <path>  — Write the set as markdown"""


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _open_store(config: ClueConfig):
    from cluekit.clues.backend import JsonFileBackend
    from cluekit.clues.store import ClueStore

    return ClueStore(
        JsonFileBackend(config.store.data_dir),
        storage_key=config.store.storage_key,
        default_set_key=config.store.default_set_key,
    )


def _cmd_list(config: ClueConfig, args: list[str]) -> None:
    store = _open_store(config)
    for s in store.sorted_sets():
        print(f"{s.id}  {s.title}  ({len(s.items)} items)")


def _cmd_create(config: ClueConfig, args: list[str]) -> None:
    store = _open_store(config)
    print(store.create_set(" ".join(args) or None))


def _cmd_export(config: ClueConfig, args: list[str]) -> None:
    store = _open_store(config)
    print(store.export_share_code(args[0]))


def _cmd_import(config: ClueConfig, args: list[str]) -> None:
    store = _open_store(config)
    result = store.import_share_code(args[0], target_set_id=args[1] if len(args) > 1 else None)
    status = "created" if result.created else "merged into"
    print(f"{status} {result.set_id}: {result.items_added} items added")


def _cmd_decode(config: ClueConfig, args: list[str]) -> None:
    from cluekit.codec.share_code import parse_share_code
    from cluekit.content.digest import digest_to_hex

    payload = parse_share_code(args[0])
    print(f"version {payload.version}, {len(payload.stories)} stories, {len(payload.items)} items")
    for ref in payload.items:
        print(f"  {payload.stories[ref.story_index]}#{ref.segment_index}  {digest_to_hex(ref.digest64)}")


def _cmd_resolve(config: ClueConfig, args: list[str]) -> None:
    from cluekit.clues.resolver import resolve_many
    from cluekit.content.provider import DirectoryStoryProvider

    if config.content_dir is None:
        print("content_dir is not configured (set CLUEKIT_CONTENT_DIR)")
        sys.exit(1)
    store = _open_store(config)
    clue_set = store.get_set(args[0])
    if clue_set is None:
        raise NotFoundError(args[0])
    provider = DirectoryStoryProvider(config.content_dir)
    for r in resolve_many(clue_set.items, provider, window=config.resolver.window):
        where = r.index if r.resolved else f"? (last known {r.position})"
        print(f"{r.item.story_id}#{r.item.segment_index} -> {where} [{r.method}]")


def _cmd_markdown(config: ClueConfig, args: list[str]) -> None:
    from cluekit.clues.markdown import export_markdown

    store = _open_store(config)
    print(export_markdown(store, args[0], Path(args[1])))


COMMANDS = {
    "list": (_cmd_list, 0),
    "create": (_cmd_create, 0),
    "export": (_cmd_export, 1),
    "import": (_cmd_import, 1),
    "decode": (_cmd_decode, 1),
    "resolve": (_cmd_resolve, 1),
    "markdown": (_cmd_markdown, 2),
}


def main(argv: list[str] | None = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    cmd = argv[0] if argv else ""
    if cmd not in COMMANDS or len(argv) - 1 < COMMANDS[cmd][1]:
        print(USAGE)
        sys.exit(1)

    config = load_config()
    _setup_logging(config.log_level)

    handler, _ = COMMANDS[cmd]
    try:
        handler(config, argv[1:])
    except (InvalidCodeError, NotFoundError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
