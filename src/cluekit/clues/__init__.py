"""Clue sets: bookmark collections over story passages.

    models.py      ClueItem / ClueSet + persisted camelCase form
    backend.py     key-value backends (JSON files, in-memory)
    store.py       ClueStore: CRUD, dedupe, share code export/import
    resolver.py    re-locate bookmarks after content changes
    highlights.py  highlight import + lazy preview fill
    markdown.py    markdown files with the share code in frontmatter
"""
