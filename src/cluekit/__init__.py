"""cluekit — story passage bookmarks (clue sets) with portable share codes."""

__version__ = "0.1.0"
