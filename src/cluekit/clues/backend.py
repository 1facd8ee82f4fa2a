"""Durable key-value backends for the clue store snapshot."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueBackend(Protocol):
    """Protocol for the local durable key-value store."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent.

        Raises OSError or ValueError when the value exists but cannot be read.
        """
        ...

    def set(self, key: str, value: str) -> None:
        """Store a value. May raise OSError when storage is unavailable."""
        ...


class MemoryBackend:
    """Dict-backed backend for tests and ephemeral stores."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileBackend:
    """One ``<root>/<key>.json`` file per key."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _path(self, key: str) -> Path:
        slug = re.sub(r'[<>:"/\\|?*\n\r\t]', "", key).strip() or "unnamed"
        return self.root / f"{slug}.json"

    def get(self, key: str) -> str | None:
        """Missing file is None; other read or decode errors propagate."""
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)
