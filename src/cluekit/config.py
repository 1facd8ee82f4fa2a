"""Configuration loading from environment variables and cluekit.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from cluekit.clues.resolver import NEIGHBORHOOD_WINDOW
from cluekit.clues.store import DEFAULT_SET_ID_KEY, STORAGE_KEY

_DEFAULT_DATA_DIR = Path.home() / ".cluekit" / "data"
_CONFIG_FILENAME = "cluekit.toml"


@dataclass
class StoreConfig:
    """Where and under which keys the clue store snapshot lives."""

    data_dir: Path = _DEFAULT_DATA_DIR
    storage_key: str = STORAGE_KEY
    default_set_key: str = DEFAULT_SET_ID_KEY


@dataclass
class ResolverConfig:
    window: int = NEIGHBORHOOD_WINDOW


@dataclass
class ClueConfig:
    """Top-level cluekit configuration."""

    store: StoreConfig = field(default_factory=StoreConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    content_dir: Path | None = None
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> ClueConfig:
    """Load configuration from environment variables and optional cluekit.toml.

    Priority: environment variables > cluekit.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".cluekit" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    store_data = file_data.get("store", {})
    resolver_data = file_data.get("resolver", {})

    data_dir = os.getenv("CLUEKIT_DATA_DIR", store_data.get("data_dir"))
    content_dir = os.getenv("CLUEKIT_CONTENT_DIR", file_data.get("content_dir"))

    config = ClueConfig(
        store=StoreConfig(
            data_dir=Path(data_dir).expanduser() if data_dir else _DEFAULT_DATA_DIR,
            storage_key=store_data.get("storage_key", STORAGE_KEY),
            default_set_key=store_data.get("default_set_key", DEFAULT_SET_ID_KEY),
        ),
        resolver=ResolverConfig(
            window=int(
                os.getenv("CLUEKIT_RESOLVE_WINDOW", resolver_data.get("window", NEIGHBORHOOD_WINDOW))
            ),
        ),
        content_dir=Path(content_dir).expanduser() if content_dir else None,
        log_level=os.getenv("CLUEKIT_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
    return config
