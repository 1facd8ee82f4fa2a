"""Tests for configuration loading."""

import pytest
from pathlib import Path

from cluekit.config import load_config

_ENV_KEYS = ["CLUEKIT_DATA_DIR", "CLUEKIT_CONTENT_DIR", "CLUEKIT_RESOLVE_WINDOW", "CLUEKIT_LOG_LEVEL"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestConfig:
    def test_defaults(self):
        config = load_config()
        assert config.store.storage_key == "arknights-clue-sets-v1"
        assert config.store.default_set_key == "arknights-default-clue-set-id"
        assert config.store.data_dir.name == "data"
        assert config.resolver.window == 12
        assert config.content_dir is None
        assert config.log_level == "INFO"

    def test_env_override(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("CLUEKIT_DATA_DIR", str(tmp_path / "store"))
        monkeypatch.setenv("CLUEKIT_RESOLVE_WINDOW", "20")
        monkeypatch.setenv("CLUEKIT_CONTENT_DIR", str(tmp_path / "stories"))

        config = load_config()
        assert config.store.data_dir == tmp_path / "store"
        assert config.resolver.window == 20
        assert config.content_dir == tmp_path / "stories"

    def test_toml_file(self, tmp_path: Path):
        toml_path = tmp_path / "custom.toml"
        toml_path.write_text("""
log_level = "DEBUG"
content_dir = "/srv/stories"

[store]
data_dir = "/var/lib/cluekit"
storage_key = "clues"

[resolver]
window = 6
""")
        config = load_config(toml_path)
        assert config.log_level == "DEBUG"
        assert config.content_dir == Path("/srv/stories")
        assert config.store.data_dir == Path("/var/lib/cluekit")
        assert config.store.storage_key == "clues"
        assert config.resolver.window == 6

    def test_cwd_toml_discovered(self, tmp_path: Path):
        (tmp_path / "cluekit.toml").write_text("[resolver]\nwindow = 3\n")
        assert load_config().resolver.window == 3

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("CLUEKIT_RESOLVE_WINDOW", "30")
        toml_path = tmp_path / "cluekit.toml"
        toml_path.write_text("[resolver]\nwindow = 6\n")
        config = load_config(toml_path)
        assert config.resolver.window == 30  # env wins
