"""Tests for the config module."""
import json
from pathlib import Path

from hours_rank.config import (
    get_caller,
    get_db_path,
    load_config,
    save_config,
    set_caller,
)


class TestLoadConfig:
    def test_missing_file_returns_empty(self, tmp_path):
        assert load_config(tmp_path / "nonexistent.json") == {}

    def test_invalid_json_returns_empty(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("not json", encoding="utf-8")
        assert load_config(path) == {}

    def test_non_object_returns_empty(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_config(path) == {}

    def test_loads_valid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text('{"key": "value"}', encoding="utf-8")
        assert load_config(path) == {"key": "value"}


class TestSaveConfig:
    def test_creates_parent_dirs(self, tmp_path):
        path = tmp_path / "sub" / "dir" / "config.json"
        save_config({"nested": True}, path)
        assert json.loads(path.read_text()) == {"nested": True}

    def test_overwrites_existing(self, tmp_path):
        path = tmp_path / "config.json"
        save_config({"v": 1}, path)
        save_config({"v": 2}, path)
        assert json.loads(path.read_text()) == {"v": 2}


class TestDbPath:
    def test_not_set_returns_none(self, tmp_path):
        assert get_db_path(tmp_path / "config.json") is None

    def test_configured_path(self, tmp_path):
        path = tmp_path / "config.json"
        save_config({"db_path": "/data/hours.db"}, path)
        assert get_db_path(path) == Path("/data/hours.db")


class TestCaller:
    def test_unconfigured_is_unauthenticated(self, tmp_path):
        ctx = get_caller(tmp_path / "config.json")
        assert ctx.caller_id is None
        assert ctx.caller_email is None
        assert not ctx.is_authenticated

    def test_set_and_get_roundtrip(self, tmp_path):
        path = tmp_path / "config.json"
        set_caller("u1", "ada@example.com", config_path=path)
        ctx = get_caller(path)
        assert ctx.caller_id == "u1"
        assert ctx.caller_email == "ada@example.com"
        assert ctx.is_authenticated

    def test_preserves_other_keys(self, tmp_path):
        path = tmp_path / "config.json"
        save_config({"db_path": "/keep/me.db"}, path)
        set_caller("u1", config_path=path)
        config = load_config(path)
        assert config["db_path"] == "/keep/me.db"
        assert config["user_id"] == "u1"
        assert "user_email" not in config
