"""Tests for settings loading and the graph getters."""

import json

from gitcanvas.config.settings import LOG_LEVEL_ENV, Settings
from gitcanvas.constants import DEFAULT_PAGE_SIZE


class TestSettings:
    def test_defaults(self, tmp_path):
        settings = Settings(tmp_path / "settings.json")
        assert settings.get_page_size() == DEFAULT_PAGE_SIZE
        assert settings.get_subtree_drag() is False
        assert settings.get_show_working_copy() is True
        assert settings.get_cache_path() is None

    def test_dot_path_get_and_set(self, tmp_path):
        settings = Settings(tmp_path / "settings.json")
        settings.set("graph.page_size", 25)
        assert settings.get("graph.page_size") == 25
        assert settings.get("graph.missing", "fallback") == "fallback"
        assert settings.get("graph.page_size.deeper", "fallback") == "fallback"

    def test_save_and_reload_merges_with_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"graph": {"subtree_drag": True}}), encoding="utf-8")
        settings = Settings(path)
        assert settings.get_subtree_drag() is True
        assert settings.get_page_size() == DEFAULT_PAGE_SIZE

        settings.set("graph.page_size", 10)
        settings.save()
        assert Settings(path).get_page_size() == 10

    def test_unreadable_file_uses_defaults(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("not json", encoding="utf-8")
        assert Settings(path).get_page_size() == DEFAULT_PAGE_SIZE

    def test_page_size_at_least_one(self, tmp_path):
        settings = Settings(tmp_path / "settings.json")
        settings.set("graph.page_size", 0)
        assert settings.get_page_size() == 1

    def test_cache_path_expanded(self, tmp_path):
        settings = Settings(tmp_path / "settings.json")
        settings.set("cache.path", str(tmp_path / "layouts.json"))
        assert settings.get_cache_path() == tmp_path / "layouts.json"

    def test_log_level_env_wins(self, tmp_path, monkeypatch):
        settings = Settings(tmp_path / "settings.json")
        settings.set("logging.level", "info")
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        assert settings.get_log_level() == "INFO"
        monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
        assert settings.get_log_level() == "DEBUG"

    def test_recent_repositories(self, tmp_path):
        settings = Settings(tmp_path / "settings.json")
        settings.set("ui.max_recent", 2)
        settings.add_recent_repository("/a")
        settings.add_recent_repository("/b")
        settings.add_recent_repository("/a")
        settings.add_recent_repository("/c")
        assert settings.get_recent_repositories() == ["/c", "/a"]
