"""Tests for the persisted layout cache."""

import json

import pytest

from gitcanvas.graph.errors import PersistenceError
from gitcanvas.graph.layout_cache import LayoutCache, normalize_repo_path
from gitcanvas.graph.types import Position


@pytest.fixture
def cache(tmp_path):
    return LayoutCache(tmp_path / "layout-cache.json")


class TestNormalizeRepoPath:
    def test_trailing_slashes_stripped(self):
        assert normalize_repo_path("/home/me/repo/") == "/home/me/repo"
        assert normalize_repo_path("/home/me/repo//") == "/home/me/repo"
        assert normalize_repo_path("C:\\work\\repo\\") == "C:\\work\\repo"

    def test_root_kept(self):
        assert normalize_repo_path("/") == "/"


class TestLayoutCache:
    def test_round_trip(self, cache):
        positions = {"A": Position(1, 2), "B": Position(3, 4)}
        cache.save("/repo", positions)
        assert cache.get("/repo") == positions

    def test_unknown_repository_is_empty(self, cache):
        assert cache.get("/nowhere") == {}

    def test_trailing_slash_is_same_repository(self, cache):
        cache.save("/repo/", {"A": Position(1, 2)})
        assert cache.get("/repo") == {"A": Position(1, 2)}

    def test_save_merges(self, cache):
        cache.save("/repo", {"A": Position(1, 2), "B": Position(3, 4)})
        cache.save("/repo", {"B": Position(9, 9), "C": Position(5, 6)})
        assert cache.get("/repo") == {
            "A": Position(1, 2),
            "B": Position(9, 9),
            "C": Position(5, 6),
        }

    def test_repositories_are_separate(self, cache):
        cache.save("/one", {"A": Position(1, 1)})
        cache.save("/two", {"A": Position(2, 2)})
        assert cache.get("/one")["A"] == Position(1, 1)
        assert cache.list_repositories() == ["/one", "/two"]

    def test_file_shape(self, cache):
        cache.save("/repo/", {"A": Position(1.5, 2)})
        with open(cache.path, encoding="utf-8") as f:
            data = json.load(f)
        assert data == {"/repo": {"A": {"x": 1.5, "y": 2}}}

    def test_clear(self, cache):
        cache.save("/repo", {"A": Position(1, 2)})
        cache.save("/other", {"A": Position(1, 2)})
        assert cache.clear("/repo/") is True
        assert cache.get("/repo") == {}
        assert cache.get("/other") != {}
        assert cache.clear("/repo") is False

    def test_corrupt_file_reads_as_empty(self, cache):
        cache.path.write_text("{not json", encoding="utf-8")
        assert cache.get("/repo") == {}
        cache.save("/repo", {"A": Position(1, 2)})
        assert cache.get("/repo") == {"A": Position(1, 2)}

    def test_malformed_entries_skipped(self, cache):
        cache.path.write_text(
            json.dumps({"/repo": {"A": {"x": 1, "y": 2}, "B": {"x": "nope"}, "C": 3}}),
            encoding="utf-8",
        )
        assert cache.get("/repo") == {"A": Position(1, 2)}

    def test_unwritable_location_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        cache = LayoutCache(blocker / "sub" / "layout-cache.json")
        with pytest.raises(PersistenceError):
            cache.save("/repo", {"A": Position(1, 2)})
