"""
Persisted node positions, one map per repository.

The store is a single JSON file shaped as::

    {"/path/to/repo": {"<commit id>": {"x": 12.0, "y": 340.0}, ...}, ...}

Repository paths are normalized by stripping trailing slashes. A missing
repository or commit id simply means the position is unknown.
"""

import json
import logging
import os
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from gitcanvas.constants import CONFIG_DIR_NAME, LAYOUT_CACHE_FILE
from gitcanvas.graph.errors import LayoutError, PersistenceError
from gitcanvas.graph.types import Position

logger = logging.getLogger(__name__)


def normalize_repo_path(repo_path: str) -> str:
    """Strip trailing path separators (but keep a bare root)."""
    stripped = repo_path.rstrip("/\\")
    return stripped or repo_path[:1]


def default_cache_path() -> Path:
    return Path.home() / ".config" / CONFIG_DIR_NAME / LAYOUT_CACHE_FILE


class LayoutCache:
    """JSON-file backed layout store. Safe to use from worker threads."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_cache_path()
        self._lock = threading.Lock()

    def get(self, repo_path: str) -> dict[str, Position]:
        """Cached positions for a repository; empty if none are known."""
        with self._lock:
            data = self._read()
        raw = data.get(normalize_repo_path(repo_path))
        if not isinstance(raw, dict):
            return {}

        positions: dict[str, Position] = {}
        for commit_id, value in raw.items():
            try:
                positions[commit_id] = Position.from_dict(value)
            except (KeyError, TypeError, ValueError, LayoutError):
                logger.debug("Skipping malformed cached position for %s", commit_id)
        logger.debug("Loaded %d cached positions for %s", len(positions), repo_path)
        return positions

    def save(self, repo_path: str, positions: Mapping[str, Position]) -> None:
        """Merge ``positions`` into the repository's cached layout."""
        key = normalize_repo_path(repo_path)
        with self._lock:
            data = self._read()
            existing = data.get(key)
            merged: dict[str, Any] = dict(existing) if isinstance(existing, dict) else {}
            merged.update({cid: pos.to_dict() for cid, pos in positions.items()})
            data[key] = merged
            self._write(data)
        logger.debug("Saved %d positions for %s", len(positions), key)

    def clear(self, repo_path: str) -> bool:
        """Forget the layout of one repository. Returns whether one existed."""
        key = normalize_repo_path(repo_path)
        with self._lock:
            data = self._read()
            if key not in data:
                return False
            del data[key]
            self._write(data)
        return True

    def list_repositories(self) -> list[str]:
        with self._lock:
            return sorted(self._read())

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable layout cache %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Failed to write layout cache {self.path}: {e}") from e
