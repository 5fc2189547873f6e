"""
Settings management for gitcanvas
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

from gitcanvas.constants import (
    CONFIG_DIR_NAME,
    DEFAULT_PAGE_SIZE,
    DEFAULT_PERSIST_DEBOUNCE_MS,
    SETTINGS_FILE,
)

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = "GITCANVAS_LOG_LEVEL"


class Settings:
    """Manages application settings"""

    DEFAULT_SETTINGS = {
        "graph": {
            "page_size": DEFAULT_PAGE_SIZE,
            "subtree_drag": False,  # Drag carries descendants (modifier inverts)
            "persist_debounce_ms": DEFAULT_PERSIST_DEBOUNCE_MS,
            "show_working_copy": True,
        },
        "cache": {"path": None},  # None -> ~/.config/gitcanvas/layout-cache.json
        "ui": {
            "recent_repositories": [],
            "max_recent": 10,
        },
        "logging": {"level": "WARNING"},
    }

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize settings"""
        if config_path is None:
            config_path = Path.home() / ".config" / CONFIG_DIR_NAME / SETTINGS_FILE

        self.config_path = config_path
        self.settings = copy.deepcopy(self.DEFAULT_SETTINGS)
        self.load()

    def load(self) -> None:
        """Load settings from file"""
        if not self.config_path.exists():
            return
        try:
            with open(self.config_path, encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Using default settings, cannot read %s: %s", self.config_path, e)
            return
        if isinstance(loaded, dict):
            # Merge with defaults to handle new settings
            self._merge_settings(self.settings, loaded)

    def save(self) -> None:
        """Save settings to file"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self.settings, f, indent=2)

    def _merge_settings(self, base: dict[str, Any], updates: dict[str, Any]) -> None:
        """Recursively merge settings dictionaries"""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                # Both are dicts, safe to recurse
                base_dict: dict[str, Any] = base[key]
                value_dict: dict[str, Any] = value
                self._merge_settings(base_dict, value_dict)
            else:
                base[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get a setting by dot-separated path (e.g., 'graph.page_size')"""
        parts = path.split(".")
        value: Any = self.settings

        for part in parts:
            if isinstance(value, dict):
                value_dict: dict[str, Any] = value
                if part in value_dict:
                    value = value_dict[part]
                else:
                    return default
            else:
                return default

        return value

    def set(self, path: str, value: Any) -> None:
        """Set a setting by dot-separated path"""
        parts = path.split(".")
        target: Any = self.settings

        for part in parts[:-1]:
            if part not in target:
                target[part] = {}
            target = target[part]

        target[parts[-1]] = value

    def get_page_size(self) -> int:
        """Number of commits fetched per page (at least 1)."""
        return max(1, int(self.get("graph.page_size", DEFAULT_PAGE_SIZE)))

    def get_subtree_drag(self) -> bool:
        return bool(self.get("graph.subtree_drag", False))

    def get_persist_debounce_ms(self) -> int:
        """Delay between the last drag end and the layout write."""
        return max(0, int(self.get("graph.persist_debounce_ms", DEFAULT_PERSIST_DEBOUNCE_MS)))

    def get_show_working_copy(self) -> bool:
        return bool(self.get("graph.show_working_copy", True))

    def get_cache_path(self) -> Path | None:
        path = self.get("cache.path")
        return Path(path).expanduser() if path else None

    def get_log_level(self) -> str:
        """Log level name; the GITCANVAS_LOG_LEVEL environment variable wins."""
        level: str = os.environ.get(LOG_LEVEL_ENV) or str(self.get("logging.level", "WARNING"))
        return level.upper()

    def add_recent_repository(self, repo_path: str) -> None:
        """Move a repository to the front of the recent list"""
        recent: list[str] = [p for p in self.get("ui.recent_repositories", []) if p != repo_path]
        recent.insert(0, repo_path)
        max_recent = int(self.get("ui.max_recent", 10))
        self.set("ui.recent_repositories", recent[:max_recent])

    def get_recent_repositories(self) -> list[str]:
        return list(self.get("ui.recent_repositories", []))
