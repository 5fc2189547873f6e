"""
SessionRegistry - one GraphSession per open repository tab.

Tabs never share graph state: each repository path maps to its own
session, created on open and shut down (layout flushed) on close.
"""

import logging
from collections.abc import Callable

from PySide6.QtCore import QObject, Signal

from gitcanvas.graph.layout_cache import normalize_repo_path
from gitcanvas.session.graph_session import GraphSession

logger = logging.getLogger(__name__)


class SessionRegistry(QObject):
    """Registry of live graph sessions keyed by normalized repository path."""

    session_opened = Signal(str)  # repo_path
    session_closed = Signal(str)  # repo_path

    def __init__(self, factory: Callable[[str], GraphSession]) -> None:
        super().__init__()
        self._factory = factory
        self._sessions: dict[str, GraphSession] = {}

    def open(self, repo_path: str) -> GraphSession:
        """Get the session for a repository, creating it on first use."""
        key = normalize_repo_path(repo_path)
        session = self._sessions.get(key)
        if session is None:
            session = self._factory(key)
            self._sessions[key] = session
            logger.info("Opened graph session for %s", key)
            self.session_opened.emit(key)
        return session

    def close(self, repo_path: str) -> None:
        """Shut a session down and forget it."""
        key = normalize_repo_path(repo_path)
        session = self._sessions.pop(key, None)
        if session is None:
            return
        session.shutdown()
        self.session_closed.emit(key)

    def get(self, repo_path: str) -> GraphSession | None:
        return self._sessions.get(normalize_repo_path(repo_path))

    def get_all(self) -> dict[str, GraphSession]:
        return dict(self._sessions)

    def close_all(self) -> None:
        for key in list(self._sessions):
            self.close(key)
