"""
Background worker classes for graph sessions.

These QObject workers run in separate threads to handle:
- Fetching a page of history together with the cached layout
- Writing the layout cache
"""

import logging
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, Signal

from gitcanvas.graph.errors import GraphError

if TYPE_CHECKING:
    from gitcanvas.git_backend.repository import GraphRepository
    from gitcanvas.graph.layout_cache import LayoutCache
    from gitcanvas.graph.pagination import PageRequest
    from gitcanvas.graph.types import Position

logger = logging.getLogger(__name__)


class PageFetchWorker(QObject):
    """Worker for fetching one page of commits in background"""

    finished = Signal(object, object, object)  # PageRequest, CommitPage, cached positions
    error = Signal(object, str)  # PageRequest, message

    def __init__(
        self,
        repo: "GraphRepository",
        cache: "LayoutCache",
        request: "PageRequest",
        include_working_copy: bool = True,
    ) -> None:
        super().__init__()
        self.repo = repo
        self.cache = cache
        self.request = request
        self.include_working_copy = include_working_copy

    def run(self) -> None:
        """Fetch commits, then the cached layout for the repository"""
        logger.debug(
            "Fetching page %d (skip=%d, limit=%d)",
            self.request.seq,
            self.request.skip,
            self.request.limit,
        )
        try:
            page = self.repo.fetch_commits(
                self.request.limit,
                skip=self.request.skip,
                include_working_copy=self.include_working_copy,
            )
            cached = self.cache.get(self.repo.path)
        except GraphError as e:
            logger.error("Page fetch %d failed: %s", self.request.seq, e)
            self.error.emit(self.request, str(e))
            return
        self.finished.emit(self.request, page, cached)


class LayoutSaveWorker(QObject):
    """Worker for persisting node positions in background"""

    finished = Signal(int)  # Number of positions written
    error = Signal(str)

    def __init__(self, cache: "LayoutCache", repo_path: str, positions: dict[str, "Position"]) -> None:
        super().__init__()
        self.cache = cache
        self.repo_path = repo_path
        self.positions = positions

    def run(self) -> None:
        """Merge positions into the cache file"""
        try:
            self.cache.save(self.repo_path, self.positions)
        except GraphError as e:
            logger.error("Saving layout for %s failed: %s", self.repo_path, e)
            self.error.emit(str(e))
            return
        self.finished.emit(len(self.positions))
