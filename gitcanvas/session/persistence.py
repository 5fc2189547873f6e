"""Debounced layout persistence."""

import logging
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QThread, QTimer, Signal

from gitcanvas.constants import DEFAULT_PERSIST_DEBOUNCE_MS
from gitcanvas.graph.errors import PersistenceError
from gitcanvas.session.workers import LayoutSaveWorker

if TYPE_CHECKING:
    from gitcanvas.graph.layout_cache import LayoutCache
    from gitcanvas.graph.types import Position

logger = logging.getLogger(__name__)


class LayoutPersister(QObject):
    """
    Coalesces layout snapshots into a single trailing-edge write.

    Every ``schedule`` replaces the pending snapshot and restarts the
    single-shot timer, so a burst of drag ends produces one write once the
    user pauses. Writes run on a worker thread; a failure is reported via
    ``save_failed`` and the next drag end simply tries again.
    """

    saved = Signal(int)
    save_failed = Signal(str)

    def __init__(
        self,
        cache: "LayoutCache",
        repo_path: str,
        debounce_ms: int = DEFAULT_PERSIST_DEBOUNCE_MS,
        background: bool = True,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.cache = cache
        self.repo_path = repo_path
        self.background = background
        self._pending: dict[str, "Position"] | None = None
        self._save_thread: QThread | None = None
        self._save_worker: LayoutSaveWorker | None = None

        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, debounce_ms))
        self._timer.timeout.connect(self.flush)

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @property
    def timer_active(self) -> bool:
        return self._timer.isActive()

    def schedule(self, positions: dict[str, "Position"]) -> None:
        """Queue a snapshot of all node positions and (re)start the delay."""
        self._pending = dict(positions)
        self._timer.start()

    def flush(self) -> None:
        """Write the pending snapshot now."""
        self._timer.stop()
        if self._pending is None:
            return
        if self._save_thread is not None:
            # Previous write still running; retry after another delay
            self._timer.start()
            return

        positions, self._pending = self._pending, None
        worker = LayoutSaveWorker(self.cache, self.repo_path, positions)
        worker.finished.connect(self._on_saved)
        worker.error.connect(self._on_save_failed)

        if not self.background:
            worker.run()
            return

        self._save_thread = QThread()
        self._save_worker = worker
        worker.moveToThread(self._save_thread)
        self._save_thread.started.connect(worker.run)
        self._save_thread.start()

    def discard(self) -> None:
        """Drop the pending snapshot and wait out any write already running."""
        self._timer.stop()
        self._pending = None
        self._cleanup_thread()

    def shutdown(self) -> None:
        """Stop the timer and write anything still pending, synchronously."""
        self._timer.stop()
        if self._save_thread is not None:
            self._save_thread.quit()
            self._save_thread.wait()
            self._save_thread = None
            self._save_worker = None

        if self._pending is None:
            return
        positions, self._pending = self._pending, None
        try:
            self.cache.save(self.repo_path, positions)
        except PersistenceError as e:
            logger.error("Final layout save for %s failed: %s", self.repo_path, e)

    def _on_saved(self, count: int) -> None:
        self._cleanup_thread()
        self.saved.emit(count)

    def _on_save_failed(self, message: str) -> None:
        self._cleanup_thread()
        self.save_failed.emit(message)

    def _cleanup_thread(self) -> None:
        if self._save_thread:
            self._save_thread.quit()
            self._save_thread.wait()
            self._save_thread = None
            self._save_worker = None
