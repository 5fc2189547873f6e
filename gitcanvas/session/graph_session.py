"""
GraphSession - commit graph state for one repository tab.

The session owns everything that used to live in a shared store: the loaded
commit window, rendered nodes and edges, the drag gesture, the diff pointer
and the pagination state. A rendering surface attaches by connecting to the
signals; with nothing attached the session still works (tests drive it
directly with ``background=False``).

Fetch flow: ``refresh``/``load_more`` issue a PageRequest and run a
PageFetchWorker; its result goes through ``apply_page``, which lays out the
whole window, reconciles positions against the live and cached ones, and
publishes nodes before edges.
"""

import logging
from collections import Counter
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QThread, Signal

from gitcanvas.constants import DEFAULT_PAGE_SIZE, DEFAULT_PERSIST_DEBOUNCE_MS
from gitcanvas.graph.diff_pointer import DiffPointerController
from gitcanvas.graph.drag import SubtreeDragPropagator
from gitcanvas.graph.errors import LayoutError, PersistenceError
from gitcanvas.graph.layout import compute_layout
from gitcanvas.graph.pagination import PageRequest, PaginationController
from gitcanvas.graph.reconcile import build_nodes, reconcile
from gitcanvas.graph.types import (
    CommitNode,
    CommitPage,
    Edge,
    GraphNode,
    Position,
    VirtualDiffTarget,
    Viewport,
)
from gitcanvas.session.persistence import LayoutPersister
from gitcanvas.session.workers import PageFetchWorker

if TYPE_CHECKING:
    from gitcanvas.git_backend.repository import GraphRepository
    from gitcanvas.graph.layout_cache import LayoutCache

logger = logging.getLogger(__name__)


class GraphSession(QObject):
    """Commit graph controller for a single repository."""

    nodes_changed = Signal(object)  # dict[str, CommitNode]
    edges_changed = Signal(object)  # list[Edge]
    positions_changed = Signal(object)  # dict[str, Position], partial update
    loading_changed = Signal(bool)
    has_more_changed = Signal(bool)
    error_occurred = Signal(str)
    diff_pointer_changed = Signal()
    diff_requested = Signal(str, str, str)  # repo_path, source_id, target_id
    layout_saved = Signal(int)

    def __init__(
        self,
        repo: "GraphRepository",
        cache: "LayoutCache",
        page_size: int = DEFAULT_PAGE_SIZE,
        subtree_drag: bool = False,
        persist_debounce_ms: int = DEFAULT_PERSIST_DEBOUNCE_MS,
        include_working_copy: bool = True,
        background: bool = True,
    ) -> None:
        super().__init__()
        self.repo = repo
        self.cache = cache
        self.repo_path = repo.path
        self.include_working_copy = include_working_copy
        self.background = background

        self.pagination = PaginationController(page_size)
        self.nodes: dict[str, CommitNode] = {}
        self.edges: list[Edge] = []

        self.drag = SubtreeDragPropagator(subtree_default=subtree_drag)
        self.diff_pointer = DiffPointerController(on_select=self._on_diff_selected)

        self.persister = LayoutPersister(
            cache, self.repo_path, debounce_ms=persist_debounce_ms, background=background, parent=self
        )
        self.persister.saved.connect(self.layout_saved.emit)
        self.persister.save_failed.connect(self.error_occurred.emit)

        # One thread per request, keyed by sequence number
        self._fetch_threads: dict[int, tuple[QThread, PageFetchWorker]] = {}

    # --- Loading ---

    @property
    def loading(self) -> bool:
        return self.pagination.busy

    @property
    def has_more(self) -> bool:
        return self.pagination.has_more

    @property
    def active_fetches(self) -> int:
        """Fetch threads not yet joined, superseded ones included."""
        return len(self._fetch_threads)

    def live_positions(self) -> dict[str, Position]:
        return {nid: node.position for nid, node in self.nodes.items()}

    def refresh(self) -> bool:
        """Full reload from the branch tips. No-op while a fetch is running."""
        return self._start(self.pagination.begin_refresh())

    def load_more(self) -> bool:
        """Append the next page of older history. No-op while a fetch is running."""
        return self._start(self.pagination.begin_load_more())

    def _start(self, request: PageRequest | None) -> bool:
        if request is None:
            return False
        self.loading_changed.emit(True)
        self._start_fetch(request)
        return True

    def _start_fetch(self, request: PageRequest) -> None:
        """Run a page fetch, on a worker thread unless running headless"""
        worker = PageFetchWorker(self.repo, self.cache, request, self.include_working_copy)
        worker.finished.connect(self.apply_page)
        worker.error.connect(self.fail_request)

        if not self.background:
            worker.run()
            return

        thread = QThread()
        self._fetch_threads[request.seq] = (thread, worker)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        thread.start()

    def apply_page(self, request: PageRequest, page: CommitPage, cached: dict[str, Position]) -> bool:
        """
        Merge a fetched page into the graph.

        Stale responses are dropped. Nothing is mutated unless the whole
        window lays out; node positions are published before the edges.
        """
        self._release_fetch_thread(request)
        if not self.pagination.is_current(request):
            logger.info("Ignoring superseded page %d for %s", request.seq, self.repo_path)
            return False

        window = self.pagination.window_for(request, page)
        oldest_first = list(reversed(window))
        try:
            layout = compute_layout(oldest_first)
        except LayoutError as e:
            self.fail_request(request, f"Cannot lay out history: {e}")
            return False

        result = reconcile(oldest_first, layout, self.live_positions(), cached, anchor_id=request.anchor_id)
        self.pagination.complete(request, page)

        self.nodes = build_nodes(window, result.positions)
        self.nodes_changed.emit(dict(self.nodes))
        self.edges = result.edges
        self.edges_changed.emit(list(self.edges))

        source = self.diff_pointer.source_commit_id
        if source is not None and source not in self.nodes:
            self.cancel_diff()

        logger.info(
            "Loaded %d commits for %s (%s, has_more=%s)",
            len(window),
            self.repo_path,
            request.kind,
            page.has_more,
        )
        self.loading_changed.emit(False)
        self.has_more_changed.emit(page.has_more)
        return True

    def fail_request(self, request: PageRequest, message: str) -> None:
        """Report a failed fetch; the graph keeps its current state."""
        self._release_fetch_thread(request)
        if not self.pagination.fail(request):
            return
        logger.warning("Fetch for %s failed: %s", self.repo_path, message)
        self.loading_changed.emit(False)
        self.error_occurred.emit(message)

    def _release_fetch_thread(self, request: PageRequest) -> None:
        """Join the thread that served ``request``; its worker has already returned."""
        entry = self._fetch_threads.pop(request.seq, None)
        if entry is not None:
            thread, _ = entry
            thread.quit()
            thread.wait()

    def _cleanup_fetch_threads(self) -> None:
        for thread, _ in self._fetch_threads.values():
            thread.quit()
            thread.wait()
        self._fetch_threads = {}

    def invalidate(self) -> None:
        """Drop whatever fetch is in flight; its response will be ignored."""
        was_loading = self.pagination.busy
        self.pagination.invalidate()
        if was_loading:
            self.loading_changed.emit(False)

    def shutdown(self) -> None:
        """Tab closing: forget pending fetches and flush the layout."""
        self.invalidate()
        self.cancel_diff()
        self.drag.end()
        self.persister.shutdown()
        self._cleanup_fetch_threads()

    # --- Dragging ---

    @property
    def subtree_drag(self) -> bool:
        return self.drag.subtree_default

    def set_subtree_drag(self, enabled: bool) -> None:
        self.drag.subtree_default = enabled

    def begin_drag(self, node_id: str) -> bool:
        node = self.nodes.get(node_id)
        if node is None:
            return False
        self.drag.begin(node_id, node.position)
        return True

    def drag_to(self, position: Position, modifier_held: bool = False) -> dict[str, Position]:
        """Move the dragged node (and maybe its descendants) for one pointer tick."""
        moved = self.drag.move(position, self.edges, self.live_positions(), modifier_held)
        updates = {nid: pos for nid, pos in moved.items() if nid in self.nodes}
        for nid, pos in updates.items():
            self.nodes[nid].position = pos
        if updates:
            self.positions_changed.emit(updates)
        return updates

    def end_drag(self) -> bool:
        """Finish the gesture and schedule a write of every node position."""
        if not self.drag.end():
            return False
        self.persister.schedule(self.live_positions())
        return True

    def set_position(self, node_id: str, position: Position) -> None:
        """Place a single node outside of a drag gesture."""
        node = self.nodes.get(node_id)
        if node is None:
            return
        node.position = position
        self.positions_changed.emit({node_id: position})
        self.persister.schedule(self.live_positions())

    # --- Diff pointer ---

    def start_diff(self, source_id: str) -> bool:
        node = self.nodes.get(source_id)
        if node is None or not self.diff_pointer.start(source_id, node.position):
            return False
        self.diff_pointer_changed.emit()
        return True

    def update_diff_cursor(self, screen_x: float, screen_y: float, viewport: Viewport) -> None:
        if self.diff_pointer.pointer is None:
            return
        self.diff_pointer.update_cursor_from_screen(screen_x, screen_y, viewport)
        self.diff_pointer_changed.emit()

    def select_diff_target(self, target_id: str) -> bool:
        if target_id not in self.nodes:
            return False
        if self.diff_pointer.select_target(target_id) is None:
            return False
        self.diff_pointer_changed.emit()
        return True

    def cancel_diff(self) -> bool:
        if not self.diff_pointer.cancel():
            return False
        self.diff_pointer_changed.emit()
        return True

    def _on_diff_selected(self, source_id: str, target_id: str) -> None:
        self.diff_requested.emit(self.repo_path, source_id, target_id)

    def render_nodes(self) -> dict[str, GraphNode]:
        """Rendered nodes plus the virtual diff target, if armed."""
        nodes: dict[str, GraphNode] = dict(self.nodes)
        virtual: VirtualDiffTarget | None = self.diff_pointer.virtual_node()
        if virtual is not None:
            nodes[virtual.id] = virtual
        return nodes

    def render_edges(self) -> list[Edge]:
        """Rendered edges plus the virtual diff edge, if armed."""
        edge = self.diff_pointer.virtual_edge()
        return self.edges + [edge] if edge is not None else list(self.edges)

    # --- Cache, search and refs ---

    def clear_layout_cache(self) -> bool:
        """Forget the persisted layout; the next refresh falls back to defaults."""
        try:
            return self.cache.clear(self.repo_path)
        except PersistenceError as e:
            self.error_occurred.emit(str(e))
            return False

    def reset_layout(self) -> bool:
        """
        Forget the layout (persisted, pending and live) and reload.

        A save already running is waited for before the cache is cleared, so
        it cannot write the old positions back afterwards.
        """
        self.persister.discard()
        self.clear_layout_cache()
        self.invalidate()
        self.cancel_diff()
        self.drag.end()
        self.nodes = {}
        self.edges = []
        self.nodes_changed.emit({})
        self.edges_changed.emit([])
        return self.refresh()

    def matching_ids(self, query: str) -> set[str]:
        """Nodes whose id or message contains ``query`` (case-insensitive)."""
        if not query:
            return set(self.nodes)
        needle = query.lower()
        return {
            nid
            for nid, node in self.nodes.items()
            if needle in nid.lower() or needle in node.commit.message.lower()
        }

    def find_ref(self, ref_name: str) -> str | None:
        """Id of the loaded commit carrying ``ref_name``."""
        for nid, node in self.nodes.items():
            if ref_name in node.commit.refs:
                return nid
        return None

    def author_counts(self) -> list[tuple[str, int]]:
        """Loaded commits per author, most active first, then by name."""
        counts = Counter(
            node.commit.author
            for node in self.nodes.values()
            if node.commit.author and not node.commit.is_synthetic
        )
        return sorted(counts.items(), key=lambda item: (-item[1], item[0]))
