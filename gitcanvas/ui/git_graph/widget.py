"""Git graph view widget - main entry point for git graph visualization."""

from PySide6.QtCore import QEvent, QPoint, QPointF, Qt, Signal
from PySide6.QtGui import QKeyEvent, QMouseEvent, QPainter, QWheelEvent
from PySide6.QtWidgets import QGraphicsView, QWidget

from gitcanvas.graph.types import Viewport
from gitcanvas.session.graph_session import GraphSession
from gitcanvas.ui.diff_window import CommitDiffWindow
from gitcanvas.ui.git_graph.authors import AuthorListWidget
from gitcanvas.ui.git_graph.branches import RefListWidget
from gitcanvas.ui.git_graph.panel import CommitPanel
from gitcanvas.ui.git_graph.scene import GraphScene


class GitGraphView(QGraphicsView):
    """Pannable and zoomable view of one repository's commit graph."""

    status_message = Signal(str)

    MIN_ZOOM = 0.2
    MAX_ZOOM = 2.0

    def __init__(self, session: GraphSession, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.session = session

        self._scene = GraphScene(session)
        self.setScene(self._scene)

        self.setRenderHint(QPainter.RenderHint.Antialiasing)
        self.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        self.setViewportUpdateMode(QGraphicsView.ViewportUpdateMode.FullViewportUpdate)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.AnchorViewCenter)

        # Left-drag on empty canvas pans; panels accept their own presses
        self.setDragMode(QGraphicsView.DragMode.ScrollHandDrag)
        self.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)
        self.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAsNeeded)

        # Cursor moves are needed without a button held while a diff pointer is armed
        self.setMouseTracking(True)
        self.viewport().setMouseTracking(True)

        self._zoom = 1.0

        # Middle mouse zoom state
        self._middle_dragging = False
        self._middle_drag_start_y = 0.0
        self._middle_drag_start_zoom = 1.0

        self._diff_windows: list[CommitDiffWindow] = []

        # Ref list overlay (top-left corner)
        self._ref_list = RefListWidget(session.repo, self)
        self._ref_list.ref_clicked.connect(self.jump_to_ref)
        self._ref_list.move(8, 8)

        # Author summary (below the ref list)
        self._author_list = AuthorListWidget(session, self)
        self._author_list.move(8, self._ref_list.height() + 16)

        session.diff_requested.connect(self._on_diff_requested)
        session.diff_pointer_changed.connect(self._on_diff_pointer_changed)
        session.nodes_changed.connect(self._on_nodes_changed)

        # Install event filter on viewport to catch middle mouse before QGraphicsView does
        self.viewport().installEventFilter(self)

    @property
    def graph_scene(self) -> GraphScene:
        return self._scene

    def current_viewport(self) -> Viewport:
        """Pan/zoom such that ``Viewport.to_graph`` maps viewport pixels to scene coordinates."""
        top_left = self.mapToScene(0, 0)
        return Viewport(x=-top_left.x() * self._zoom, y=-top_left.y() * self._zoom, zoom=self._zoom)

    def _apply_zoom(self, new_zoom: float) -> None:
        """Apply zoom level, clamped to min/max."""
        new_zoom = max(self.MIN_ZOOM, min(self.MAX_ZOOM, new_zoom))
        if new_zoom != self._zoom:
            factor = new_zoom / self._zoom
            self._zoom = new_zoom
            self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorViewCenter)
            self.scale(factor, factor)

    def eventFilter(self, obj: object, event: object) -> bool:  # noqa: N802
        """Filter events on viewport to intercept middle mouse before QGraphicsView."""
        if obj is not self.viewport() or not isinstance(event, QEvent):
            return False

        event_type = event.type()

        if event_type == QEvent.Type.MouseButtonPress and isinstance(event, QMouseEvent):
            if event.button() == Qt.MouseButton.MiddleButton:
                self._middle_dragging = True
                self._middle_drag_start_y = event.position().y()
                self._middle_drag_start_zoom = self._zoom
                self.setCursor(Qt.CursorShape.SizeVerCursor)
                return True

        elif event_type == QEvent.Type.MouseMove and isinstance(event, QMouseEvent):
            if self._middle_dragging:
                delta_y = self._middle_drag_start_y - event.position().y()
                self._apply_zoom(self._middle_drag_start_zoom * (1.0 + delta_y / 100.0))
                return True

        elif (
            event_type == QEvent.Type.MouseButtonRelease
            and isinstance(event, QMouseEvent)
            and event.button() == Qt.MouseButton.MiddleButton
            and self._middle_dragging
        ):
            self._middle_dragging = False
            self.setCursor(Qt.CursorShape.ArrowCursor)
            return True

        return False

    def wheelEvent(self, event: QWheelEvent) -> None:  # noqa: N802
        """Handle mouse wheel - Ctrl+wheel zooms, plain wheel scrolls."""
        if event.modifiers() & Qt.KeyboardModifier.ControlModifier:
            delta = event.angleDelta().y()
            if delta > 0:
                self._apply_zoom(self._zoom * 1.1)
            elif delta < 0:
                self._apply_zoom(self._zoom / 1.1)
            event.accept()
        else:
            super().wheelEvent(event)
            self._push_cursor(self.mapFromGlobal(event.globalPosition().toPoint()))

    def _push_cursor(self, pos: QPoint | QPointF) -> None:
        if self.session.diff_pointer.source_commit_id is None:
            return
        point = QPointF(pos)
        self.session.update_diff_cursor(point.x(), point.y(), self.current_viewport())

    def mouseMoveEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        """Handle mouse move - the virtual diff node follows the cursor."""
        self._push_cursor(event.position())
        super().mouseMoveEvent(event)

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        """Handle mouse press - a click on empty canvas cancels the diff pointer."""
        if (
            event.button() == Qt.MouseButton.LeftButton
            and self.session.diff_pointer.source_commit_id is not None
            and not self._panel_at(event.position().toPoint())
            and not self._diff_window_open()
        ):
            self.session.cancel_diff()
        super().mousePressEvent(event)

    def _panel_at(self, pos: QPoint) -> bool:
        return any(isinstance(item, CommitPanel) for item in self.items(pos))

    def keyPressEvent(self, event: QKeyEvent) -> None:  # noqa: N802
        """Handle key press - Escape cancels the diff pointer."""
        if event.key() == Qt.Key.Key_Escape and self.session.cancel_diff():
            event.accept()
            return
        super().keyPressEvent(event)

    def _on_diff_pointer_changed(self) -> None:
        armed = self.session.diff_pointer.source_commit_id is not None
        self.viewport().setCursor(
            Qt.CursorShape.CrossCursor if armed else Qt.CursorShape.OpenHandCursor
        )
        if armed:
            self.status_message.emit("Click a commit to diff against, Esc to cancel")

    def _on_diff_requested(self, repo_path: str, source_id: str, target_id: str) -> None:
        """Open a diff window for the chosen pair."""
        window = CommitDiffWindow(self.session.repo, source_id, target_id, self)
        window.destroyed.connect(lambda: self._forget_window(window))
        window.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose)
        self._diff_windows.append(window)
        window.show()

    def _forget_window(self, window: CommitDiffWindow) -> None:
        if window in self._diff_windows:
            self._diff_windows.remove(window)

    def _diff_window_open(self) -> bool:
        return any(w.isVisible() for w in self._diff_windows)

    def _on_nodes_changed(self, nodes: object) -> None:
        self._ref_list.load_refs()
        self._author_list.load_authors()
        self._author_list.move(8, self._ref_list.height() + 16)

    def jump_to_ref(self, ref_name: str, commit_id: str = "") -> bool:
        """Center the view on the commit a ref points at, if it is loaded."""
        oid = self.session.find_ref(ref_name) or commit_id
        panel = self._scene.oid_to_panel.get(oid)
        if panel is None:
            self.status_message.emit(f"{ref_name} is not in the loaded history")
            return False
        self.centerOn(panel)
        panel.setSelected(True)
        return True

    def set_search(self, query: str) -> None:
        self._scene.set_search(query)

    def fit_in_view(self) -> None:
        """Fit the entire graph in the view."""
        self.fitInView(self._scene.sceneRect(), Qt.AspectRatioMode.KeepAspectRatio)
        self._zoom = self.transform().m11()
