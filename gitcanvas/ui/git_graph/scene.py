"""Git graph scene - renders a GraphSession's nodes and edges."""

import logging

from PySide6.QtCore import QPointF, QRectF
from PySide6.QtGui import QColor
from PySide6.QtWidgets import QGraphicsScene, QWidget

from gitcanvas.graph.types import CommitNode, Edge, Position
from gitcanvas.session.graph_session import GraphSession
from gitcanvas.ui.git_graph.edges import CommitEdge, DiffPointerSpline
from gitcanvas.ui.git_graph.panel import CommitPanel
from gitcanvas.ui.git_graph.types import get_node_color

logger = logging.getLogger(__name__)


class GraphScene(QGraphicsScene):
    """
    Scene mirroring a GraphSession.

    The session is the source of truth for positions: panels report drags to
    it and are moved from its ``positions_changed`` answer, so subtree drags
    move descendants without the scene knowing about them.
    """

    PADDING = 200

    def __init__(self, session: GraphSession, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.session = session
        self.oid_to_panel: dict[str, CommitPanel] = {}
        self._edge_items: dict[str, CommitEdge] = {}
        self._edges_by_node: dict[str, list[str]] = {}
        self._diff_spline: DiffPointerSpline | None = None
        self._search_query = ""

        self.setBackgroundBrush(QColor("#FAFAFA"))

        session.nodes_changed.connect(self._on_nodes_changed)
        session.edges_changed.connect(self._on_edges_changed)
        session.positions_changed.connect(self._on_positions_changed)
        session.diff_pointer_changed.connect(self._on_diff_pointer_changed)

        # Session may already hold a graph (tab re-attached)
        if session.nodes:
            self._on_nodes_changed(dict(session.nodes))
            self._on_edges_changed(list(session.edges))

    @staticmethod
    def _to_point(position: Position) -> QPointF:
        return QPointF(position.x, position.y)

    # --- Session signal handlers ---

    def _on_nodes_changed(self, nodes: dict[str, CommitNode]) -> None:
        """Add, move or drop panels so they match the session's nodes."""
        for oid in list(self.oid_to_panel):
            if oid not in nodes:
                self.removeItem(self.oid_to_panel.pop(oid))

        for oid, node in nodes.items():
            panel = self.oid_to_panel.get(oid)
            if panel is None or panel.commit != node.commit:
                if panel is not None:
                    self.removeItem(panel)
                panel = self._make_panel(node)
                self.addItem(panel)
                self.oid_to_panel[oid] = panel
            panel.setPos(self._to_point(node.position))

        self._apply_search()
        self._update_scene_rect()

    def _make_panel(self, node: CommitNode) -> CommitPanel:
        panel = CommitPanel(node.commit, get_node_color(node.commit))
        panel.drag_started.connect(self._on_panel_drag_started)
        panel.drag_moved.connect(self._on_panel_drag_moved)
        panel.drag_finished.connect(self._on_panel_drag_finished)
        panel.diff_requested.connect(self.session.start_diff)
        panel.clicked.connect(self._on_panel_clicked)
        return panel

    def _on_edges_changed(self, edges: list[Edge]) -> None:
        """Rebuild edge items; panels are already in place."""
        for item in self._edge_items.values():
            self.removeItem(item)
        self._edge_items = {}
        self._edges_by_node = {}

        for edge in edges:
            if edge.source_id not in self.oid_to_panel or edge.target_id not in self.oid_to_panel:
                continue
            item = CommitEdge(edge)
            self.addItem(item)
            self._edge_items[edge.id] = item
            self._edges_by_node.setdefault(edge.source_id, []).append(edge.id)
            self._edges_by_node.setdefault(edge.target_id, []).append(edge.id)
            self._update_edge(item)

    def _on_positions_changed(self, updates: dict[str, Position]) -> None:
        touched: set[str] = set()
        for oid, position in updates.items():
            panel = self.oid_to_panel.get(oid)
            if panel is None:
                continue
            panel.setPos(self._to_point(position))
            touched.update(self._edges_by_node.get(oid, []))

        for edge_id in touched:
            self._update_edge(self._edge_items[edge_id])

        if self._diff_spline is not None:
            self._on_diff_pointer_changed()

    def _update_edge(self, item: CommitEdge) -> None:
        parent_panel = self.oid_to_panel[item.edge.source_id]
        child_panel = self.oid_to_panel[item.edge.target_id]
        item.update_endpoints(parent_panel.bottom_center(), child_panel.top_center())

    def _on_diff_pointer_changed(self) -> None:
        """Show, move or hide the virtual diff edge."""
        virtual = self.session.diff_pointer.virtual_node()
        source_id = self.session.diff_pointer.source_commit_id
        source_panel = self.oid_to_panel.get(source_id) if source_id else None

        if virtual is None or source_panel is None:
            if self._diff_spline is not None:
                self.removeItem(self._diff_spline)
                self._diff_spline = None
            return

        start = source_panel.scenePos()
        if self._diff_spline is None:
            self._diff_spline = DiffPointerSpline(start)
            self.addItem(self._diff_spline)
        self._diff_spline.update_points(start, self._to_point(virtual.position))

    # --- Panel interaction ---

    def _on_panel_drag_started(self, oid: str) -> None:
        self.session.begin_drag(oid)

    def _on_panel_drag_moved(self, oid: str, x: float, y: float, modifier_held: bool) -> None:
        self.session.drag_to(Position(x, y), modifier_held)

    def _on_panel_drag_finished(self, oid: str) -> None:
        self.session.end_drag()

    def _on_panel_clicked(self, oid: str) -> None:
        """A click completes an armed diff pointer."""
        if self.session.diff_pointer.source_commit_id is not None:
            self.session.select_diff_target(oid)

    # --- Search ---

    def set_search(self, query: str) -> None:
        self._search_query = query
        self._apply_search()

    def _apply_search(self) -> None:
        matches = self.session.matching_ids(self._search_query)
        for oid, panel in self.oid_to_panel.items():
            panel.set_dimmed(oid not in matches)

    def _update_scene_rect(self) -> None:
        """Fit the scene rect around all panels, with room to drag past the edges."""
        if not self.oid_to_panel:
            self.setSceneRect(QRectF(0, 0, 1, 1))
            return
        rect = QRectF()
        for panel in self.oid_to_panel.values():
            rect = rect.united(panel.sceneBoundingRect())
        pad = self.PADDING
        self.setSceneRect(rect.adjusted(-pad, -pad, pad, pad))
