"""Edge rendering for git graph - curves between parent and child commits."""

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QColor, QPainterPath, QPen
from PySide6.QtWidgets import QGraphicsItem, QGraphicsPathItem

from gitcanvas.graph.types import Edge
from gitcanvas.ui.git_graph.types import DIFF_POINTER_COLOR, EDGE_COLOR


def _vertical_curve(start: QPointF, end: QPointF, min_bend: float = 30.0) -> QPainterPath:
    """Cubic curve leaving ``start`` downwards and entering ``end`` from above."""
    bend = max(abs(end.y() - start.y()) / 2, min_bend)
    path = QPainterPath()
    path.moveTo(start)
    path.cubicTo(
        QPointF(start.x(), start.y() + bend),
        QPointF(end.x(), end.y() - bend),
        end,
    )
    return path


class CommitEdge(QGraphicsPathItem):
    """
    Connection from a parent commit (above) to a child commit (below).

    First-parent edges are solid, merge-parent edges dashed. Endpoints are
    passed in on every update since either node can be dragged anywhere.
    """

    def __init__(self, edge: Edge, parent: QGraphicsItem | None = None) -> None:
        super().__init__(parent)
        self.edge = edge

        pen = QPen(EDGE_COLOR, 2)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        if edge.merge:
            pen.setStyle(Qt.PenStyle.DashLine)
        self.setPen(pen)
        self.setBrush(Qt.BrushStyle.NoBrush)

        # Draw behind commit panels
        self.setZValue(-1)

    def update_endpoints(self, start: QPointF, end: QPointF) -> None:
        self.setPath(_vertical_curve(start, end))


class DiffPointerSpline(QGraphicsPathItem):
    """
    The virtual edge drawn while a diff pointer is armed.

    Runs from the source commit to the cursor (the virtual target node).
    """

    def __init__(self, start: QPointF, parent: QGraphicsItem | None = None) -> None:
        super().__init__(parent)
        self.start = start
        self.end = start  # Will be updated while the cursor moves

        pen = QPen(QColor(DIFF_POINTER_COLOR), 3)
        pen.setCapStyle(Qt.PenCapStyle.RoundCap)
        pen.setStyle(Qt.PenStyle.DashLine)
        self.setPen(pen)
        self.setBrush(Qt.BrushStyle.NoBrush)
        self.setZValue(100)  # Draw on top

    def update_points(self, start: QPointF, end: QPointF) -> None:
        self.start = start
        self.end = end
        self._build_path()

    def _build_path(self) -> None:
        """Curve from the source toward the cursor, bending up first."""
        path = QPainterPath()
        path.moveTo(self.start)
        dy = self.end.y() - self.start.y()
        c1 = QPointF(self.start.x(), self.start.y() - 50)
        c2 = QPointF(self.end.x(), self.end.y() - abs(dy) * 0.3 - 30)
        path.cubicTo(c1, c2, self.end)
        self.setPath(path)

    def shape(self) -> QPainterPath:
        """Never hit-tested; clicks pass through to panels or the canvas."""
        return QPainterPath()
