"""Commit panel - interactive display for a single commit."""

from PySide6.QtCore import (
    Property,
    QEasingCurve,
    QPointF,
    QPropertyAnimation,
    QRectF,
    Qt,
    Signal,
)
from PySide6.QtGui import QColor, QFont, QFontMetrics, QPainter, QPen
from PySide6.QtWidgets import (
    QGraphicsItem,
    QGraphicsObject,
    QGraphicsSceneMouseEvent,
    QStyle,
    QStyleOptionGraphicsItem,
    QWidget,
)

from gitcanvas.constants import NODE_HEIGHT, NODE_WIDTH
from gitcanvas.graph.types import Commit


class CommitPanel(QGraphicsObject):
    """
    A draggable commit box.

    Shows: ref labels, short hash, first line of the message.
    On hover: fade in a Diff button that arms the diff pointer.
    Drags are not applied here; the panel reports them and the scene moves
    it (and possibly its descendants) from the session's answer.
    """

    drag_started = Signal(str)  # oid
    drag_moved = Signal(str, float, float, bool)  # oid, x, y, modifier held
    drag_finished = Signal(str)  # oid
    diff_requested = Signal(str)  # oid - Diff button clicked
    clicked = Signal(str)  # oid - plain click (diff target selection)

    WIDTH = NODE_WIDTH
    HEIGHT = NODE_HEIGHT
    CORNER_RADIUS = 6
    BUTTON_FADE_DURATION = 150
    DRAG_THRESHOLD = 3

    def __init__(
        self,
        commit: Commit,
        color: QColor,
        parent: QGraphicsItem | None = None,
    ) -> None:
        super().__init__(parent)
        self.commit = commit
        self.color = color
        self._hovered = False
        self._dimmed = False  # Search filter feedback
        self._button_opacity_value = 0.0
        self._diff_rect: QRectF | None = None

        self._press_offset: QPointF | None = None
        self._press_scene_pos: QPointF | None = None
        self._dragging = False

        self.setAcceptHoverEvents(True)
        self.setFlag(QGraphicsItem.GraphicsItemFlag.ItemIsSelectable)

        self._fade_anim = QPropertyAnimation(self, b"buttonOpacity")
        self._fade_anim.setDuration(self.BUTTON_FADE_DURATION)
        self._fade_anim.setEasingCurve(QEasingCurve.Type.InOutQuad)

    def boundingRect(self) -> QRectF:  # noqa: N802
        """Panel is drawn centered on its position."""
        return QRectF(-self.WIDTH / 2, -self.HEIGHT / 2, self.WIDTH, self.HEIGHT)

    def top_center(self) -> QPointF:
        return self.scenePos() + QPointF(0, -self.HEIGHT / 2)

    def bottom_center(self) -> QPointF:
        return self.scenePos() + QPointF(0, self.HEIGHT / 2)

    def _get_button_opacity(self) -> float:
        return self._button_opacity_value

    def _set_button_opacity(self, value: float) -> None:
        self._button_opacity_value = value
        self.update()

    # Use PySide6 Property for QPropertyAnimation compatibility
    buttonOpacity = Property(float, _get_button_opacity, _set_button_opacity)  # noqa: N815

    def set_dimmed(self, dimmed: bool) -> None:
        if dimmed != self._dimmed:
            self._dimmed = dimmed
            self.update()

    def paint(
        self,
        painter: QPainter,
        option: QStyleOptionGraphicsItem,
        widget: QWidget | None = None,
    ) -> None:
        """Paint the commit panel."""
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        panel_rect = self.boundingRect()

        state = option.state  # type: ignore[attr-defined]
        is_selected = bool(state and (state & QStyle.StateFlag.State_Selected))
        painter.setBrush(QColor("#E3F2FD") if is_selected else QColor("#FFFFFF"))
        border_color = self.color if not self._hovered else self.color.darker(110)
        pen = QPen(border_color, 2)
        if self.commit.is_synthetic:
            pen.setStyle(Qt.PenStyle.DashLine)
        painter.setPen(pen)
        painter.drawRoundedRect(panel_rect, self.CORNER_RADIUS, self.CORNER_RADIUS)

        text_x = panel_rect.left() + 8
        text_width = panel_rect.width() - 16
        y = panel_rect.top() + 4

        # Ref labels (at most two)
        if self.commit.refs:
            font = QFont("sans-serif", 7)
            fm = QFontMetrics(font)
            painter.setFont(font)
            label_x = text_x
            for ref in self.commit.refs[:2]:
                label_text = ref if len(ref) <= 10 else ref[:8] + "…"
                label_width = min(fm.horizontalAdvance(label_text) + 6, text_width)
                label_rect = QRectF(label_x, y, label_width, 13)
                painter.setBrush(self.color.lighter(150))
                painter.setPen(QPen(self.color, 1))
                painter.drawRoundedRect(label_rect, 3, 3)
                painter.setPen(self.color.darker(140))
                painter.drawText(label_rect, Qt.AlignmentFlag.AlignCenter, label_text)
                label_x += label_width + 3
            y += 15

        # Short hash (or working-copy state)
        font = QFont("monospace", 8)
        font.setBold(True)
        painter.setFont(font)
        painter.setPen(QColor("#666666"))
        heading = self.commit.short_id
        if self.commit.uncommitted_state is not None:
            heading = f"{heading} ({self.commit.uncommitted_state.value})"
        painter.drawText(QRectF(text_x, y, text_width, 14), Qt.AlignmentFlag.AlignLeft, heading)
        y += 14

        # Message, elided to what fits
        font = QFont("sans-serif", 8)
        painter.setFont(font)
        painter.setPen(QColor("#333333"))
        message_rect = QRectF(text_x, y, text_width, panel_rect.bottom() - y - 2)
        elided = QFontMetrics(font).elidedText(
            self.commit.summary, Qt.TextElideMode.ElideRight, int(text_width)
        )
        painter.drawText(message_rect, Qt.AlignmentFlag.AlignLeft, elided)

        if self._button_opacity_value > 0.01 and not self.commit.is_synthetic:
            self._draw_diff_button(painter, panel_rect)

        if self._dimmed:
            painter.setBrush(QColor(255, 255, 255, 200))
            painter.setPen(Qt.PenStyle.NoPen)
            painter.drawRoundedRect(panel_rect, self.CORNER_RADIUS, self.CORNER_RADIUS)

    def _draw_diff_button(self, painter: QPainter, panel_rect: QRectF) -> None:
        """Draw the Diff button in the top-right corner with current opacity."""
        opacity = self._button_opacity_value
        diff_rect = QRectF(panel_rect.right() - 34, panel_rect.top() + 3, 30, 14)
        painter.setBrush(QColor(96, 125, 139, int(opacity * 255)))  # Blue-gray
        painter.setPen(QPen(QColor(69, 90, 100, int(opacity * 255)), 1))
        painter.drawRoundedRect(diff_rect, 3, 3)

        painter.setPen(QColor(255, 255, 255, int(opacity * 255)))
        font = QFont("sans-serif", 7)
        font.setBold(True)
        painter.setFont(font)
        painter.drawText(diff_rect, Qt.AlignmentFlag.AlignCenter, "Diff")
        self._diff_rect = diff_rect

    def hoverEnterEvent(self, event: object) -> None:  # noqa: N802
        """Handle hover enter - fade in button."""
        self._hovered = True
        self._fade_anim.stop()
        self._fade_anim.setStartValue(self._button_opacity_value)
        self._fade_anim.setEndValue(1.0)
        self._fade_anim.start()
        self.update()

    def hoverLeaveEvent(self, event: object) -> None:  # noqa: N802
        """Handle hover leave - fade out button."""
        self._hovered = False
        self._fade_anim.stop()
        self._fade_anim.setStartValue(self._button_opacity_value)
        self._fade_anim.setEndValue(0.0)
        self._fade_anim.start()
        self.update()

    def mousePressEvent(self, event: QGraphicsSceneMouseEvent) -> None:  # noqa: N802
        """Handle mouse press - Diff button, or remember where a drag may start."""
        if event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return

        pos = event.pos()
        if (
            self._button_opacity_value > 0.5
            and self._diff_rect is not None
            and self._diff_rect.contains(pos)
        ):
            self.diff_requested.emit(self.commit.id)
            event.accept()
            return

        self._press_offset = event.scenePos() - self.scenePos()
        self._press_scene_pos = event.scenePos()
        self._dragging = False
        event.accept()

    def mouseMoveEvent(self, event: QGraphicsSceneMouseEvent) -> None:  # noqa: N802
        """Handle mouse move - report drag ticks once past the threshold."""
        if self._press_offset is None or self._press_scene_pos is None:
            super().mouseMoveEvent(event)
            return

        if not self._dragging:
            delta = event.scenePos() - self._press_scene_pos
            if delta.manhattanLength() <= self.DRAG_THRESHOLD:
                return
            self._dragging = True
            self.drag_started.emit(self.commit.id)

        target = event.scenePos() - self._press_offset
        modifier = bool(
            event.modifiers()
            & (Qt.KeyboardModifier.ControlModifier | Qt.KeyboardModifier.MetaModifier)
        )
        self.drag_moved.emit(self.commit.id, target.x(), target.y(), modifier)
        event.accept()

    def mouseReleaseEvent(self, event: QGraphicsSceneMouseEvent) -> None:  # noqa: N802
        """Handle mouse release - finish a drag or report a click."""
        was_dragging = self._dragging
        pressed = self._press_offset is not None
        self._press_offset = None
        self._press_scene_pos = None
        self._dragging = False

        if was_dragging:
            self.drag_finished.emit(self.commit.id)
        elif pressed:
            self.clicked.emit(self.commit.id)
        event.accept()
