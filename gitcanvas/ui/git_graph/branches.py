"""Ref list overlay widget for the git graph."""

import logging
import re

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QVBoxLayout,
    QWidget,
)

from gitcanvas.git_backend.repository import GraphRepository
from gitcanvas.graph.errors import FetchError
from gitcanvas.graph.types import GitRef
from gitcanvas.ui.git_graph.types import ref_hue

logger = logging.getLogger(__name__)

_KIND_MARKS = {"head": "◆", "branch": "", "remote": "⇅", "tag": "🏷", "stash": "≡"}
_KIND_ORDER = {"head": 0, "branch": 1, "remote": 2, "tag": 3, "stash": 4}
_STASH_INDEX = re.compile(r"^stash@\{(\d+)\}$")


def ref_sort_key(ref: GitRef) -> tuple[int, int, str]:
    """HEAD, branches, remotes and tags by name, then stashes newest first."""
    match = _STASH_INDEX.match(ref.name)
    return (_KIND_ORDER.get(ref.kind, 9), int(match.group(1)) if match else 0, ref.name)


class RefItemWidget(QWidget):
    """A ref name colored like its commits, with a marker for its kind."""

    def __init__(self, ref: GitRef, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.ref = ref
        color = QColor.fromHsl(ref_hue(ref.name), 160, 110)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(4, 2, 4, 2)
        layout.setSpacing(4)

        label = QLabel(ref.name)
        label.setStyleSheet(f"color: {color.darker(120).name()}; font-size: 11px;")
        layout.addWidget(label, 1)

        mark = _KIND_MARKS.get(ref.kind, "")
        if mark:
            kind_label = QLabel(mark)
            kind_label.setStyleSheet("color: #999; font-size: 10px;")
            kind_label.setToolTip(ref.kind)
            layout.addWidget(kind_label)


class RefListWidget(QWidget):
    """Overlay widget listing refs for quick navigation."""

    ref_clicked = Signal(str, str)  # ref name, commit id

    def __init__(self, repo: GraphRepository, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.repo = repo

        # Semi-transparent background
        self.setAutoFillBackground(True)
        palette = self.palette()
        palette.setColor(self.backgroundRole(), QColor(255, 255, 255, 230))
        self.setPalette(palette)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(0)

        self._list = QListWidget()
        self._list.setStyleSheet("""
            QListWidget {
                border: 1px solid #ddd;
                border-radius: 4px;
                background: transparent;
                font-size: 11px;
            }
            QListWidget::item {
                padding: 0px;
                border-radius: 3px;
            }
            QListWidget::item:hover {
                background: #E3F2FD;
            }
            QListWidget::item:selected {
                background: #2196F3;
            }
        """)
        self._list.itemClicked.connect(self._on_item_clicked)
        layout.addWidget(self._list)

        self.load_refs()
        self.setFixedWidth(180)
        self.adjustSize()

    def load_refs(self) -> None:
        """Reload refs in ref_sort_key order."""
        self._list.clear()
        try:
            refs = self.repo.fetch_all_refs()
        except FetchError as e:
            logger.warning("Could not list refs: %s", e)
            refs = []

        refs.sort(key=ref_sort_key)
        for ref in refs:
            item_widget = RefItemWidget(ref)
            item = QListWidgetItem()
            item.setData(Qt.ItemDataRole.UserRole, (ref.name, ref.commit_id))
            item.setSizeHint(item_widget.sizeHint())
            self._list.addItem(item)
            self._list.setItemWidget(item, item_widget)

        # Fit up to 10 items without scrolling
        item_height = 28
        visible_items = min(self._list.count(), 10)
        list_height = max(visible_items * item_height + 10, 50)
        self._list.setFixedHeight(list_height)
        self.setFixedHeight(list_height + 12)

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        data = item.data(Qt.ItemDataRole.UserRole)
        if data:
            name, commit_id = data
            self.ref_clicked.emit(name, commit_id)
