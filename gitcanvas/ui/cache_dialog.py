"""
Dialog for inspecting and clearing persisted layouts.
"""

from collections.abc import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from gitcanvas.graph.errors import PersistenceError
from gitcanvas.graph.layout_cache import LayoutCache


class LayoutCacheDialog(QDialog):
    """Lists every repository with a saved layout; selected ones can be forgotten."""

    def __init__(
        self,
        cache: LayoutCache,
        on_cleared: Callable[[str], None] | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.cache = cache
        self.on_cleared = on_cleared
        self.setWindowTitle("Saved Layouts")
        self.setMinimumWidth(500)
        self.setMinimumHeight(300)

        self._setup_ui()
        self._load_repositories()

    def _setup_ui(self) -> None:
        layout = QVBoxLayout(self)

        info = QLabel(
            f"Node positions are stored in <code>{self.cache.path}</code>.<br>"
            "Clearing a repository restores its default layout on the next refresh."
        )
        info.setWordWrap(True)
        layout.addWidget(info)

        self._list = QListWidget()
        self._list.setSelectionMode(QListWidget.SelectionMode.ExtendedSelection)
        layout.addWidget(self._list, 1)

        buttons = QHBoxLayout()
        self._clear_btn = QPushButton("Clear Selected")
        self._clear_btn.clicked.connect(self._clear_selected)
        buttons.addWidget(self._clear_btn)
        buttons.addStretch()
        close_btn = QPushButton("Close")
        close_btn.clicked.connect(self.accept)
        buttons.addWidget(close_btn)
        layout.addLayout(buttons)

    def _load_repositories(self) -> None:
        self._list.clear()
        for repo_path in self.cache.list_repositories():
            count = len(self.cache.get(repo_path))
            item = QListWidgetItem(f"{repo_path}  ({count} nodes)")
            item.setData(Qt.ItemDataRole.UserRole, repo_path)
            self._list.addItem(item)
        self._clear_btn.setEnabled(self._list.count() > 0)

    def _clear_selected(self) -> None:
        paths = [item.data(Qt.ItemDataRole.UserRole) for item in self._list.selectedItems()]
        if not paths:
            return

        for repo_path in paths:
            try:
                self.cache.clear(repo_path)
            except PersistenceError as e:
                QMessageBox.warning(self, "Cannot Clear Layout", str(e))
                break
            if self.on_cleared is not None:
                self.on_cleared(repo_path)

        self._load_repositories()
