"""Author summary overlay for the git graph."""

from PySide6.QtGui import QColor
from PySide6.QtWidgets import QLabel, QListWidget, QListWidgetItem, QVBoxLayout, QWidget

from gitcanvas.session.graph_session import GraphSession
from gitcanvas.ui.git_graph.types import author_hue


class AuthorListWidget(QWidget):
    """Commit count per author over the loaded history."""

    def __init__(self, session: GraphSession, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.session = session

        self.setAutoFillBackground(True)
        palette = self.palette()
        palette.setColor(self.backgroundRole(), QColor(255, 255, 255, 230))
        self.setPalette(palette)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(2)

        title = QLabel("Authors")
        title.setStyleSheet("color: #666; font-size: 10px; font-weight: bold;")
        layout.addWidget(title)

        self._list = QListWidget()
        self._list.setStyleSheet("""
            QListWidget {
                border: 1px solid #ddd;
                border-radius: 4px;
                background: transparent;
                font-size: 11px;
            }
        """)
        layout.addWidget(self._list)

        self.setFixedWidth(180)
        self.load_authors()

    def load_authors(self) -> None:
        self._list.clear()
        for name, count in self.session.author_counts():
            item = QListWidgetItem(f"{name}  ({count})")
            item.setForeground(QColor.fromHsl(author_hue(name), 160, 90))
            item.setToolTip(name)
            self._list.addItem(item)

        visible_items = min(self._list.count(), 8)
        list_height = max(visible_items * 20 + 10, 40)
        self._list.setFixedHeight(list_height)
        self.setFixedHeight(list_height + 30)

    def entries(self) -> list[str]:
        return [self._list.item(i).text() for i in range(self._list.count())]
