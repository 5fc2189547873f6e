"""
Commit diff window - displays the changes between two chosen commits.
"""

import html

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QFont
from PySide6.QtWidgets import (
    QLabel,
    QMainWindow,
    QScrollArea,
    QSplitter,
    QTextEdit,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from gitcanvas.git_backend.repository import FileDiff, GraphRepository
from gitcanvas.graph.errors import FetchError

STATUS_COLORS = {
    "A": "#2e7d32",  # Green
    "D": "#c62828",  # Red
    "M": "#1565c0",  # Blue
    "R": "#7b1fa2",  # Purple
}


def format_diff_html(diff_text: str) -> str:
    """Render unified diff text as highlighted HTML."""
    html_lines = []
    for line in diff_text.split("\n"):
        escaped = html.escape(line, quote=False)

        if line.startswith("+") and not line.startswith("+++"):
            html_lines.append(f'<span style="background:#e6ffe6;color:#2e7d32">{escaped}</span>')
        elif line.startswith("-") and not line.startswith("---"):
            html_lines.append(f'<span style="background:#ffe6e6;color:#c62828">{escaped}</span>')
        elif line.startswith("@@"):
            html_lines.append(f'<span style="color:#7b1fa2;font-weight:bold">{escaped}</span>')
        elif line.startswith("diff ") or line.startswith("index "):
            html_lines.append(f'<span style="color:#666">{escaped}</span>')
        else:
            html_lines.append(escaped)

    return f'<pre style="margin:0;padding:8px;font-family:monospace;">{"<br>".join(html_lines)}</pre>'


class CommitDiffWindow(QMainWindow):
    """Window showing the diff going from ``source_id`` to ``target_id``."""

    def __init__(
        self,
        repo: GraphRepository,
        source_id: str,
        target_id: str,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.repo = repo
        self.source_id = source_id
        self.target_id = target_id
        self._file_diffs: dict[str, str] = {}

        self._setup_ui()
        self._load_diff()

    def _setup_ui(self) -> None:
        self.setWindowTitle(f"Diff: {self.source_id[:7]}..{self.target_id[:7]}")
        self.resize(900, 700)

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(8, 8, 8, 8)

        self._header = QLabel()
        self._header.setWordWrap(True)
        self._header.setStyleSheet("""
            QLabel {
                background: #f5f5f5;
                border: 1px solid #ddd;
                border-radius: 4px;
                padding: 8px;
                font-size: 12px;
            }
        """)
        layout.addWidget(self._header)

        # Splitter: file list on left, diff on right
        splitter = QSplitter(Qt.Orientation.Horizontal)
        layout.addWidget(splitter, 1)

        self._file_tree = QTreeWidget()
        self._file_tree.setHeaderLabels(["Files Changed"])
        self._file_tree.setMinimumWidth(200)
        self._file_tree.setMaximumWidth(300)
        self._file_tree.itemClicked.connect(self._on_file_clicked)
        splitter.addWidget(self._file_tree)

        diff_container = QWidget()
        diff_layout = QVBoxLayout(diff_container)
        diff_layout.setContentsMargins(0, 0, 0, 0)

        self._diff_label = QLabel("Select a file to view diff")
        self._diff_label.setStyleSheet("color: #666; padding: 8px;")
        diff_layout.addWidget(self._diff_label)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        self._diff_view = QTextEdit()
        self._diff_view.setReadOnly(True)
        self._diff_view.setFont(QFont("monospace", 10))
        self._diff_view.setStyleSheet("""
            QTextEdit {
                background: #fafafa;
                border: 1px solid #ddd;
            }
        """)
        scroll.setWidget(self._diff_view)
        diff_layout.addWidget(scroll, 1)

        splitter.addWidget(diff_container)
        splitter.setSizes([250, 650])

    def _load_diff(self) -> None:
        try:
            files = self.repo.diff_commits(self.source_id, self.target_id)
        except FetchError as e:
            self._header.setText(f"<b>Could not compute diff:</b> {html.escape(str(e))}")
            return

        self._header.setText(
            f"<b>From:</b> {self.source_id[:12]}<br>"
            f"<b>To:</b> {self.target_id[:12]}<br>"
            f"<b>Files changed:</b> {len(files)}"
        )
        self._populate(files)

    def _populate(self, files: list[FileDiff]) -> None:
        self._file_tree.clear()
        self._file_diffs = {}

        for file_diff in files:
            item = QTreeWidgetItem([f"[{file_diff.status}] {file_diff.path}"])
            item.setData(0, Qt.ItemDataRole.UserRole, file_diff.path)
            if file_diff.status in STATUS_COLORS:
                item.setForeground(0, QColor(STATUS_COLORS[file_diff.status]))
            self._file_tree.addTopLevelItem(item)
            self._file_diffs[file_diff.path] = file_diff.patch

        # Show full diff initially
        if files:
            self._show_diff("".join(f.patch for f in files), "Full Diff")
        else:
            self._diff_label.setText("No changes")

    def _on_file_clicked(self, item: QTreeWidgetItem, column: int) -> None:
        filepath = item.data(0, Qt.ItemDataRole.UserRole)
        if filepath and filepath in self._file_diffs:
            self._show_diff(self._file_diffs[filepath], filepath)

    def _show_diff(self, diff_text: str, title: str) -> None:
        self._diff_label.setText(title)
        self._diff_view.setHtml(format_diff_html(diff_text))
