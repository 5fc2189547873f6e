"""
Main window for gitcanvas - one commit graph tab per repository
"""

import logging
from pathlib import Path
from typing import Any

from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QFileDialog,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QStatusBar,
    QTabWidget,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from gitcanvas.config.settings import Settings
from gitcanvas.git_backend.repository import GraphRepository
from gitcanvas.graph.errors import GraphError
from gitcanvas.graph.layout_cache import LayoutCache, normalize_repo_path
from gitcanvas.session.graph_session import GraphSession
from gitcanvas.session.registry import SessionRegistry
from gitcanvas.ui.cache_dialog import LayoutCacheDialog
from gitcanvas.ui.git_graph import GitGraphView

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Main application window; each tab owns an independent graph session"""

    def __init__(self, settings: Settings, initial_repos: list[str] | None = None) -> None:
        super().__init__()
        self.setGeometry(100, 100, 1400, 900)
        self.setWindowTitle("gitcanvas")

        self.settings = settings
        self.cache = LayoutCache(settings.get_cache_path())
        self.registry = SessionRegistry(self._create_session)
        self._views: dict[str, GitGraphView] = {}

        self._setup_ui()
        self._setup_menus()
        self._setup_toolbar()

        for repo_path in initial_repos or []:
            self.open_repository(repo_path)
        self._update_actions()

    def _setup_ui(self) -> None:
        central = QWidget()
        self.setCentralWidget(central)

        layout = QVBoxLayout(central)
        layout.setContentsMargins(0, 0, 0, 0)

        self.repo_tabs = QTabWidget()
        self.repo_tabs.setTabsClosable(True)
        self.repo_tabs.setMovable(True)
        self.repo_tabs.tabCloseRequested.connect(self._close_repo_tab)
        self.repo_tabs.currentChanged.connect(self._on_tab_changed)
        layout.addWidget(self.repo_tabs)

        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("Open a repository to begin")

        # Loading indicator (right side of status bar)
        self.loading_label = QLabel("")
        self.status_bar.addPermanentWidget(self.loading_label)

    def _setup_menus(self) -> None:
        menubar = self.menuBar()

        file_menu = menubar.addMenu("&File")
        file_menu.addAction("&Open Repository...", self._show_open_dialog).setShortcut(
            QKeySequence.StandardKey.Open
        )
        self._recent_menu = file_menu.addMenu("Open &Recent")
        self._populate_recent_menu()
        file_menu.addSeparator()
        file_menu.addAction("Saved &Layouts...", self._show_cache_dialog)
        file_menu.addSeparator()
        file_menu.addAction("E&xit", self.close)

    def _setup_toolbar(self) -> None:
        toolbar = QToolBar("Graph")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        self.refresh_action = QAction("Refresh", self)
        self.refresh_action.setShortcut(QKeySequence.StandardKey.Refresh)
        self.refresh_action.triggered.connect(self._refresh_current)
        toolbar.addAction(self.refresh_action)

        self.load_more_action = QAction("Load More", self)
        self.load_more_action.triggered.connect(self._load_more_current)
        toolbar.addAction(self.load_more_action)

        self.fit_action = QAction("Fit", self)
        self.fit_action.triggered.connect(self._fit_current)
        toolbar.addAction(self.fit_action)

        toolbar.addSeparator()

        self.subtree_action = QAction("Move Subtree", self)
        self.subtree_action.setCheckable(True)
        self.subtree_action.setChecked(self.settings.get_subtree_drag())
        self.subtree_action.setToolTip("Dragging a commit moves its descendants (hold Ctrl to invert)")
        self.subtree_action.toggled.connect(self._on_subtree_toggled)
        toolbar.addAction(self.subtree_action)

        toolbar.addSeparator()

        self.search_box = QLineEdit()
        self.search_box.setPlaceholderText("Filter by hash or message...")
        self.search_box.setClearButtonEnabled(True)
        self.search_box.setMaximumWidth(300)
        self.search_box.textChanged.connect(self._on_search_changed)
        toolbar.addWidget(self.search_box)

    # --- Repository tabs ---

    def _create_session(self, repo_path: str) -> GraphSession:
        repo = GraphRepository(repo_path)
        return GraphSession(
            repo,
            self.cache,
            page_size=self.settings.get_page_size(),
            subtree_drag=self.subtree_action.isChecked(),
            persist_debounce_ms=self.settings.get_persist_debounce_ms(),
            include_working_copy=self.settings.get_show_working_copy(),
        )

    def open_repository(self, repo_path: str) -> GraphSession | None:
        """Open (or switch to) the tab for a repository and start loading it"""
        key = normalize_repo_path(str(Path(repo_path).expanduser().resolve()))
        existing = self._views.get(key)
        if existing is not None:
            self.repo_tabs.setCurrentWidget(existing)
            return existing.session

        try:
            session = self.registry.open(key)
        except GraphError as e:
            QMessageBox.warning(self, "Cannot Open Repository", str(e))
            return None

        view = GitGraphView(session)
        view.status_message.connect(self.status_bar.showMessage)
        session.error_occurred.connect(self._on_session_error)
        session.loading_changed.connect(self._update_actions)
        session.has_more_changed.connect(self._update_actions)
        session.layout_saved.connect(
            lambda count: self.status_bar.showMessage(f"Saved layout ({count} nodes)", 2000)
        )
        self._views[key] = view

        index = self.repo_tabs.addTab(view, Path(key).name or key)
        self.repo_tabs.setTabToolTip(index, key)
        self.repo_tabs.setCurrentIndex(index)

        self.settings.add_recent_repository(key)
        self.settings.save()
        self._populate_recent_menu()

        session.refresh()
        return session

    def _close_repo_tab(self, index: int) -> None:
        view = self.repo_tabs.widget(index)
        if not isinstance(view, GitGraphView):
            return
        key = normalize_repo_path(view.session.repo_path)
        for path, candidate in list(self._views.items()):
            if candidate is view:
                key = path
                del self._views[path]
        self.registry.close(key)
        self.repo_tabs.removeTab(index)
        view.deleteLater()

    def _current_view(self) -> GitGraphView | None:
        widget = self.repo_tabs.currentWidget()
        return widget if isinstance(widget, GitGraphView) else None

    def _on_tab_changed(self, index: int) -> None:
        view = self._current_view()
        if view is not None:
            view.set_search(self.search_box.text())
            self.setWindowTitle(f"gitcanvas - {Path(view.session.repo_path).name}")
        else:
            self.setWindowTitle("gitcanvas")
        self._update_actions()

    def _update_actions(self, *_args: Any) -> None:
        view = self._current_view()
        session = view.session if view else None
        busy = session is not None and session.loading
        self.refresh_action.setEnabled(session is not None and not busy)
        self.load_more_action.setEnabled(session is not None and not busy and session.has_more)
        self.fit_action.setEnabled(session is not None)
        self.loading_label.setText("Loading…" if busy else "")

    # --- Toolbar handlers ---

    def _refresh_current(self) -> None:
        view = self._current_view()
        if view is not None:
            view.session.refresh()

    def _load_more_current(self) -> None:
        view = self._current_view()
        if view is not None:
            view.session.load_more()

    def _fit_current(self) -> None:
        view = self._current_view()
        if view is not None:
            view.fit_in_view()

    def _on_subtree_toggled(self, enabled: bool) -> None:
        for session in self.registry.get_all().values():
            session.set_subtree_drag(enabled)
        self.settings.set("graph.subtree_drag", enabled)
        self.settings.save()

    def _on_search_changed(self, text: str) -> None:
        view = self._current_view()
        if view is not None:
            view.set_search(text)

    def _on_session_error(self, message: str) -> None:
        self.status_bar.showMessage(f"Error: {message}", 10000)

    # --- Dialogs ---

    def _show_open_dialog(self) -> None:
        path = QFileDialog.getExistingDirectory(self, "Open Repository")
        if path:
            self.open_repository(path)

    def _populate_recent_menu(self) -> None:
        self._recent_menu.clear()
        recent = self.settings.get_recent_repositories()
        for repo_path in recent:
            self._recent_menu.addAction(repo_path, lambda p=repo_path: self.open_repository(p))
        self._recent_menu.setEnabled(bool(recent))

    def _show_cache_dialog(self) -> None:
        dialog = LayoutCacheDialog(self.cache, on_cleared=self._on_layout_cleared, parent=self)
        dialog.exec()

    def _on_layout_cleared(self, repo_path: str) -> None:
        """A cleared repository that is open is re-laid out from defaults"""
        for view in self._views.values():
            if normalize_repo_path(view.session.repo_path) == repo_path:
                view.session.reset_layout()
        self.status_bar.showMessage(f"Cleared saved layout for {repo_path}", 3000)

    def closeEvent(self, event: Any) -> None:  # noqa: N802
        """Flush pending layout writes for every open repository"""
        self.registry.close_all()
        super().closeEvent(event)
