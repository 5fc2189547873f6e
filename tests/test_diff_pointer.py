"""Tests for the diff pointer state machine."""

from gitcanvas.constants import DIFF_POINTER_TARGET_ID, WORKING_COPY_ID
from gitcanvas.graph.diff_pointer import DiffPointerController, DiffPointerState
from gitcanvas.graph.types import Position, Viewport


class TestDiffPointer:
    def setup_method(self):
        self.selected = []
        self.controller = DiffPointerController(on_select=lambda s, t: self.selected.append((s, t)))

    def test_starts_idle(self):
        assert self.controller.state == DiffPointerState.IDLE
        assert self.controller.virtual_node() is None
        assert self.controller.virtual_edge() is None

    def test_start_arms_and_exposes_virtual_edge(self):
        assert self.controller.start("abc", Position(1, 2))
        assert self.controller.state == DiffPointerState.ARMED
        assert self.controller.source_commit_id == "abc"

        node = self.controller.virtual_node()
        assert node.id == DIFF_POINTER_TARGET_ID
        assert node.kind == "virtual"
        assert node.position == Position(1, 2)

        edge = self.controller.virtual_edge()
        assert (edge.source_id, edge.target_id) == ("abc", DIFF_POINTER_TARGET_ID)

    def test_working_copy_cannot_be_source(self):
        assert self.controller.start(WORKING_COPY_ID) is False
        assert self.controller.state == DiffPointerState.IDLE

    def test_cursor_converted_from_screen(self):
        self.controller.start("abc")
        self.controller.update_cursor_from_screen(220, 140, Viewport(x=20, y=40, zoom=2.0))
        assert self.controller.virtual_node().position == Position(100, 50)

    def test_cursor_ignored_while_idle(self):
        self.controller.update_cursor(5, 5)
        assert self.controller.virtual_node() is None

    def test_select_target_reports_pair_and_disarms(self):
        self.controller.start("abc")
        assert self.controller.select_target("def") == ("abc", "def")
        assert self.selected == [("abc", "def")]
        assert self.controller.state == DiffPointerState.IDLE

    def test_invalid_targets_keep_pointer_armed(self):
        self.controller.start("abc")
        assert self.controller.select_target("abc") is None
        assert self.controller.select_target(WORKING_COPY_ID) is None
        assert self.controller.state == DiffPointerState.ARMED
        assert self.selected == []

    def test_select_while_idle(self):
        assert self.controller.select_target("def") is None
        assert self.selected == []

    def test_cancel_is_idempotent(self):
        self.controller.start("abc")
        assert self.controller.cancel() is True
        assert self.controller.cancel() is False
        assert self.controller.state == DiffPointerState.IDLE
        assert self.selected == []

    def test_restart_replaces_source(self):
        self.controller.start("abc")
        self.controller.start("def")
        assert self.controller.source_commit_id == "def"
