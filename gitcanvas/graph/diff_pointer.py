"""Transient pointer from a chosen commit to the cursor, used to pick a diff target."""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from gitcanvas.constants import DIFF_POINTER_TARGET_ID, WORKING_COPY_ID
from gitcanvas.graph.types import Edge, Position, VirtualDiffTarget, Viewport


class DiffPointerState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"


@dataclass
class DiffPointer:
    source_commit_id: str
    cursor_position: Position


class DiffPointerController:
    """
    Idle -> Armed(source) -> Idle.

    While armed, a virtual edge runs from the source commit to a zero-size
    virtual node that tracks the cursor. Choosing a real target hands
    ``(source, target)`` to ``on_select`` and disarms; ``cancel`` disarms
    without reporting. Nothing here is ever persisted.
    """

    def __init__(self, on_select: Callable[[str, str], None] | None = None) -> None:
        self.on_select = on_select
        self.pointer: DiffPointer | None = None

    @property
    def state(self) -> DiffPointerState:
        return DiffPointerState.IDLE if self.pointer is None else DiffPointerState.ARMED

    @property
    def source_commit_id(self) -> str | None:
        return self.pointer.source_commit_id if self.pointer else None

    def start(self, source_commit_id: str, cursor: Position | None = None) -> bool:
        """Arm the pointer. The working-copy node cannot be diffed."""
        if source_commit_id == WORKING_COPY_ID:
            return False
        self.pointer = DiffPointer(source_commit_id, cursor or Position(0.0, 0.0))
        return True

    def update_cursor(self, graph_x: float, graph_y: float) -> None:
        if self.pointer is not None:
            self.pointer.cursor_position = Position(graph_x, graph_y)

    def update_cursor_from_screen(self, screen_x: float, screen_y: float, viewport: Viewport) -> None:
        graph_pos = viewport.to_graph(screen_x, screen_y)
        self.update_cursor(graph_pos.x, graph_pos.y)

    def virtual_node(self) -> VirtualDiffTarget | None:
        if self.pointer is None:
            return None
        return VirtualDiffTarget(id=DIFF_POINTER_TARGET_ID, position=self.pointer.cursor_position)

    def virtual_edge(self) -> Edge | None:
        if self.pointer is None:
            return None
        return Edge(self.pointer.source_commit_id, DIFF_POINTER_TARGET_ID)

    def select_target(self, target_commit_id: str) -> tuple[str, str] | None:
        """
        Complete the pointer on a commit.

        Returns the (source, target) pair handed to ``on_select``, or None
        when idle or the target is not diffable (the working copy, or the
        source itself), in which case the pointer stays armed.
        """
        if self.pointer is None:
            return None
        source = self.pointer.source_commit_id
        if target_commit_id in (WORKING_COPY_ID, source):
            return None

        self.pointer = None
        if self.on_select is not None:
            self.on_select(source, target_commit_id)
        return source, target_commit_id

    def cancel(self) -> bool:
        """Disarm. Safe to call repeatedly; returns whether anything was armed."""
        was_armed = self.pointer is not None
        self.pointer = None
        return was_armed
