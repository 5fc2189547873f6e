"""Node dragging, optionally carrying every descendant along."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import networkx as nx

from gitcanvas.graph.types import Edge, Position


@dataclass(frozen=True)
class DragMode:
    """User toggle plus the transient modifier that inverts it."""

    subtree_default: bool = False
    modifier_held: bool = False

    @property
    def is_subtree(self) -> bool:
        return self.subtree_default != self.modifier_held


@dataclass
class DragSession:
    """State of one pointer-drag gesture."""

    dragged_node_id: str
    last_known_position: Position

    def advance(self, position: Position) -> tuple[float, float]:
        """Record the new position and return the step since the last tick."""
        dx = position.x - self.last_known_position.x
        dy = position.y - self.last_known_position.y
        self.last_known_position = position
        return dx, dy


def descendants(node_id: str, edges: Iterable[Edge]) -> set[str]:
    """All nodes reachable from ``node_id`` along source -> target edges."""
    graph: nx.DiGraph = nx.DiGraph()
    graph.add_node(node_id)
    graph.add_edges_from((edge.source_id, edge.target_id) for edge in edges)
    return nx.descendants(graph, node_id)


def propagate_drag(
    dragged_node_id: str,
    dx: float,
    dy: float,
    edges: Iterable[Edge],
    positions: Mapping[str, Position],
    mode: DragMode,
) -> dict[str, Position]:
    """
    Translate the descendants of a dragged node by the same step.

    Returns new positions for the affected descendants only; moving the
    dragged node itself is the caller's business. Empty in single-node mode.
    """
    if not mode.is_subtree or (dx == 0 and dy == 0):
        return {}
    return {
        nid: positions[nid].translated(dx, dy)
        for nid in descendants(dragged_node_id, edges)
        if nid in positions
    }


class SubtreeDragPropagator:
    """Turns drag ticks into position updates for the dragged node and its subtree."""

    def __init__(self, subtree_default: bool = False) -> None:
        self.subtree_default = subtree_default
        self.session: DragSession | None = None

    @property
    def active(self) -> bool:
        return self.session is not None

    def begin(self, node_id: str, position: Position) -> None:
        self.session = DragSession(dragged_node_id=node_id, last_known_position=position)

    def move(
        self,
        position: Position,
        edges: Iterable[Edge],
        positions: Mapping[str, Position],
        modifier_held: bool = False,
    ) -> dict[str, Position]:
        """
        Handle one drag tick. Synchronous; never waits on I/O.

        Returns the positions that changed, the dragged node included.
        """
        session = self.session
        if session is None:
            return {}

        dx, dy = session.advance(position)
        updates = {session.dragged_node_id: position}
        mode = DragMode(self.subtree_default, modifier_held)
        updates.update(propagate_drag(session.dragged_node_id, dx, dy, edges, positions, mode))
        return updates

    def end(self) -> bool:
        """Finish the gesture. Returns whether one was in progress."""
        had_session = self.session is not None
        self.session = None
        return had_session
