"""Commit graph core: layout, reconciliation, dragging, paging and diff pointer"""

from gitcanvas.graph.diff_pointer import DiffPointerController, DiffPointerState
from gitcanvas.graph.drag import DragMode, SubtreeDragPropagator, descendants, propagate_drag
from gitcanvas.graph.errors import FetchError, GraphError, LayoutError, PersistenceError
from gitcanvas.graph.layout import LayoutResult, compute_layout
from gitcanvas.graph.layout_cache import LayoutCache, normalize_repo_path
from gitcanvas.graph.pagination import PageRequest, PaginationController
from gitcanvas.graph.reconcile import ReconcileResult, reconcile
from gitcanvas.graph.types import (
    Commit,
    CommitNode,
    CommitPage,
    Edge,
    GitRef,
    GraphNode,
    Position,
    UncommittedState,
    VirtualDiffTarget,
    Viewport,
)

__all__ = [
    "Commit",
    "CommitNode",
    "CommitPage",
    "DiffPointerController",
    "DiffPointerState",
    "DragMode",
    "Edge",
    "FetchError",
    "GitRef",
    "GraphError",
    "GraphNode",
    "LayoutCache",
    "LayoutError",
    "LayoutResult",
    "PageRequest",
    "PaginationController",
    "PersistenceError",
    "Position",
    "ReconcileResult",
    "SubtreeDragPropagator",
    "UncommittedState",
    "VirtualDiffTarget",
    "Viewport",
    "compute_layout",
    "descendants",
    "normalize_repo_path",
    "propagate_drag",
    "reconcile",
]
