"""
Position reconciliation.

Every node about to be rendered gets exactly one position, taken from the
first source that has one:

1. live - the node is already on screen (laid out earlier, restored from
   cache earlier, or dragged by the user); its current position is kept
2. cached - the persisted layout for the repository has the node
3. default - the freshly computed layered layout

Two modes exist. A full reload aligns uncached nodes with the first parent
that already has a position, so new commits hang below their positioned
ancestors instead of snapping onto the raw default grid. An incremental
append (older history paged in) aligns everything new to the anchor, the
commit that was oldest before the append, so nothing on screen moves.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from gitcanvas.graph.layout import LayoutResult
from gitcanvas.graph.types import ORIGIN, Commit, CommitNode, Edge, Position

logger = logging.getLogger(__name__)

SOURCE_LIVE = "live"
SOURCE_CACHED = "cached"
SOURCE_DEFAULT = "default"


@dataclass
class ReconcileResult:
    """Authoritative positions plus the edge set to apply after them."""

    positions: dict[str, Position]
    edges: list[Edge]
    sources: dict[str, str] = field(default_factory=dict)


def reconcile(
    commits: Sequence[Commit],
    layout: LayoutResult,
    live: Mapping[str, Position],
    cached: Mapping[str, Position],
    anchor_id: str | None = None,
) -> ReconcileResult:
    """Dispatch to incremental mode when an anchor is known, else full reload."""
    if anchor_id is None or not live:
        return reconcile_full(commits, layout, live, cached)
    return reconcile_append(layout, live, cached, anchor_id)


def reconcile_full(
    commits: Sequence[Commit],
    layout: LayoutResult,
    live: Mapping[str, Position],
    cached: Mapping[str, Position],
) -> ReconcileResult:
    """Resolve positions in topological order, carrying parent offsets forward."""
    by_id = {commit.id: commit for commit in commits}
    resolved: dict[str, Position] = {}
    sources: dict[str, str] = {}

    for cid in layout.order:
        default = layout.positions[cid]
        if cid in live:
            resolved[cid] = live[cid]
            sources[cid] = SOURCE_LIVE
            continue
        if cid in cached:
            resolved[cid] = cached[cid]
            sources[cid] = SOURCE_CACHED
            continue

        resolved[cid] = default
        sources[cid] = SOURCE_DEFAULT
        commit = by_id.get(cid)
        if commit is None:
            continue
        for parent_id in commit.parents:
            if parent_id in resolved:
                delta = resolved[parent_id] - layout.positions[parent_id]
                resolved[cid] = default + delta
                break

    return ReconcileResult(positions=resolved, edges=list(layout.edges), sources=sources)


def reconcile_append(
    layout: LayoutResult,
    live: Mapping[str, Position],
    cached: Mapping[str, Position],
    anchor_id: str,
) -> ReconcileResult:
    """Keep live nodes fixed and shift new ones so the anchor does not jump."""
    anchor_live = live.get(anchor_id)
    anchor_default = layout.positions.get(anchor_id)
    anchor_cached = cached.get(anchor_id)

    default_delta = ORIGIN
    cache_delta = ORIGIN
    if anchor_live is None:
        logger.debug("Anchor %s is not live, appending without alignment", anchor_id)
    else:
        if anchor_default is not None:
            default_delta = anchor_live - anchor_default
        if anchor_cached is not None:
            cache_delta = anchor_live - anchor_cached

    positions: dict[str, Position] = {}
    sources: dict[str, str] = {}
    for cid in layout.order:
        if cid in live:
            positions[cid] = live[cid]
            sources[cid] = SOURCE_LIVE
        elif cid in cached:
            positions[cid] = cached[cid] + cache_delta
            sources[cid] = SOURCE_CACHED
        else:
            positions[cid] = layout.positions[cid] + default_delta
            sources[cid] = SOURCE_DEFAULT

    return ReconcileResult(positions=positions, edges=list(layout.edges), sources=sources)


def build_nodes(commits: Sequence[Commit], positions: Mapping[str, Position]) -> dict[str, CommitNode]:
    """Create fresh nodes for a commit window, newest first as received."""
    return {
        commit.id: CommitNode(id=commit.id, position=positions[commit.id], commit=commit)
        for commit in commits
        if commit.id in positions
    }
