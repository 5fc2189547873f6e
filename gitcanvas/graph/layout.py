"""Layered (top-to-bottom) default layout for a window of commits."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import networkx as nx

from gitcanvas.constants import COLUMN_SPACING, ORDERING_SWEEPS, ROW_SPACING
from gitcanvas.graph.errors import LayoutError
from gitcanvas.graph.types import Commit, Edge, Position

logger = logging.getLogger(__name__)


@dataclass
class LayoutResult:
    """Default positions plus the structure they were derived from."""

    positions: dict[str, Position]
    edges: list[Edge]
    ranks: dict[str, int]
    order: list[str]  # topological: every parent before its children


def build_commit_graph(commits: Sequence[Commit]) -> nx.DiGraph:
    """
    Parent -> child graph over the loaded commits.

    Parents that are not loaded, self references and repeated parents are
    left out. Nodes are inserted in id order so traversals are stable.
    """
    by_id: dict[str, Commit] = {}
    for commit in commits:
        if commit.id in by_id:
            raise LayoutError(f"Duplicate commit id {commit.id}")
        by_id[commit.id] = commit

    graph: nx.DiGraph = nx.DiGraph()
    for cid in sorted(by_id):
        graph.add_node(cid, commit=by_id[cid])
    for cid in sorted(by_id):
        for parent_id in by_id[cid].parents:
            if parent_id in by_id and parent_id != cid:
                graph.add_edge(parent_id, cid)
    return graph


def remove_cycles(graph: nx.DiGraph) -> None:
    """Drop the closing link of every cycle, in place."""
    while True:
        try:
            cycle = nx.find_cycle(graph)
        except nx.NetworkXNoCycle:
            return
        parent_id, child_id = cycle[-1][:2]
        logger.warning("Dropping cyclic parent link %s -> %s", child_id, parent_id)
        graph.remove_edge(parent_id, child_id)


def compute_layout(commits: Sequence[Commit]) -> LayoutResult:
    """
    Compute a deterministic default position for every commit.

    Commits are treated as an unordered set: ranks come from the longest
    path from a root (a commit is always below all of its loaded parents),
    and nodes inside a rank are ordered with barycenter sweeps to cut down
    edge crossings. Parents that are not part of ``commits`` are ignored.

    A parent reference that would close a cycle is dropped (with a warning)
    rather than failing the whole layout.
    """
    graph = build_commit_graph(commits)
    remove_cycles(graph)

    # Oldest ready commit first, ties broken by id
    order = list(
        nx.lexicographical_topological_sort(
            graph, key=lambda cid: (graph.nodes[cid]["commit"].timestamp, cid)
        )
    )

    ranks: dict[str, int] = {}
    for cid in order:
        ranks[cid] = max((ranks[p] + 1 for p in graph.predecessors(cid)), default=0)

    layers = minimise_crossings(order, ranks, graph)

    positions: dict[str, Position] = {}
    for rank, layer in enumerate(layers):
        offset = (len(layer) - 1) / 2
        for index, cid in enumerate(layer):
            positions[cid] = Position((index - offset) * COLUMN_SPACING, rank * ROW_SPACING)

    edges: list[Edge] = []
    for cid in order:
        parents = graph.nodes[cid]["commit"].parents
        first_parent = parents[0] if parents else None
        for parent_id in dict.fromkeys(parents):
            if graph.has_edge(parent_id, cid):
                edges.append(Edge(parent_id, cid, merge=parent_id != first_parent))

    return LayoutResult(positions=positions, edges=edges, ranks=ranks, order=order)


def minimise_crossings(order: list[str], ranks: dict[str, int], graph: nx.DiGraph) -> list[list[str]]:
    """Group commits by rank and reorder each rank with barycenter sweeps."""
    if not order:
        return []

    layers: list[list[str]] = [[] for _ in range(max(ranks.values()) + 1)]
    for cid in order:
        layers[ranks[cid]].append(cid)

    best = [list(layer) for layer in layers]
    best_crossings = count_crossings(layers, graph)

    for sweep in range(ORDERING_SWEEPS):
        if best_crossings == 0:
            break
        downward = sweep % 2 == 0
        sequence = range(1, len(layers)) if downward else range(len(layers) - 2, -1, -1)
        for rank in sequence:
            neighbour_layer = layers[rank - 1] if downward else layers[rank + 1]
            neighbour_pos = {cid: float(i) for i, cid in enumerate(neighbour_layer)}
            current_pos = {cid: float(i) for i, cid in enumerate(layers[rank])}
            layers[rank].sort(
                key=lambda cid: _barycenter(cid, graph, neighbour_pos, current_pos, downward)
            )

        crossings = count_crossings(layers, graph)
        if crossings < best_crossings:
            best_crossings = crossings
            best = [list(layer) for layer in layers]

    return best


def _barycenter(
    cid: str,
    graph: nx.DiGraph,
    neighbour_pos: dict[str, float],
    current_pos: dict[str, float],
    downward: bool,
) -> float:
    neighbours = graph.predecessors(cid) if downward else graph.successors(cid)
    placed = [neighbour_pos[n] for n in neighbours if n in neighbour_pos]
    if not placed:
        return current_pos[cid]
    return sum(placed) / len(placed)


def count_crossings(layers: list[list[str]], graph: nx.DiGraph) -> int:
    """Count crossings between edges that join adjacent ranks."""
    total = 0
    for rank in range(len(layers) - 1):
        below = {cid: i for i, cid in enumerate(layers[rank + 1])}
        spans: list[tuple[int, int]] = []
        for top, parent_id in enumerate(layers[rank]):
            if parent_id not in graph:
                continue
            for child_id in graph.successors(parent_id):
                if child_id in below:
                    spans.append((top, below[child_id]))
        for i, (top_a, bottom_a) in enumerate(spans):
            for top_b, bottom_b in spans[i + 1 :]:
                if (top_a - top_b) * (bottom_a - bottom_b) < 0:
                    total += 1
    return total
