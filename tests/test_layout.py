"""Tests for the layered default layout."""

import networkx as nx
import pytest

from gitcanvas.constants import ROW_SPACING
from gitcanvas.graph.errors import LayoutError
from gitcanvas.graph.layout import build_commit_graph, compute_layout, count_crossings
from tests.factories import linear_history, make_commit


def diamond():
    """A <- B, A <- C, M merges B and C (M's first parent is B)."""
    return [
        make_commit("A", timestamp=1),
        make_commit("B", ["A"], timestamp=2),
        make_commit("C", ["A"], timestamp=3),
        make_commit("M", ["B", "C"], timestamp=4),
    ]


class TestDeterminism:
    """Same input, same output."""

    def test_repeated_calls_identical(self):
        commits = diamond()
        first = compute_layout(commits)
        second = compute_layout(commits)
        assert first.positions == second.positions
        assert first.edges == second.edges

    def test_input_order_does_not_matter(self):
        commits = diamond()
        forward = compute_layout(commits)
        backward = compute_layout(list(reversed(commits)))
        assert forward.positions == backward.positions
        assert set(forward.edges) == set(backward.edges)

    def test_empty_input(self):
        result = compute_layout([])
        assert result.positions == {}
        assert result.edges == []
        assert result.order == []


class TestRanks:
    """Parents are always above their children."""

    def test_child_rank_greater_than_parent(self):
        result = compute_layout(diamond())
        for edge in result.edges:
            assert result.ranks[edge.target_id] > result.ranks[edge.source_id]

    def test_longest_path_rank(self):
        """A merge sits below its deepest parent."""
        commits = [
            make_commit("A", timestamp=1),
            make_commit("B", ["A"], timestamp=2),
            make_commit("C", ["B"], timestamp=3),
            make_commit("M", ["A", "C"], timestamp=4),
        ]
        result = compute_layout(commits)
        assert result.ranks == {"A": 0, "B": 1, "C": 2, "M": 3}

    def test_rank_maps_to_row(self):
        result = compute_layout(linear_history(3))
        for cid, rank in result.ranks.items():
            assert result.positions[cid].y == rank * ROW_SPACING

    def test_topological_order(self):
        result = compute_layout(diamond())
        seen = set()
        for cid in result.order:
            for edge in result.edges:
                if edge.target_id == cid:
                    assert edge.source_id in seen
            seen.add(cid)

    def test_linear_history_is_a_column(self):
        result = compute_layout(linear_history(5))
        assert {pos.x for pos in result.positions.values()} == {0.0}


class TestEdges:
    """Edge construction and merge tagging."""

    def test_merge_edge_tagging(self):
        result = compute_layout(diamond())
        edges = {(e.source_id, e.target_id): e for e in result.edges}
        assert edges[("B", "M")].merge is False
        assert edges[("C", "M")].merge is True
        assert edges[("A", "B")].merge is False

    def test_parents_outside_window_ignored(self):
        """The oldest loaded commit's parents are not loaded yet."""
        commits = [make_commit("B", ["A"], timestamp=2), make_commit("C", ["B"], timestamp=3)]
        result = compute_layout(commits)
        assert [(e.source_id, e.target_id) for e in result.edges] == [("B", "C")]
        assert result.ranks["B"] == 0

    def test_first_parent_missing_makes_loaded_parent_a_merge_edge(self):
        commits = [make_commit("C", timestamp=1), make_commit("M", ["X", "C"], timestamp=2)]
        result = compute_layout(commits)
        assert result.edges[0].merge is True

    def test_duplicate_parent_listed_once(self):
        commits = [make_commit("A", timestamp=1), make_commit("B", ["A", "A"], timestamp=2)]
        result = compute_layout(commits)
        assert len(result.edges) == 1


class TestMalformedInput:
    """Cycles and duplicates."""

    def test_duplicate_id_raises(self):
        with pytest.raises(LayoutError):
            compute_layout([make_commit("A"), make_commit("A")])

    def test_cycle_is_broken(self):
        commits = [make_commit("A", ["B"], timestamp=1), make_commit("B", ["A"], timestamp=2)]
        result = compute_layout(commits)
        assert set(result.positions) == {"A", "B"}
        assert len(result.edges) == 1
        edge = result.edges[0]
        assert result.ranks[edge.target_id] > result.ranks[edge.source_id]

    def test_self_parent_ignored(self):
        result = compute_layout([make_commit("A", ["A"])])
        assert result.edges == []
        assert result.ranks == {"A": 0}


class TestCrossings:
    """Barycenter ordering."""

    def test_count_crossings(self):
        layers = [["a", "b"], ["c", "d"]]
        crossed = nx.DiGraph([("b", "c"), ("a", "d")])
        straight = nx.DiGraph([("a", "c"), ("b", "d")])
        assert count_crossings(layers, crossed) == 1
        assert count_crossings(layers, straight) == 0

    def test_two_independent_branches_do_not_cross(self):
        commits = [
            make_commit("A1", timestamp=1),
            make_commit("B1", timestamp=2),
            make_commit("A2", ["A1"], timestamp=4),
            make_commit("B2", ["B1"], timestamp=3),
        ]
        result = compute_layout(commits)
        pos = result.positions
        assert (pos["A1"].x < pos["B1"].x) == (pos["A2"].x < pos["B2"].x)


class TestCommitGraph:
    """Graph construction from a commit window."""

    def test_edges_run_parent_to_child(self):
        graph = build_commit_graph(diamond())
        assert set(graph.edges) == {("A", "B"), ("A", "C"), ("B", "M"), ("C", "M")}
        assert graph.nodes["M"]["commit"].parents == ["B", "C"]

    def test_unloaded_and_self_parents_dropped(self):
        graph = build_commit_graph([make_commit("A", ["A", "X"])])
        assert list(graph.nodes) == ["A"]
        assert graph.number_of_edges() == 0
