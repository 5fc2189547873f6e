"""Tests for position reconciliation (live > cached > default)."""

from gitcanvas.constants import ROW_SPACING
from gitcanvas.graph.layout import compute_layout
from gitcanvas.graph.reconcile import (
    SOURCE_CACHED,
    SOURCE_DEFAULT,
    SOURCE_LIVE,
    build_nodes,
    reconcile,
)
from gitcanvas.graph.types import Position
from tests.factories import linear_history, make_commit


def oldest_first(commits):
    return list(reversed(commits))


class TestFullReload:
    """No anchor: everything resolves through the priority chain."""

    def test_defaults_without_live_or_cache(self):
        commits = oldest_first(linear_history(3))
        layout = compute_layout(commits)
        result = reconcile(commits, layout, live={}, cached={})
        assert result.positions == layout.positions
        assert set(result.sources.values()) == {SOURCE_DEFAULT}

    def test_cached_position_used_verbatim(self):
        commits = oldest_first(linear_history(3))
        layout = compute_layout(commits)
        result = reconcile(commits, layout, live={}, cached={"c1": Position(7, 8)})
        assert result.positions["c1"] == Position(7, 8)
        assert result.sources["c1"] == SOURCE_CACHED

    def test_uncached_child_follows_cached_parent(self):
        commits = oldest_first(linear_history(3))
        layout = compute_layout(commits)
        result = reconcile(commits, layout, live={}, cached={"c0": Position(300, 10)})
        assert result.positions["c0"] == Position(300, 10)
        assert result.positions["c1"] == Position(300, 10 + ROW_SPACING)
        assert result.positions["c2"] == Position(300, 10 + 2 * ROW_SPACING)

    def test_live_beats_cache(self):
        commits = oldest_first(linear_history(2))
        layout = compute_layout(commits)
        result = reconcile(
            commits,
            layout,
            live={"c0": Position(1, 1)},
            cached={"c0": Position(2, 2)},
        )
        assert result.positions["c0"] == Position(1, 1)
        assert result.sources["c0"] == SOURCE_LIVE

    def test_new_tip_hangs_below_live_parent(self):
        """Refresh after a new commit: it lands under its dragged parent."""
        commits = oldest_first(linear_history(3))
        layout = compute_layout(commits)
        live = {"c0": Position(0, 0), "c1": Position(500, 1000)}
        result = reconcile(commits, layout, live=live, cached={})
        assert result.positions["c2"] == Position(500, 1000 + ROW_SPACING)

    def test_edges_come_from_layout(self):
        commits = [make_commit("A", timestamp=1), make_commit("B", ["A"], timestamp=2)]
        layout = compute_layout(commits)
        result = reconcile(commits, layout, live={}, cached={})
        assert result.edges == layout.edges


class TestAppend:
    """Anchor mode: older history is paged in below what is on screen."""

    def setup_method(self):
        self.page1 = linear_history(3, start=3)  # c5, c4, c3
        self.page2 = linear_history(3, start=0)  # c2, c1, c0
        self.window = oldest_first(self.page1 + self.page2)
        self.layout = compute_layout(self.window)
        self.live = {
            "c5": Position(10, 100),
            "c4": Position(20, 300),
            "c3": Position(50, 500),
        }

    def test_anchor_keeps_its_position(self):
        result = reconcile(self.window, self.layout, self.live, cached={}, anchor_id="c3")
        assert result.positions["c3"] == Position(50, 500)

    def test_every_live_node_is_unchanged(self):
        result = reconcile(self.window, self.layout, self.live, cached={}, anchor_id="c3")
        for cid, position in self.live.items():
            assert result.positions[cid] == position

    def test_new_nodes_aligned_to_anchor(self):
        result = reconcile(self.window, self.layout, self.live, cached={}, anchor_id="c3")
        delta = Position(50, 500) - self.layout.positions["c3"]
        for cid in ("c2", "c1", "c0"):
            assert result.positions[cid] == self.layout.positions[cid] + delta
            assert result.sources[cid] == SOURCE_DEFAULT

    def test_cached_nodes_shifted_by_anchor_cache_offset(self):
        cached = {"c3": Position(0, 0), "c2": Position(5, 60)}
        result = reconcile(self.window, self.layout, self.live, cached=cached, anchor_id="c3")
        assert result.positions["c2"] == Position(55, 560)
        assert result.sources["c2"] == SOURCE_CACHED

    def test_missing_anchor_falls_back_to_unshifted_positions(self):
        live = {"c5": Position(10, 100)}
        result = reconcile(self.window, self.layout, live, cached={}, anchor_id="gone")
        assert result.positions["c5"] == Position(10, 100)
        assert result.positions["c0"] == self.layout.positions["c0"]

    def test_empty_live_uses_full_mode(self):
        cached = {"c0": Position(300, 10)}
        result = reconcile(self.window, self.layout, live={}, cached=cached, anchor_id="c3")
        assert result.positions["c0"] == Position(300, 10)
        assert result.positions["c1"] == Position(300, 10 + ROW_SPACING)


class TestBuildNodes:
    def test_nodes_keep_window_order(self):
        commits = linear_history(3)
        positions = {c.id: Position(0, i) for i, c in enumerate(commits)}
        nodes = build_nodes(commits, positions)
        assert list(nodes) == ["c2", "c1", "c0"]
        assert nodes["c1"].position == Position(0, 1)
        assert nodes["c1"].kind == "commit"
