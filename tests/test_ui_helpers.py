"""Tests for the widget-free helpers of the UI layer."""

from gitcanvas.constants import WORKING_COPY_ID
from gitcanvas.graph.types import GitRef
from gitcanvas.ui.diff_window import format_diff_html
from gitcanvas.ui.git_graph.branches import ref_sort_key
from gitcanvas.ui.git_graph.types import (
    DEFAULT_NODE_COLOR,
    WORKING_COPY_COLOR,
    author_hue,
    get_node_color,
    ref_hue,
)
from tests.factories import make_commit


class TestRefHue:
    def test_stable(self):
        assert ref_hue("main") == ref_hue("main")
        assert 0 <= ref_hue("feature/x") < 360

    def test_remote_prefix_ignored(self):
        assert ref_hue("origin/main") == ref_hue("main")
        assert ref_hue("upstream/dev") == ref_hue("dev")


class TestNodeColor:
    def test_working_copy(self):
        commit = make_commit(WORKING_COPY_ID)
        assert get_node_color(commit) == WORKING_COPY_COLOR

    def test_plain_commit(self):
        assert get_node_color(make_commit("abc")) == DEFAULT_NODE_COLOR

    def test_head_alone_is_not_a_branch_color(self):
        assert get_node_color(make_commit("abc", refs=["HEAD"])) == DEFAULT_NODE_COLOR

    def test_branch_color(self):
        color = get_node_color(make_commit("abc", refs=["HEAD", "main"]))
        assert color.hslHue() == ref_hue("main")


class TestFormatDiffHtml:
    def test_added_and_removed_lines_highlighted(self):
        out = format_diff_html("--- a/f\n+++ b/f\n@@ -1 +1 @@\n-old\n+new")
        assert '<span style="background:#ffe6e6;color:#c62828">-old</span>' in out
        assert '<span style="background:#e6ffe6;color:#2e7d32">+new</span>' in out
        assert "color:#7b1fa2" in out

    def test_html_escaped(self):
        out = format_diff_html("+<b>&")
        assert "&lt;b&gt;&amp;" in out


class TestRefOrdering:
    def test_kinds_then_stash_index(self):
        refs = [
            GitRef("stash@{10}", "a", "stash"),
            GitRef("v1.0", "b", "tag"),
            GitRef("stash@{2}", "c", "stash"),
            GitRef("main", "d", "branch"),
            GitRef("HEAD", "d", "head"),
            GitRef("origin/main", "d", "remote"),
        ]
        names = [r.name for r in sorted(refs, key=ref_sort_key)]
        assert names == ["HEAD", "main", "origin/main", "v1.0", "stash@{2}", "stash@{10}"]


class TestAuthorHue:
    def test_stable_and_in_range(self):
        assert author_hue("Alice") == author_hue("Alice")
        assert 0 <= author_hue("Bob") < 360
