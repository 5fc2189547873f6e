"""Tests for the paged commit window."""

from gitcanvas.constants import WORKING_COPY_ID
from gitcanvas.graph.pagination import REQUEST_MORE, REQUEST_REFRESH, PaginationController
from gitcanvas.graph.types import CommitPage
from tests.factories import linear_history, make_commit


def working_copy(parent_id):
    return make_commit(WORKING_COPY_ID, [parent_id], timestamp=10**9, message="Uncommitted changes")


def loaded(controller, commits, has_more=True):
    """Drive a refresh to completion with ``commits``."""
    request = controller.begin_refresh()
    controller.complete(request, CommitPage(commits=commits, has_more=has_more))
    return request


class TestRequests:
    def test_first_refresh(self):
        controller = PaginationController(page_size=50)
        request = controller.begin_refresh()
        assert request.kind == REQUEST_REFRESH
        assert (request.skip, request.limit, request.anchor_id) == (0, 50, None)
        assert controller.busy

    def test_skip_excludes_working_copy(self):
        """Working copy + 50 real commits -> next page starts at 50."""
        controller = PaginationController(page_size=50)
        history = linear_history(50)
        loaded(controller, [working_copy(history[0].id)] + history)
        assert controller.real_count == 50

        request = controller.begin_load_more()
        assert request.kind == REQUEST_MORE
        assert request.skip == 50
        assert request.limit == 50

    def test_load_more_captures_anchor(self):
        controller = PaginationController(page_size=3)
        loaded(controller, linear_history(3, start=3))
        request = controller.begin_load_more()
        assert request.anchor_id == "c3"

    def test_busy_requests_are_noops(self):
        controller = PaginationController()
        assert controller.begin_refresh() is not None
        assert controller.begin_refresh() is None
        assert controller.begin_load_more() is None

    def test_no_load_more_at_end_of_history(self):
        controller = PaginationController(page_size=3)
        loaded(controller, linear_history(2), has_more=False)
        assert controller.begin_load_more() is None

    def test_refresh_keeps_window_size(self):
        controller = PaginationController(page_size=2)
        loaded(controller, linear_history(2, start=2))
        more = controller.begin_load_more()
        controller.complete(more, CommitPage(commits=linear_history(2), has_more=False))
        assert controller.begin_refresh().limit == 4


class TestCompletion:
    def test_append_extends_window(self):
        controller = PaginationController(page_size=3)
        loaded(controller, linear_history(3, start=3))
        request = controller.begin_load_more()
        window = controller.complete(request, CommitPage(commits=linear_history(3), has_more=False))
        assert [c.id for c in window] == ["c5", "c4", "c3", "c2", "c1", "c0"]
        assert controller.has_more is False
        assert not controller.busy

    def test_append_drops_duplicates(self):
        controller = PaginationController(page_size=3)
        loaded(controller, linear_history(3, start=3))
        request = controller.begin_load_more()
        overlap = linear_history(4)  # c3 .. c0
        window = controller.complete(request, CommitPage(commits=overlap, has_more=False))
        assert [c.id for c in window].count("c3") == 1

    def test_refresh_replaces_window(self):
        controller = PaginationController()
        loaded(controller, linear_history(3))
        loaded(controller, linear_history(1, prefix="n"))
        assert [c.id for c in controller.commits] == ["n0"]

    def test_stale_response_discarded(self):
        controller = PaginationController()
        stale = controller.begin_refresh()
        controller.invalidate()
        assert not controller.busy
        assert controller.complete(stale, CommitPage(commits=linear_history(2), has_more=False)) is None
        assert controller.commits == []

    def test_superseded_request_discarded(self):
        controller = PaginationController()
        first = controller.begin_refresh()
        controller.invalidate()
        second = controller.begin_refresh()
        assert controller.complete(first, CommitPage(commits=[make_commit("old")], has_more=False)) is None
        assert controller.is_current(second)

    def test_window_for_does_not_commit(self):
        controller = PaginationController()
        request = controller.begin_refresh()
        preview = controller.window_for(request, CommitPage(commits=linear_history(2), has_more=True))
        assert len(preview) == 2
        assert controller.commits == []
        assert controller.busy


class TestFailure:
    def test_fail_leaves_window_and_clears_busy(self):
        controller = PaginationController(page_size=3)
        loaded(controller, linear_history(3))
        request = controller.begin_load_more()
        assert controller.fail(request) is True
        assert not controller.busy
        assert [c.id for c in controller.commits] == ["c2", "c1", "c0"]

    def test_fail_for_stale_request_ignored(self):
        controller = PaginationController()
        stale = controller.begin_refresh()
        controller.invalidate()
        current = controller.begin_refresh()
        assert controller.fail(stale) is False
        assert controller.is_current(current)
