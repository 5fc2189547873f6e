"""Loaded-commit window and paged fetch bookkeeping."""

import logging
from dataclasses import dataclass

from gitcanvas.constants import DEFAULT_PAGE_SIZE
from gitcanvas.graph.types import Commit, CommitPage

logger = logging.getLogger(__name__)

REQUEST_REFRESH = "refresh"
REQUEST_MORE = "more"


@dataclass(frozen=True)
class PageRequest:
    """A fetch the caller must run and hand back with ``complete``/``fail``."""

    seq: int
    kind: str
    skip: int
    limit: int
    anchor_id: str | None = None  # oldest commit before the append


class PaginationController:
    """
    Tracks the loaded window (newest first) and issues page requests.

    Only one request is in flight at a time: asking for another while busy
    is a no-op. Every request carries a sequence number, and a response is
    accepted only if it belongs to the latest request, so answers that were
    superseded (e.g. by ``invalidate``) are dropped.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        self.page_size = max(1, page_size)
        self.commits: list[Commit] = []
        self.has_more = True
        self._seq = 0
        self._pending: PageRequest | None = None

    @property
    def busy(self) -> bool:
        return self._pending is not None

    @property
    def real_count(self) -> int:
        """Loaded commits that exist in the repository (working copy excluded)."""
        return sum(1 for commit in self.commits if not commit.is_synthetic)

    @property
    def oldest_id(self) -> str | None:
        return self.commits[-1].id if self.commits else None

    def begin_refresh(self) -> PageRequest | None:
        """Reload from the tip, keeping at least the current window size."""
        if self.busy:
            logger.debug("Refresh ignored, request %d in flight", self._seq)
            return None
        limit = max(self.page_size, self.real_count)
        return self._issue(REQUEST_REFRESH, skip=0, limit=limit, anchor_id=None)

    def begin_load_more(self) -> PageRequest | None:
        """Request the next page of older history."""
        if self.busy:
            logger.debug("Load more ignored, request %d in flight", self._seq)
            return None
        if self.commits and not self.has_more:
            return None
        return self._issue(
            REQUEST_MORE,
            skip=self.real_count,
            limit=self.page_size,
            anchor_id=self.oldest_id,
        )

    def _issue(self, kind: str, skip: int, limit: int, anchor_id: str | None) -> PageRequest:
        self._seq += 1
        self._pending = PageRequest(seq=self._seq, kind=kind, skip=skip, limit=limit, anchor_id=anchor_id)
        return self._pending

    def is_current(self, request: PageRequest) -> bool:
        return self._pending is not None and request.seq == self._pending.seq

    def complete(self, request: PageRequest, page: CommitPage) -> list[Commit] | None:
        """
        Accept a page. Returns the new window, or None for a stale response.
        """
        if not self.is_current(request):
            logger.info("Discarding stale page response (request %d)", request.seq)
            return None
        self._pending = None

        window = self.window_for(request, page)
        self.commits = window
        self.has_more = page.has_more
        return window

    def window_for(self, request: PageRequest, page: CommitPage) -> list[Commit]:
        """The window ``page`` would produce, without committing it."""
        if request.kind == REQUEST_REFRESH:
            return list(page.commits)
        known = {commit.id for commit in self.commits}
        return self.commits + [c for c in page.commits if c.id not in known]

    def fail(self, request: PageRequest) -> bool:
        """Release the busy flag after a failed fetch. The window is untouched."""
        if not self.is_current(request):
            return False
        self._pending = None
        return True

    def invalidate(self) -> None:
        """Forget any in-flight request so its response will be discarded."""
        self._seq += 1
        self._pending = None
