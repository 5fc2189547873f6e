"""Commit and repository builders shared by the tests."""

from unittest.mock import MagicMock

from gitcanvas.graph.types import Commit, CommitPage


def make_commit(commit_id, parents=(), timestamp=0, message=None, refs=(), author="Test <test@example.com>"):
    """Build a Commit with just the fields a test cares about."""
    return Commit(
        id=commit_id,
        message=message if message is not None else f"commit {commit_id}",
        author=author,
        timestamp=timestamp,
        parents=list(parents),
        refs=list(refs),
    )


def linear_history(count, prefix="c", start=0):
    """``count`` commits in a chain, newest first (as a history walk returns them)."""
    commits = []
    for i in range(start, start + count):
        parents = [f"{prefix}{i - 1}"] if i > 0 else []
        commits.append(make_commit(f"{prefix}{i}", parents, timestamp=1000 + i))
    return list(reversed(commits))


def paged_repo(history, path="/repo"):
    """Mock repository serving ``history`` (newest first) in pages."""
    repo = MagicMock()
    repo.path = path
    repo.fetch_all_refs.return_value = []

    def fetch_commits(limit, skip=0, include_working_copy=True):
        window = history[skip : skip + limit]
        return CommitPage(commits=list(window), has_more=skip + limit < len(history))

    repo.fetch_commits.side_effect = fetch_commits
    return repo
