"""
Read-only git access using pygit2
"""

import itertools
import time
from dataclasses import dataclass
from pathlib import Path

import pygit2

from gitcanvas.constants import WORKING_COPY_ID
from gitcanvas.graph.errors import FetchError
from gitcanvas.graph.types import Commit, CommitPage, GitRef, UncommittedState

_INDEX_FLAGS = (
    pygit2.enums.FileStatus.INDEX_NEW
    | pygit2.enums.FileStatus.INDEX_MODIFIED
    | pygit2.enums.FileStatus.INDEX_DELETED
    | pygit2.enums.FileStatus.INDEX_RENAMED
    | pygit2.enums.FileStatus.INDEX_TYPECHANGE
)
_WORKTREE_FLAGS = (
    pygit2.enums.FileStatus.WT_NEW
    | pygit2.enums.FileStatus.WT_MODIFIED
    | pygit2.enums.FileStatus.WT_DELETED
    | pygit2.enums.FileStatus.WT_RENAMED
    | pygit2.enums.FileStatus.WT_TYPECHANGE
)


@dataclass
class FileDiff:
    """One changed file between two commits."""

    path: str
    status: str  # A, D, M, R, C or ?
    patch: str


class GraphRepository:
    """Wraps a pygit2 repository with the queries the commit graph needs"""

    def __init__(self, repo_path: str | None = None) -> None:
        """Open repository (searching upwards from cwd if no path given)"""
        if repo_path is None:
            repo_path = self._find_repo()

        try:
            self.repo = pygit2.Repository(repo_path)
        except pygit2.GitError as e:
            raise FetchError(f"Not a git repository: {repo_path}") from e

    def _find_repo(self) -> str:
        """Find git repository in current directory or parents"""
        current = Path.cwd()
        while current != current.parent:
            if (current / ".git").exists():
                return str(current)
            current = current.parent
        raise FetchError("Not in a git repository")

    @property
    def path(self) -> str:
        """Work tree path (or git dir for bare repositories), without trailing slash"""
        root = self.repo.workdir or self.repo.path
        return root.rstrip("/\\") or root

    def fetch_all_refs(self) -> list[GitRef]:
        """HEAD, local and remote branches, tags and stashes, each resolved to a commit"""
        refs: list[GitRef] = []
        try:
            if not self.repo.head_is_unborn and not self.repo.is_empty:
                refs.append(GitRef("HEAD", str(self.repo.head.target), "head"))

            for name in self.repo.references:
                if name.startswith("refs/heads/"):
                    kind = "branch"
                elif name.startswith("refs/remotes/"):
                    if name.endswith("/HEAD"):
                        continue
                    kind = "remote"
                elif name.startswith("refs/tags/"):
                    kind = "tag"
                else:
                    continue

                reference = self.repo.references[name]
                try:
                    # Annotated tags peel through to their commit
                    commit = reference.peel(pygit2.Commit)
                except (pygit2.GitError, ValueError):
                    continue
                refs.append(GitRef(reference.shorthand, str(commit.id), kind))

            # stash@{0} is the newest stash
            for index, stash in enumerate(self.repo.listall_stashes()):
                refs.append(GitRef(f"stash@{{{index}}}", str(stash.commit_id), "stash"))
        except pygit2.GitError as e:
            raise FetchError(f"Failed to list refs: {e}") from e

        return refs

    def fetch_commits(self, limit: int, skip: int = 0, include_working_copy: bool = True) -> CommitPage:
        """
        Return ``limit`` commits after skipping ``skip``, newest first.

        History is walked from HEAD and every local branch, children before
        parents. ``skip`` counts real commits only: the working-copy node is
        prepended to the first page (when the work tree is dirty) but never
        counted.
        """
        try:
            if self.repo.is_empty or self.repo.head_is_unborn:
                return CommitPage(commits=[], has_more=False)

            refs_by_commit: dict[str, list[str]] = {}
            for ref in self.fetch_all_refs():
                refs_by_commit.setdefault(ref.commit_id, []).append(ref.name)

            walker = self.repo.walk(
                self.repo.head.target,
                pygit2.enums.SortMode.TOPOLOGICAL | pygit2.enums.SortMode.TIME,
            )
            for branch_name in self.repo.branches.local:
                branch = self.repo.branches[branch_name]
                walker.push(branch.peel(pygit2.Commit).id)

            window = list(itertools.islice(walker, skip, skip + limit + 1))
            has_more = len(window) > limit
            commits = [self._to_commit(c, refs_by_commit) for c in window[:limit]]

            if include_working_copy and skip == 0:
                working_copy = self.working_copy_commit()
                if working_copy is not None:
                    commits.insert(0, working_copy)
        except (pygit2.GitError, KeyError) as e:
            raise FetchError(f"Failed to read history: {e}") from e

        return CommitPage(commits=commits, has_more=has_more)

    def _to_commit(self, c: pygit2.Commit, refs_by_commit: dict[str, list[str]]) -> Commit:
        oid = str(c.id)
        return Commit(
            id=oid,
            message=c.message,
            author=c.author.name or "Unknown",
            timestamp=c.commit_time,
            parents=[str(p) for p in c.parent_ids],
            refs=refs_by_commit.get(oid, []),
        )

    def working_copy_state(self) -> UncommittedState | None:
        """Classify uncommitted changes, or None for a clean work tree"""
        if self.repo.is_bare:
            return None

        staged = unstaged = False
        for flags in self.repo.status().values():
            if flags & _INDEX_FLAGS:
                staged = True
            if flags & _WORKTREE_FLAGS:
                unstaged = True

        if staged and unstaged:
            return UncommittedState.MIXED
        if staged:
            return UncommittedState.STAGED
        if unstaged:
            return UncommittedState.UNSTAGED
        return None

    def working_copy_commit(self) -> Commit | None:
        """Synthetic commit for uncommitted changes, parented on HEAD"""
        state = self.working_copy_state()
        if state is None:
            return None
        return Commit(
            id=WORKING_COPY_ID,
            message="Uncommitted changes",
            author="",
            timestamp=int(time.time()),
            parents=[str(self.repo.head.target)],
            refs=[],
            uncommitted_state=state,
        )

    def diff_commits(self, source_id: str, target_id: str) -> list[FileDiff]:
        """Per-file changes going from ``source_id`` to ``target_id``"""
        try:
            source = self.repo.revparse_single(source_id).peel(pygit2.Commit)
            target = self.repo.revparse_single(target_id).peel(pygit2.Commit)
            diff = self.repo.diff(source, target)
        except (pygit2.GitError, KeyError, ValueError) as e:
            raise FetchError(f"Failed to diff {source_id[:7]}..{target_id[:7]}: {e}") from e

        files: list[FileDiff] = []
        for patch in diff:
            status = {
                pygit2.enums.DeltaStatus.ADDED: "A",
                pygit2.enums.DeltaStatus.DELETED: "D",
                pygit2.enums.DeltaStatus.MODIFIED: "M",
                pygit2.enums.DeltaStatus.RENAMED: "R",
                pygit2.enums.DeltaStatus.COPIED: "C",
            }.get(patch.delta.status, "?")
            path = patch.delta.new_file.path or patch.delta.old_file.path
            files.append(FileDiff(path=path, status=status, patch=patch.text or ""))
        return files
