"""Shared fixtures: an in-memory repository for the version engine."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest

from gitcsemver.infra import CommitGraph, GitBranch, GitCommit, GitStatus, GitTag


class FakeRepository(CommitGraph):
    """
    CommitGraph built commit by commit.

    Commits get sequential 40 hex digits shas and, unless given, a tree of
    their own. The last added commit becomes the head.
    """

    def __init__(self, root: str = "/fake/repo"):
        self.root = root
        self._commits: Dict[str, GitCommit] = {}
        self._tags: List[GitTag] = []
        self._branches: List[GitBranch] = []
        self._head: Optional[str] = None
        self._current_branch: Optional[str] = "master"
        self.status_result = GitStatus()
        self._counter = 0

    def add_commit(self, *parents: str, tree: Optional[str] = None, tags=(), date: Optional[datetime] = None) -> str:
        self._counter += 1
        sha = f"{self._counter:040x}"
        if date is None:
            date = datetime(2020, 1, 1, tzinfo=timezone.utc) + timedelta(hours=self._counter)
        self._commits[sha] = GitCommit(sha, tree or f"tree-{self._counter}", tuple(parents), date)
        for name in tags:
            self._tags.append(GitTag(name, sha))
        self._head = sha
        return sha

    def chain(self, parent: Optional[str], count: int) -> List[str]:
        """Add count commits on top of parent, returning their shas."""
        shas = []
        for _ in range(count):
            parent = self.add_commit(*([parent] if parent else []))
            shas.append(parent)
        return shas

    def tag(self, sha: str, *names: str) -> None:
        for name in names:
            self._tags.append(GitTag(name, sha))

    def add_branch(self, name: str, tip: str, is_remote: bool = False) -> None:
        self._branches.append(GitBranch(name, tip, is_remote))

    def checkout(self, sha: str, branch: Optional[str] = None) -> None:
        self._head = sha
        self._current_branch = branch

    # CommitGraph

    def tags(self) -> List[GitTag]:
        return list(self._tags)

    def commit(self, sha: str) -> Optional[GitCommit]:
        return self._commits.get(sha)

    def lookup(self, rev: str) -> Optional[str]:
        if not rev:
            return None
        matches = [sha for sha in self._commits if sha.startswith(rev.lower())]
        return matches[0] if len(matches) == 1 else None

    def head(self) -> Optional[str]:
        return self._head

    def current_branch(self) -> Optional[str]:
        return self._current_branch

    def branches(self) -> List[GitBranch]:
        return list(self._branches)

    def status(self) -> GitStatus:
        return self.status_result


@pytest.fixture
def repo():
    """Empty in-memory repository."""
    return FakeRepository()
