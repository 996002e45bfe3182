"""
Read-only view of a git repository.

CommitGraph is everything the version engine needs from git. GitRepository
implements it on top of GitClient; tests implement it in memory.
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Set
from pathlib import Path
import logging

from .git_client import GitClient, GitTag, GitCommit, GitBranch, GitStatus

logger = logging.getLogger(__name__)


class CommitGraph(ABC):
    """Commits, tags and branches of one repository snapshot."""

    @abstractmethod
    def tags(self) -> List[GitTag]:
        """Tags resolved to commits."""

    @abstractmethod
    def commit(self, sha: str) -> Optional[GitCommit]:
        """Commit by full sha, None if unknown."""

    @abstractmethod
    def lookup(self, rev: str) -> Optional[str]:
        """Full sha of a commit designated by a (possibly abbreviated) sha."""

    @abstractmethod
    def head(self) -> Optional[str]:
        """Sha of the head commit, None for an uninitialized repository."""

    @abstractmethod
    def current_branch(self) -> Optional[str]:
        """Name of the checked out branch, None when detached."""

    @abstractmethod
    def branches(self) -> List[GitBranch]:
        """Local and remote-tracking branches."""

    @abstractmethod
    def status(self) -> GitStatus:
        """Working folder status."""

    def find_branch(self, name: str) -> Optional[GitBranch]:
        """Branch by exact name ('develop' or 'origin/develop')."""
        for b in self.branches():
            if b.name == name:
                return b
        return None


class GitRepository(CommitGraph):
    """
    CommitGraph backed by the git executable.

    Commits are read once, in bulk, on first access.

    Example:
        repo = GitRepository.open("/path/to/repo")
        if repo is not None:
            print(repo.head())
    """

    def __init__(self, root: str, client: Optional[GitClient] = None):
        self.root = root
        self.git = client or GitClient()
        self._commits: Optional[Dict[str, GitCommit]] = None
        self._missing: Set[str] = set()
        self._tags: Optional[List[GitTag]] = None
        self._branches: Optional[List[GitBranch]] = None
        self._head: Optional[str] = None
        self._head_read = False

    @classmethod
    def open(cls, path: str, client: Optional[GitClient] = None) -> Optional['GitRepository']:
        """Open the repository containing path, None if path is not in a git work tree."""
        client = client or GitClient()
        if not Path(path).is_dir():
            return None
        root = client.work_tree_root(path)
        if root is None:
            return None
        return cls(root, client)

    def _all_commits(self) -> Dict[str, GitCommit]:
        if self._commits is None:
            revs = ["--all"]
            head = self.head()
            if head:
                revs.append(head)
            self._commits = self.git.commits(self.root, revs)
            logger.debug(f"Read {len(self._commits)} commits from {self.root}")
        return self._commits

    def tags(self) -> List[GitTag]:
        if self._tags is None:
            self._tags = self.git.tags(self.root)
        return self._tags

    def commit(self, sha: str) -> Optional[GitCommit]:
        commits = self._all_commits()
        c = commits.get(sha)
        if c is None and sha and sha not in self._missing:
            # Not reachable from any ref: read its own history.
            extra = self.git.commits(self.root, [sha])
            commits.update(extra)
            c = commits.get(sha)
            if c is None:
                self._missing.add(sha)
        return c

    def lookup(self, rev: str) -> Optional[str]:
        if not rev:
            return None
        sha = self.git.resolve_commit(self.root, rev)
        if sha and self.commit(sha) is not None:
            return sha
        return None

    def head(self) -> Optional[str]:
        if not self._head_read:
            self._head = self.git.head_sha(self.root)
            self._head_read = True
        return self._head

    def current_branch(self) -> Optional[str]:
        return self.git.current_branch(self.root)

    def branches(self) -> List[GitBranch]:
        if self._branches is None:
            self._branches = self.git.branches(self.root)
        return self._branches

    def status(self) -> GitStatus:
        return self.git.status(self.root)
