"""
Commit resolver for gitcsemver.

Finds, for any commit, the best release tag on or below it and the versions
that may be released on it.

The walk over ancestors is an iterative post-order traversal: every parent
is resolved before its child, and results are cached per (commit, excluded
version) so that each commit is computed once per view. Parents are always
considered in their git order; when two parents are equally good the first
one wins.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging

from ..domain import TagCommit, Version, get_direct_successors
from ..infra import CommitGraph, GitCommit
from .tag_registry import TagRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BasicCommitInfo:
    """
    Best tags found on and below a commit.

    Attributes:
        this_commit: Tag commit of the commit itself (ignoring exclusion)
        best_commit: Best tag on the commit or on a commit with its content
        best_commit_below: Best tag among the ancestors when it is not
            smaller than best_commit
        below_depth: Distance to the tag that best_commit_below comes from
            (0 when best_commit wins)
    """
    this_commit: Optional[TagCommit]
    best_commit: Optional[TagCommit]
    best_commit_below: Optional[TagCommit]
    below_depth: int

    @classmethod
    def create(
        cls,
        this_commit: Optional[TagCommit],
        best: Optional[TagCommit],
        parent: Optional['BasicCommitInfo']
    ) -> 'BasicCommitInfo':
        """
        Combine the commit's own candidate with its best parent.

        Args:
            this_commit: Tag commit of the commit
            best: Best candidate on the commit or its content group
            parent: Best parent info (at least one of best or parent is set)
        """
        if best is None and parent is None:
            raise ValueError("best and parent can not both be None.")
        if best is None:
            return cls(this_commit, None, parent.max_commit, parent.below_depth + 1)
        if parent is None:
            return cls(this_commit, best, None, 0)
        max_below = parent.max_commit
        if best.version > max_below.version:
            return cls(this_commit, best, None, 0)
        return cls(this_commit, best, max_below, parent.below_depth + 1)

    @property
    def max_commit(self) -> TagCommit:
        """The greater of best_commit and best_commit_below."""
        if self.best_commit_below is None:
            return self.best_commit
        if self.best_commit is not None and self.best_commit.version > self.best_commit_below.version:
            return self.best_commit
        return self.best_commit_below

    @property
    def is_best_commit_redirected(self) -> bool:
        """True when best_commit comes from another commit with the same content."""
        return self.best_commit is not None and self.this_commit != self.best_commit

    def is_better_than(self, other: 'BasicCommitInfo') -> bool:
        """Higher max version wins; on a tie the deeper path wins."""
        mine, theirs = self.max_commit.version, other.max_commit.version
        if mine == theirs:
            return self.below_depth > other.below_depth
        return mine > theirs

    def to_dict(self):
        return {
            'this_commit': self.this_commit.to_dict() if self.this_commit else None,
            'best_commit': self.best_commit.to_dict() if self.best_commit else None,
            'best_commit_below': self.best_commit_below.to_dict() if self.best_commit_below else None,
            'below_depth': self.below_depth,
            'max_commit': self.max_commit.to_dict(),
        }


@dataclass(frozen=True)
class CommitInfo:
    """
    Versions related to one commit.

    Attributes:
        commit_sha: The commit
        basic_info: Best tags on and below it (None when there is none)
        possible_versions: Versions allowed on it, below the nearest higher
            existing version
        next_possible_versions: Versions allowed on a new commit on top of it
        possible_versions_all: Versions allowed on it without the upper bound
    """
    commit_sha: str
    basic_info: Optional[BasicCommitInfo]
    possible_versions: List[Version] = field(default_factory=list)
    next_possible_versions: List[Version] = field(default_factory=list)
    possible_versions_all: List[Version] = field(default_factory=list)


class _FilteredView:
    """BasicCommitInfo of commits, ignoring one excluded version."""

    def __init__(self, resolver: 'CommitResolver', excluded: Optional[Version]):
        self._resolver = resolver
        self._excluded = excluded
        self._cache: Dict[str, Optional[BasicCommitInfo]] = {}

    def get_info(self, sha: str) -> Optional[BasicCommitInfo]:
        if sha in self._cache:
            return self._cache[sha]
        graph = self._resolver.graph
        stack: List[Tuple[str, bool]] = [(sha, False)]
        while stack:
            current, parents_done = stack.pop()
            if current in self._cache:
                continue
            commit = graph.commit(current)
            if commit is None:
                logger.debug(f"Commit {current} is not available (shallow history?)")
                self._cache[current] = None
                continue
            if parents_done:
                self._cache[current] = self._compute(commit)
            else:
                stack.append((current, True))
                for p in reversed(commit.parents):
                    if p not in self._cache:
                        stack.append((p, False))
        return self._cache[sha]

    def _compute(self, commit: GitCommit) -> Optional[BasicCommitInfo]:
        registry = self._resolver.registry
        this_commit = registry.get_tag_commit(commit.sha)
        best = registry.content_index.best_for_content(commit.tree, self._excluded)

        parent: Optional[BasicCommitInfo] = None
        for p in commit.parents:
            info = self._cache.get(p)
            if parent is None or (info is not None and info.is_better_than(parent)):
                parent = info

        if best is None and parent is None:
            return None
        return BasicCommitInfo.create(this_commit, best, parent)


class CommitResolver:
    """
    Resolve commits against a TagRegistry.

    A resolver belongs to one evaluation: its caches depend on the registry
    and on the filters it was created with.

    Example:
        resolver = CommitResolver(graph, registry)
        info = resolver.get_commit_info(graph.head())
        print(info.possible_versions)
    """

    def __init__(
        self,
        graph: CommitGraph,
        registry: TagRegistry,
        single_major: Optional[int] = None,
        only_patch: bool = False
    ):
        """
        Initialize CommitResolver.

        Args:
            graph: Repository to walk
            registry: Error free tag registry of the repository
            single_major: Only keep possible versions of this major
            only_patch: Only allow patch successors
        """
        self.graph = graph
        self.registry = registry
        self.single_major = single_major
        self.only_patch = only_patch
        self._views: Dict[Optional[Version], _FilteredView] = {}

    def _view(self, excluded: Optional[Version]) -> _FilteredView:
        view = self._views.get(excluded)
        if view is None:
            view = self._views[excluded] = _FilteredView(self, excluded)
        return view

    def get_basic_info(self, sha: str, excluded: Optional[Version] = None) -> Optional[BasicCommitInfo]:
        """Best tags on and below a commit, ignoring the excluded version."""
        return self._view(excluded).get_info(sha)

    def get_commit_info(self, sha: str) -> CommitInfo:
        """
        Compute the versions related to a commit.

        Args:
            sha: Full sha of a commit of the graph

        Returns:
            CommitInfo
        """
        basic = self.get_basic_info(sha)
        floor = self.registry.floor
        existing = self.registry.repository_versions

        if floor is not None and len(existing) == 0:
            only = [floor]
            return CommitInfo(sha, basic, list(only), list(only), list(only))

        base = basic.max_commit.version if basic else None
        next_possible = self.possible_versions(base, None)
        this_commit = basic.this_commit if basic else None

        if floor is not None and len(existing) == 1 and this_commit is not None:
            possible = [floor]
            possible_all = [floor]
        elif this_commit is not None:
            excluded = this_commit.version
            without_this = self.get_basic_info(sha, excluded)
            excluded_base = without_this.max_commit.version if without_this else None
            possible = self.possible_versions(excluded_base, excluded)
            possible_all = self.possible_versions(excluded_base, excluded, restricted=False)
        else:
            possible = next_possible
            possible_all = self.possible_versions(base, None, restricted=False)

        return CommitInfo(sha, basic, possible, next_possible, possible_all)

    def possible_versions(
        self,
        base: Optional[Version],
        excluded: Optional[Version],
        restricted: bool = True
    ) -> List[Version]:
        """
        Successors of base that may be released.

        Successors must be above the floor and, when restricted, below the
        first existing version greater than base (the excluded version being
        ignored).

        Args:
            base: Version the successors follow (None for the first versions)
            excluded: Existing version to ignore
            restricted: Apply the nearest higher version bound
        """
        next_released: Optional[Version] = None
        if restricted:
            for v in self.registry.repository_versions.versions:
                if excluded is not None and v == excluded:
                    continue
                if base is None or v > base:
                    next_released = v
                    break

        floor = self.registry.floor
        result = []
        for v in get_direct_successors(self.only_patch, base):
            if floor is not None and not v > floor:
                continue
            if next_released is not None and not v < next_released:
                continue
            if self.single_major is not None and v.major != self.single_major:
                continue
            result.append(v)
        return result
