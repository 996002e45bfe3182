"""
Service layer for gitcsemver.

Contains the version engine that orchestrates domain objects and infrastructure:
- TagRegistry: Tag parsing, resolution and existing versions checks
- ContentEquivalenceIndex: Tagged commits grouped by content
- CommitResolver: Best tags and possible versions of a commit
- CIBuildComposer: CI versions of untagged commits
- RepositoryInfo: Full evaluation of one commit

Services are the primary API for commands to use.
"""

from .tag_registry import TagRegistry, TagParsingMode, RepositoryVersions
from .content_index import ContentEquivalenceIndex, ContentGroup
from .commit_resolver import CommitResolver, CommitInfo, BasicCommitInfo
from .ci_build import CIBuildComposer, CIReleaseInfo
from .repository_info import RepositoryInfo, SimpleRepositoryInfo

__all__ = [
    'TagRegistry',
    'TagParsingMode',
    'RepositoryVersions',
    'ContentEquivalenceIndex',
    'ContentGroup',
    'CommitResolver',
    'CommitInfo',
    'BasicCommitInfo',
    'CIBuildComposer',
    'CIReleaseInfo',
    'RepositoryInfo',
    'SimpleRepositoryInfo',
]
