"""
Infrastructure layer for gitcsemver.

Contains abstractions for external systems:
- GitClient: Git command execution
- CommitGraph: read-only repository contract used by the services
- GitRepository: CommitGraph backed by GitClient

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitStatus, GitTag, GitCommit, GitBranch
from .repository import CommitGraph, GitRepository

__all__ = [
    'GitClient',
    'GitStatus',
    'GitTag',
    'GitCommit',
    'GitBranch',
    'CommitGraph',
    'GitRepository',
]
