"""
A commit carrying a release tag.
"""

from dataclasses import dataclass
from typing import Dict, Any

from .version import Version


@dataclass(frozen=True)
class TagCommit:
    """
    Commit whose tags resolved to exactly one valid version.

    Attributes:
        commit_sha: Sha of the tagged commit
        content_sha: Sha of the commit's tree
        version: The version its tags define
    """
    commit_sha: str
    content_sha: str
    version: Version

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'commit_sha': self.commit_sha,
            'content_sha': self.content_sha,
            'version': str(self.version),
            'tag': self.version.original_text,
        }

    def __str__(self) -> str:
        return f"{self.version} ({self.commit_sha})"
