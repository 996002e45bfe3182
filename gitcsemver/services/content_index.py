"""
Content equivalence of tagged commits.

Two commits with the same tree sha have the same content. Every tagged
commit belongs to exactly one ContentGroup (possibly alone in it), and any
commit whose tree matches a group inherits the group's best version.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..domain import TagCommit, Version


@dataclass(frozen=True)
class ContentGroup:
    """
    Tagged commits sharing one tree.

    Attributes:
        content_sha: Tree sha shared by the members
        members: Tag commits, in ascending version order
        best: Member with the greatest version
    """
    content_sha: str
    members: Tuple[TagCommit, ...]
    best: TagCommit

    def best_except(self, excluded: Optional[Version]) -> Optional[TagCommit]:
        """Best member whose version is not excluded (None if every member is)."""
        if excluded is None or self.best.version != excluded:
            return self.best
        result = None
        for member in self.members:
            if member.version == excluded:
                continue
            if result is None or member.version > result.version:
                result = member
        return result


class ContentEquivalenceIndex:
    """
    Group table of tagged commits keyed by tree sha.

    The table is built once from the final tag commits and never changes
    afterwards.

    Example:
        index = ContentEquivalenceIndex(registry.repository_versions.tag_commits)
        group = index.group_for_content(commit.tree)
        best = group.best if group else None
    """

    def __init__(self, tag_commits: Iterable[TagCommit]):
        members: Dict[str, List[TagCommit]] = {}
        for tc in tag_commits:
            members.setdefault(tc.content_sha, []).append(tc)

        self._groups: Dict[str, ContentGroup] = {}
        for content_sha, group_members in members.items():
            best = group_members[0]
            for tc in group_members[1:]:
                if tc.version > best.version:
                    best = tc
            self._groups[content_sha] = ContentGroup(content_sha, tuple(group_members), best)

    def group_for_content(self, content_sha: str) -> Optional[ContentGroup]:
        """Group of the tree sha, None when no tagged commit has this content."""
        return self._groups.get(content_sha)

    def best_for_content(self, content_sha: str, excluded: Optional[Version] = None) -> Optional[TagCommit]:
        group = self._groups.get(content_sha)
        return group.best_except(excluded) if group else None

    @property
    def groups(self) -> List[ContentGroup]:
        return list(self._groups.values())

    def __len__(self) -> int:
        return len(self._groups)
