"""
Options driving a repository evaluation.

These are plain data: config.py builds them from files and environment,
services read them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Set, Any


class CIBranchVersionMode(Enum):
    """How CI versions are computed on a branch."""
    NONE = "None"
    ZERO_TIMED = "ZeroTimed"
    LAST_RELEASE_BASED = "LastReleaseBased"

    @classmethod
    def parse(cls, value: str) -> 'CIBranchVersionMode':
        """Case-insensitive lookup by value or name (raises ValueError)."""
        text = (value or "").replace('_', '').lower()
        for mode in cls:
            if text in (mode.value.lower(), mode.name.replace('_', '').lower()):
                return mode
        raise ValueError(f"Unknown CI version mode: '{value}'.")


class PossibleVersionsMode(Enum):
    """Which possible versions a release tag is validated against."""
    RESTRICTED = "Restricted"
    ALL_SUCCESSORS = "AllSuccessors"

    @classmethod
    def parse(cls, value: str) -> 'PossibleVersionsMode':
        text = (value or "").replace('_', '').lower()
        if text in ("", "default"):
            return cls.RESTRICTED
        for mode in cls:
            if text in (mode.value.lower(), mode.name.replace('_', '').lower()):
                return mode
        raise ValueError(f"Unknown possible versions mode: '{value}'.")

    @property
    def is_strict(self) -> bool:
        return self == PossibleVersionsMode.RESTRICTED


@dataclass
class BranchOptions:
    """
    Per-branch CI settings.

    Attributes:
        name: Branch name (e.g. "develop")
        version_name: Short name used in CI versions (defaults to name)
        ci_version_mode: CI mode on this branch
    """
    name: str
    version_name: Optional[str] = None
    ci_version_mode: CIBranchVersionMode = CIBranchVersionMode.NONE

    @property
    def effective_version_name(self) -> str:
        return self.version_name if self.version_name and self.version_name.strip() else self.name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BranchOptions':
        mode = data.get('ci_version_mode')
        return cls(
            name=data['name'],
            version_name=data.get('version_name'),
            ci_version_mode=CIBranchVersionMode.parse(mode) if mode else CIBranchVersionMode.NONE
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'version_name': self.version_name,
            'ci_version_mode': self.ci_version_mode.value,
        }


@dataclass
class RepositoryInfoOptions:
    """
    Options of a RepositoryInfo evaluation.

    Attributes:
        starting_commit_sha: Commit to evaluate instead of the head
        starting_branch_name: Branch whose tip is evaluated instead of the head
        starting_version_for_csemver: Version floor; older tags are ignored
        single_major: Only keep possible versions of this major
        only_patch: Only allow patch successors
        possible_versions_mode: Validation set for release tags
        ignore_dirty_working_folder: Evaluate even with uncommitted changes
        ignore_modified_files: Modified paths that do not make the tree dirty
        remote_name: Remote searched for branches
        branches: CI settings per branch
        overridden_tags: Tags applied as if they existed (sha or "head" -> tags)
        check_existing_versions: Report gaps and duplicates in existing versions
    """
    starting_commit_sha: Optional[str] = None
    starting_branch_name: Optional[str] = None
    starting_version_for_csemver: Optional[str] = None
    single_major: Optional[int] = None
    only_patch: bool = False
    possible_versions_mode: PossibleVersionsMode = PossibleVersionsMode.RESTRICTED
    ignore_dirty_working_folder: bool = False
    ignore_modified_files: Set[str] = field(default_factory=set)
    remote_name: str = "origin"
    branches: List[BranchOptions] = field(default_factory=list)
    overridden_tags: Dict[str, List[str]] = field(default_factory=dict)
    check_existing_versions: bool = True

    def find_branch(self, names) -> Optional[BranchOptions]:
        """First branch options matching one of names with an active CI mode."""
        names = set(names)
        for b in self.branches:
            if b.name in names:
                return b if b.ci_version_mode != CIBranchVersionMode.NONE else None
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'starting_commit_sha': self.starting_commit_sha,
            'starting_branch_name': self.starting_branch_name,
            'starting_version_for_csemver': self.starting_version_for_csemver,
            'single_major': self.single_major,
            'only_patch': self.only_patch,
            'possible_versions_mode': self.possible_versions_mode.value,
            'ignore_dirty_working_folder': self.ignore_dirty_working_folder,
            'ignore_modified_files': sorted(self.ignore_modified_files),
            'remote_name': self.remote_name,
            'branches': [b.to_dict() for b in self.branches],
            'overridden_tags': {k: list(v) for k, v in self.overridden_tags.items()},
            'check_existing_versions': self.check_existing_versions,
        }
