"""
CI build versions for gitcsemver.

A commit without a valid release tag on a CI branch gets a CI version that
sorts strictly between its base release and any successor of that release.

Modes:
- ZeroTimed: 0.0.0--ci-<branch>.<timestamp>, with the base release as build
  metadata when there is one
- LastReleaseBased: the base release followed by the branch name and the
  number of commits since the base
"""

from dataclasses import dataclass
from typing import List, Optional, Dict, Any
import logging

from ..domain import (
    Version,
    VersionFormat,
    CIBuildDescriptor,
    CIBranchVersionMode,
    VERY_FIRST_VERSION,
    format_version,
)
from ..domain.formatting import (
    MAX_NUGET_BRANCH_NAME_LENGTH,
    MAX_NUGET_V2_BUILD_INDEX,
    ZERO_TIMED_EPOCH,
    create_semver_zero_timed,
    create_nuget_v2_zero_timed,
)
from ..infra import GitCommit
from .commit_resolver import BasicCommitInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CIReleaseInfo:
    """
    CI version of a commit.

    Attributes:
        base_tag: Base release (VERY_FIRST_VERSION when there is none)
        depth: Commits since base_tag (0 for ZeroTimed builds)
        build_version: SemVer rendering
        build_version_nuget: NuGet V2 rendering
        is_zero_timed: True for a ZeroTimed build
    """
    base_tag: Version
    depth: int
    build_version: str
    build_version_nuget: str
    is_zero_timed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'base_tag': str(self.base_tag),
            'depth': self.depth,
            'build_version': self.build_version,
            'build_version_nuget': self.build_version_nuget,
            'is_zero_timed': self.is_zero_timed,
        }


class CIBuildComposer:
    """
    Compose CI versions for one branch.

    Example:
        composer = CIBuildComposer(CIBranchVersionMode.LAST_RELEASE_BASED, "develop")
        ci = composer.compose(commit, basic_info, errors)
    """

    def __init__(self, mode: CIBranchVersionMode, version_name: str):
        """
        Initialize CIBuildComposer.

        Args:
            mode: ZERO_TIMED or LAST_RELEASE_BASED
            version_name: Branch name used in the versions
        """
        if mode == CIBranchVersionMode.NONE:
            raise ValueError("A CI build needs a CI version mode.")
        if not version_name or not version_name.strip():
            raise ValueError("version_name must not be empty.")
        self.mode = mode
        self.version_name = version_name

    def compose(
        self,
        commit: GitCommit,
        basic: Optional[BasicCommitInfo],
        errors: List[str]
    ) -> Optional[CIReleaseInfo]:
        """
        Compute the CI version of an untagged commit.

        Args:
            commit: The commit
            basic: Best tags on and below it
            errors: Error lines collector

        Returns:
            CIReleaseInfo, None (with error lines) when the commit is dated
            before 2015-01-01 for a ZeroTimed build, or when the branch name
            or the depth do not fit the NuGet V2 format
        """
        base = basic.max_commit.version if basic else None
        if self.mode == CIBranchVersionMode.ZERO_TIMED or base is None:
            if base is None and self.mode == CIBranchVersionMode.LAST_RELEASE_BASED:
                logger.debug("No release below the commit: falling back to a ZeroTimed CI build")
            return self._zero_timed(commit, base, errors)
        return self._last_release_based(base, basic.below_depth, errors)

    def _zero_timed(self, commit: GitCommit, base: Optional[Version], errors: List[str]) -> Optional[CIReleaseInfo]:
        if commit.committer_date < ZERO_TIMED_EPOCH:
            errors.append(
                f"Commit '{commit.sha}' is dated {commit.committer_date:%Y-%m-%d}: "
                f"ZeroTimed CI versions need a commit date from {ZERO_TIMED_EPOCH:%Y-%m-%d} on."
            )
            return None
        semver = create_semver_zero_timed(self.version_name, commit.committer_date)
        nuget = create_nuget_v2_zero_timed(self.version_name, commit.committer_date)
        if base is not None:
            metadata = "+v" + format_version(base, VersionFormat.SEMVER)
            semver += metadata
            nuget += metadata
        return CIReleaseInfo(base or VERY_FIRST_VERSION, 0, semver, nuget, is_zero_timed=True)

    def _last_release_based(self, base: Version, depth: int, errors: List[str]) -> Optional[CIReleaseInfo]:
        name = self.version_name
        if len(name) > MAX_NUGET_BRANCH_NAME_LENGTH:
            errors.append(
                "Due to ShortForm (NuGet V2 compliance) limitation, the branch name must not be longer "
                f"than {MAX_NUGET_BRANCH_NAME_LENGTH} characters. "
            )
            errors.append(
                "Adds a version_name to the branch options with a shorter name: "
                f"{{name: '{name}', version_name: '{name[:MAX_NUGET_BRANCH_NAME_LENGTH]}'}}."
            )
            return None
        # A commit whose content is the base release itself is one commit above it.
        depth = max(depth, 1)
        if depth > MAX_NUGET_V2_BUILD_INDEX:
            errors.append(
                f"The commit is {depth} commits above '{base}': a LastReleaseBased CI version "
                f"can not be more than {MAX_NUGET_V2_BUILD_INDEX} commits above its base release. "
                "Release a version or use a ZeroTimed branch."
            )
            return None
        ci = CIBuildDescriptor(name, depth)
        return CIReleaseInfo(
            base,
            depth,
            format_version(base, VersionFormat.SEMVER, ci),
            format_version(base, VersionFormat.NUGET_V2, ci),
        )
