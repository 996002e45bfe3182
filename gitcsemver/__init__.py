"""
gitcsemver - CSemVer versions computed from git tags.

gitcsemver reads the release tags of a repository, checks that they form a
compact CSemVer history, and computes the version of any commit: its valid
release tag, or a CI build version on configured branches.

Quick Start:
    from gitcsemver import SimpleRepositoryInfo

    info = SimpleRepositoryInfo.load(".")
    if info.is_valid:
        print(info.safe_sem_version, info.safe_nuget_version)

    from gitcsemver import Version

    v = Version.parse("v1.2.3-rc.5")
    print(v.ordered, [str(s) for s in v.get_direct_successors()][:3])

Domain Objects:
    Version - CSemVer version with its ordered integer
    TagCommit - A commit and the version its tags define
    RepositoryInfoOptions - Settings of an evaluation

Services:
    RepositoryInfo - Full evaluation of one commit
    SimpleRepositoryInfo - Flat view of a RepositoryInfo
"""

__version__ = "0.4.0"

from .domain import (
    Version,
    VersionKind,
    VersionFormat,
    CIBuildDescriptor,
    TagCommit,
    RepositoryInfoOptions,
    BranchOptions,
    CIBranchVersionMode,
    PossibleVersionsMode,
    format_version,
)
from .services import (
    TagRegistry,
    CommitResolver,
    CIBuildComposer,
    RepositoryInfo,
    SimpleRepositoryInfo,
)

__all__ = [
    '__version__',
    'Version',
    'VersionKind',
    'VersionFormat',
    'CIBuildDescriptor',
    'TagCommit',
    'RepositoryInfoOptions',
    'BranchOptions',
    'CIBranchVersionMode',
    'PossibleVersionsMode',
    'format_version',
    'TagRegistry',
    'CommitResolver',
    'CIBuildComposer',
    'RepositoryInfo',
    'SimpleRepositoryInfo',
]
