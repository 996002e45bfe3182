"""
Domain layer for gitcsemver.

Contains pure domain objects with no I/O or side effects:
- Version: CSemVer value, its ordered integer and successor relation
- formatting: SemVer, NuGet V2, file version and CI build renderings
- TagCommit: a commit and the version its tags define
- options: settings of a repository evaluation

These objects are immutable where possible and provide
serialization methods for JSON output.
"""

from .version import (
    Version,
    VersionKind,
    STANDARD_NAMES,
    FIRST_POSSIBLE_VERSIONS,
    VERY_FIRST_VERSION,
    get_direct_successors,
)
from .formatting import (
    VersionFormat,
    CIBuildDescriptor,
    InformationalVersion,
    format_version,
    to_file_version,
    build_informational_version,
)
from .tag_commit import TagCommit
from .options import (
    RepositoryInfoOptions,
    BranchOptions,
    CIBranchVersionMode,
    PossibleVersionsMode,
)

__all__ = [
    'Version',
    'VersionKind',
    'STANDARD_NAMES',
    'FIRST_POSSIBLE_VERSIONS',
    'VERY_FIRST_VERSION',
    'get_direct_successors',
    'VersionFormat',
    'CIBuildDescriptor',
    'InformationalVersion',
    'format_version',
    'to_file_version',
    'build_informational_version',
    'TagCommit',
    'RepositoryInfoOptions',
    'BranchOptions',
    'CIBranchVersionMode',
    'PossibleVersionsMode',
]
