"""
Text renderings of a Version.

Formats:
- Normalized: v1.2.3-rc.5 (the default str())
- SemVer / SemVerWithMarker: 1.2.3-rc.5 (marker only with the latter)
- NuGetV2: 1.2.3-r05, short enough for the NuGet V2 20 characters limit
- FileVersion: the ordered version split into four 16-bit numbers

CI builds append a CIBuildDescriptor suffix that sorts strictly between the
base version and its first successor.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from .version import Version, STANDARD_NAMES

MAX_BUILD_INDEX = 999999
# Largest index the 4 digits NuGet V2 label holds.
MAX_NUGET_V2_BUILD_INDEX = 9999
MAX_NUGET_BRANCH_NAME_LENGTH = 8

ZERO_FILE_VERSION = "0.0.0.0"
INVALID_COMMIT_SHA = "0" * 40
INVALID_INFORMATIONAL_VERSION = (
    f"0.0.0-0 (0.0.0-0) - SHA1: {INVALID_COMMIT_SHA} - CommitDate: 0001-01-01 00:00:00Z"
)

# Origin of the compact NuGet V2 timestamps.
ZERO_TIMED_EPOCH = datetime(2015, 1, 1, tzinfo=timezone.utc)
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

_INFORMATIONAL_REGEX = re.compile(r"^(.*?) \((.*?)\) - SHA1: (.*?) - CommitDate: (.*?)$")
_SHA_REGEX = re.compile(r"^[0-9a-fA-F]{40}$")


class VersionFormat(Enum):
    """Available text formats."""
    NORMALIZED = "normalized"
    SEMVER = "semver"
    SEMVER_WITH_MARKER = "semver_with_marker"
    NUGET_V2 = "nuget_v2"
    FILE_VERSION = "file_version"


@dataclass(frozen=True)
class CIBuildDescriptor:
    """
    Branch name and build index of a CI build.

    Attributes:
        branch_name: Version name of the branch (e.g. "develop")
        build_index: Number of commits since the base version
    """

    branch_name: str
    build_index: int

    def __post_init__(self):
        if self.build_index < 0 or self.build_index > MAX_BUILD_INDEX:
            raise ValueError(f"build_index must be between 0 and {MAX_BUILD_INDEX}.")

    @property
    def is_applicable(self) -> bool:
        return self.build_index > 0 and bool(self.branch_name and self.branch_name.strip())

    @property
    def is_valid_for_nuget_v2(self) -> bool:
        return (self.is_applicable and len(self.branch_name) <= MAX_NUGET_BRANCH_NAME_LENGTH
                and self.build_index <= MAX_NUGET_V2_BUILD_INDEX)

    def to_semver(self) -> str:
        return f"ci-{self.branch_name}.{self.build_index}" if self.is_applicable else ""

    def to_nuget_v2(self) -> str:
        return f"{self.branch_name}-{self.build_index:04d}" if self.is_applicable else ""

    def __str__(self) -> str:
        return self.to_semver()


def format_version(
    version: Version,
    fmt: VersionFormat = VersionFormat.NORMALIZED,
    ci: Optional[CIBuildDescriptor] = None,
    use_name_from_tag: bool = False
) -> str:
    """
    Render a version.

    Args:
        version: Version to render (an invalid one renders its parse error)
        fmt: Output format
        ci: Optional CI build suffix (not for NORMALIZED)
        use_name_from_tag: Use the prerelease name as written in the tag

    Returns:
        Rendered text
    """
    if not version.is_valid:
        return version.parse_error or ""
    if ci is not None and not ci.is_applicable:
        raise ValueError("ci must be applicable.")
    if fmt == VersionFormat.FILE_VERSION:
        return to_file_version(version, ci is not None)
    if fmt == VersionFormat.NUGET_V2:
        if use_name_from_tag:
            raise ValueError("NuGetV2 format can not use the prerelease name from the tag.")
        return _to_nuget_v2(version, ci)
    if fmt in (VersionFormat.SEMVER, VersionFormat.SEMVER_WITH_MARKER):
        marker = version.marker if fmt == VersionFormat.SEMVER_WITH_MARKER else ""
        return _to_semver(version, ci, marker, use_name_from_tag)
    if ci is not None:
        raise ValueError("Normalized format does not support CI builds.")
    name = version.name_from_tag if use_name_from_tag else None
    core = f"v{version.major}.{version.minor}.{version.patch}"
    return f"{core}{version.pre_release_part(name)}{version.marker}"


def _to_semver(version: Version, ci: Optional[CIBuildDescriptor], marker: str, use_name_from_tag: bool) -> str:
    name = version.name_from_tag if use_name_from_tag else version.pre_release_name
    core = f"{version.major}.{version.minor}.{version.patch}"
    if ci is None:
        return f"{core}{version.pre_release_part(name)}{marker}"
    if version.is_prerelease:
        return f"{core}-{name}.{version.number}.{version.fix}.{ci.to_semver()}{marker}"
    return f"{version.major}.{version.minor}.{version.patch + 1}--{ci.to_semver()}{marker}"


def _to_nuget_v2(version: Version, ci: Optional[CIBuildDescriptor]) -> str:
    if ci is not None and not ci.is_valid_for_nuget_v2:
        raise ValueError("ci must be valid for NuGetV2 format.")
    marker = version.marker
    core = f"{version.major}.{version.minor}.{version.patch}"
    if not version.is_prerelease:
        if ci is not None:
            return f"{version.major}.{version.minor}.{version.patch + 1}--{ci.to_nuget_v2()}{marker}"
        return f"{core}{marker}"
    initial = STANDARD_NAMES[version.name_idx][0]
    if ci is not None:
        return f"{core}-{initial}{version.number:02d}-{version.fix:02d}-{ci.to_nuget_v2()}{marker}"
    if version.fix > 0:
        return f"{core}-{initial}{version.number:02d}-{version.fix:02d}{marker}"
    if version.number > 0:
        return f"{core}-{initial}{version.number:02d}{marker}"
    return f"{core}-{initial}{marker}"


def to_file_version(version: Version, is_ci_build: bool = False) -> str:
    """
    Four 16-bit numbers 'Major.Minor.Build.Revision' from the ordered version.

    The lowest bit is 1 for a CI build so that a CI build of a version is
    greater than the version itself.
    """
    if not version.is_valid:
        return ZERO_FILE_VERSION
    n = version.ordered << 1
    if is_ci_build:
        n |= 1
    return f"{(n >> 48) & 0xFFFF}.{(n >> 32) & 0xFFFF}.{(n >> 16) & 0xFFFF}.{n & 0xFFFF}"


def _to_base36(value: int, width: int) -> str:
    digits = []
    while value:
        value, r = divmod(value, 36)
        digits.append(_BASE36[r])
    return "".join(reversed(digits)).rjust(width, "0")


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        raise ValueError("A timezone aware datetime is required.")
    return moment.astimezone(timezone.utc)


def create_semver_zero_timed(branch_name: str, commit_time: datetime) -> str:
    """'0.0.0--ci-{branch}.{yyyy-MM-ddTHH-mm-ss-ff}' from the UTC commit time."""
    t = _as_utc(commit_time)
    hundredths = t.microsecond // 10000
    return f"0.0.0--ci-{branch_name}.{t:%Y-%m-%dT%H-%M-%S}-{hundredths:02d}"


def create_nuget_v2_zero_timed(branch_name: str, commit_time: datetime) -> str:
    """'0.0.0--{branch}-{t}' with t the seconds since 2015-01-01 in base 36."""
    seconds = int((_as_utc(commit_time) - ZERO_TIMED_EPOCH).total_seconds())
    if seconds < 0:
        raise ValueError("Commit time must not be before 2015-01-01.")
    return f"0.0.0--{branch_name}-{_to_base36(seconds, 7)}"


def build_informational_version(sem_version: str, nuget_version: str, commit_sha: str, commit_date: datetime) -> str:
    """
    Build the informational version line.

    Format: '<semver> (<nuget>) - SHA1: <sha> - CommitDate: <yyyy-MM-dd HH:mm:ssZ>'
    """
    if not sem_version or not sem_version.strip():
        raise ValueError("sem_version must not be empty.")
    if not nuget_version or not nuget_version.strip():
        raise ValueError("nuget_version must not be empty.")
    if commit_sha is None or not _SHA_REGEX.match(commit_sha):
        raise ValueError("commit_sha must be a 40 hex digits string.")
    t = _as_utc(commit_date)
    return f"{sem_version} ({nuget_version}) - SHA1: {commit_sha} - CommitDate: {t:%Y-%m-%d %H:%M:%S}Z"


@dataclass(frozen=True)
class InformationalVersion:
    """Parsed informational version line."""
    sem_version: str
    nuget_version: str
    commit_sha: str
    commit_date: Optional[datetime]

    @classmethod
    def parse(cls, text: str) -> Optional['InformationalVersion']:
        """Parse an informational version line, None if it does not match."""
        m = _INFORMATIONAL_REGEX.match(text or "")
        if not m:
            return None
        try:
            date = datetime.strptime(m.group(4), "%Y-%m-%d %H:%M:%SZ").replace(tzinfo=timezone.utc)
        except ValueError:
            date = None
        return cls(m.group(1), m.group(2), m.group(3), date)
