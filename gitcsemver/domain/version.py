"""
Version domain object for gitcsemver.

A Version is an immutable CSemVer value:

    Major.Minor.Patch[-name[.Number[.Fix]]][+invalid]

Every valid version maps onto a dense integer (the "ordered version") and
back. Equality and ordering only look at that integer, so the raw text a tag
was written with never changes how versions compare.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Optional, List, Tuple, Iterator, Dict, Any

# Standard prerelease names, in ascending order.
STANDARD_NAMES: Tuple[str, ...] = (
    "alpha", "beta", "delta", "epsilon", "gamma", "kappa", "prerelease", "rc"
)

MAX_MAJOR = 99999
MAX_MINOR = 49999
MAX_PATCH = 9999
MAX_NUMBER = 99
MAX_FIX = 99
MAX_NAME_IDX = len(STANDARD_NAMES) - 1

# Index of "prerelease": non standard names are mapped to it.
NON_STANDARD_NAME_IDX = MAX_NAME_IDX - 1

FIX_RANGE = MAX_FIX + 1
NUM_RANGE = FIX_RANGE * (MAX_NUMBER + 1)
NAME_SLOT = NUM_RANGE * (MAX_NAME_IDX + 1) + 1
MINOR_SLOT = NAME_SLOT * (MAX_PATCH + 1)
MAJOR_SLOT = MINOR_SLOT * (MAX_MINOR + 1)
MAX_ORDERED = MAX_MAJOR * MAJOR_SLOT + MAX_MINOR * MINOR_SLOT + (MAX_PATCH + 1) * NAME_SLOT

NOT_A_TAG_MESSAGE = "Not a release tag."

_REGEX_STRICT = re.compile(
    r"^v?(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)"
    r"(-([a-z]+)(\.(0|[1-9][0-9]?)(\.([1-9][0-9]?))?)?)?"
    r"(\+(invalid)?)?$",
    re.IGNORECASE
)
_REGEX_APPROX = re.compile(r"^(v|V)?(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)(\.(0|[1-9][0-9]*))?(.*)?$")
_REGEX_APPROX_SUFFIX = re.compile(r"^(-(.*?))?(\+(.*))?$", re.DOTALL)
_REGEX_NAME = re.compile(r"^[a-z]+$")


class VersionKind(Enum):
    """Shape of a Version."""
    INVALID = "invalid"        # Not a version at all
    MALFORMED = "malformed"    # Looks like a version but breaks a rule
    RELEASE = "release"
    PRERELEASE = "prerelease"


def encode(major: int, minor: int, patch: int, name_idx: int = -1, number: int = 0, fix: int = 0) -> int:
    """
    Compute the ordered version of the given fields.

    Every prerelease of a patch sits strictly between the previous patch
    release and the patch release itself.
    """
    ordered = major * MAJOR_SLOT + minor * MINOR_SLOT + (patch + 1) * NAME_SLOT
    if name_idx >= 0:
        ordered -= NAME_SLOT - 1
        ordered += name_idx * NUM_RANGE + number * FIX_RANGE + fix
    return ordered


def decode(ordered: int) -> Tuple[int, int, int, int, int, int]:
    """
    Inverse of encode().

    Returns:
        Tuple of (major, minor, patch, name_idx, number, fix), name_idx
        being -1 for a release.
    """
    if ordered < 1 or ordered > MAX_ORDERED:
        raise ValueError(f"Ordered version must be between 1 and {MAX_ORDERED}.")
    name_idx, number, fix = -1, 0, 0
    remainder = ordered % NAME_SLOT
    if remainder != 0:
        pre = remainder - 1
        name_idx, pre = divmod(pre, NUM_RANGE)
        number, fix = divmod(pre, FIX_RANGE)
        ordered -= remainder
    else:
        ordered -= NAME_SLOT
    major, ordered = divmod(ordered, MAJOR_SLOT)
    minor, ordered = divmod(ordered, MINOR_SLOT)
    patch = ordered // NAME_SLOT
    return major, minor, patch, name_idx, number, fix


def get_pre_release_name_idx(name: str) -> int:
    """
    Get the index of a prerelease name.

    Lookup is exact: any name outside STANDARD_NAMES (including a differently
    cased standard one) maps to "prerelease". The empty name is -1 (release).
    """
    if name is None:
        raise TypeError("name must not be None")
    if not name:
        return -1
    try:
        return STANDARD_NAMES.index(name)
    except ValueError:
        return NON_STANDARD_NAME_IDX


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """
    CSemVer version.

    Instances come from try_parse()/parse(), from_ordered() or successor
    generation. Invalid instances carry a parse_error and an ordered value
    of 0.

    Attributes:
        kind: Shape of the version
        major, minor, patch: Numeric parts
        name_idx: Index in STANDARD_NAMES, -1 for a release
        number: Prerelease number (0..99)
        fix: Prerelease fix (0..99), > 0 marks a fix
        name_from_tag: Prerelease name as written (round-trip only)
        marked_invalid: True when the tag carries "+invalid"
        original_text: Text the version was parsed from
        parse_error: Error message for invalid versions
    """

    kind: VersionKind
    major: int = 0
    minor: int = 0
    patch: int = 0
    name_idx: int = -1
    number: int = 0
    fix: int = 0
    name_from_tag: str = ""
    marked_invalid: bool = False
    original_text: Optional[str] = None
    parse_error: Optional[str] = None
    ordered: int = field(default=0, init=False)

    def __post_init__(self):
        if self.kind in (VersionKind.RELEASE, VersionKind.PRERELEASE):
            _check_range("Major", self.major, MAX_MAJOR)
            _check_range("Minor", self.minor, MAX_MINOR)
            _check_range("Patch", self.patch, MAX_PATCH)
            if self.kind == VersionKind.PRERELEASE:
                _check_range("Prerelease name index", self.name_idx, MAX_NAME_IDX)
                _check_range("Prerelease number", self.number, MAX_NUMBER)
                _check_range("Prerelease fix", self.fix, MAX_FIX)
            elif self.name_idx != -1 or self.number or self.fix:
                raise ValueError("A release can not have prerelease parts.")
            object.__setattr__(
                self, 'ordered',
                encode(self.major, self.minor, self.patch, self.name_idx, self.number, self.fix)
            )
            if self.original_text is None:
                object.__setattr__(self, 'original_text', self.to_normalized())

    # ------------------------------------------------------------------
    # Construction

    @classmethod
    def release(cls, major: int, minor: int, patch: int) -> 'Version':
        """Create an official release."""
        return cls(VersionKind.RELEASE, major, minor, patch)

    @classmethod
    def prerelease(
        cls,
        major: int,
        minor: int,
        patch: int,
        name: str = "alpha",
        number: int = 0,
        fix: int = 0
    ) -> 'Version':
        """Create a prerelease from a (standard or not) name."""
        idx = get_pre_release_name_idx(name)
        if idx < 0:
            raise ValueError("Prerelease name must not be empty.")
        return cls(VersionKind.PRERELEASE, major, minor, patch, idx, number, fix, name_from_tag=name)

    @classmethod
    def _standard(cls, major: int, minor: int, patch: int, name_idx: int = -1,
                  number: int = 0, fix: int = 0) -> 'Version':
        if name_idx < 0:
            return cls.release(major, minor, patch)
        return cls(VersionKind.PRERELEASE, major, minor, patch, name_idx, number, fix,
                   name_from_tag=STANDARD_NAMES[name_idx])

    @classmethod
    def from_ordered(cls, ordered: int) -> 'Version':
        """Decode an ordered version."""
        return cls._standard(*decode(ordered))

    @classmethod
    def invalid(cls, text: str, message: str, malformed: bool = False) -> 'Version':
        """Create an invalid version from a text and its error."""
        if malformed:
            return cls(VersionKind.MALFORMED, original_text=text,
                       parse_error=f"Tag '{text}': {message}")
        return cls(VersionKind.INVALID, original_text=text, parse_error=message)

    @classmethod
    def try_parse(cls, text: str, analyse_invalid: bool = False) -> 'Version':
        """
        Parse a tag text.

        Never raises on bad input: the returned version is invalid instead.

        Args:
            text: Tag text, e.g. "v1.2.3-rc.5"
            analyse_invalid: When True, a text that fails the strict grammar is
                checked against a permissive one to diagnose Malformed tags

        Returns:
            Parsed Version (check is_valid)
        """
        if text is None:
            raise TypeError("text must not be None")
        m = _REGEX_STRICT.match(text)
        if not m:
            if analyse_invalid:
                approx = _REGEX_APPROX.match(text)
                if approx:
                    return cls.invalid(text, _syntax_error_helper(approx), malformed=True)
            return cls.invalid(text, NOT_A_TAG_MESSAGE)

        major, minor, patch = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if major > MAX_MAJOR:
            return cls.invalid(text, f"Incorrect Major version. Must not be greater than {MAX_MAJOR}.", True)
        if minor > MAX_MINOR:
            return cls.invalid(text, f"Incorrect Minor version. Must not be greater than {MAX_MINOR}.", True)
        if patch > MAX_PATCH:
            return cls.invalid(text, f"Incorrect Patch version. Must not be greater than {MAX_PATCH}.", True)

        name = m.group(5) or ""
        s_number = m.group(7) or ""
        s_fix = m.group(9) or ""
        marked_invalid = m.group(11) is not None

        name_idx = get_pre_release_name_idx(name)
        number = int(s_number) if s_number else 0
        fix = int(s_fix) if s_fix else 0
        if name_idx >= 0 and number == 0 and fix == 0 and s_number:
            return cls.invalid(
                text,
                "Incorrect '.0' Release Number version. 0 can appear only to fix the first "
                f"pre release (ie. '.0.F' where F is between 1 and {MAX_FIX}).",
                True
            )
        kind = VersionKind.PRERELEASE if name_idx >= 0 else VersionKind.RELEASE
        return cls(kind, major, minor, patch, name_idx, number, fix,
                   name_from_tag=name, marked_invalid=marked_invalid, original_text=text)

    @classmethod
    def parse(cls, text: str) -> 'Version':
        """Parse a tag text, raising ValueError if it is not a valid version."""
        v = cls.try_parse(text, analyse_invalid=True)
        if not v.is_valid:
            raise ValueError(v.parse_error)
        return v

    def mark_invalid(self) -> 'Version':
        """Return this version with the '+invalid' marker."""
        if not self.is_valid:
            raise ValueError("Only a valid version can be marked invalid.")
        if self.marked_invalid:
            return self
        return Version(self.kind, self.major, self.minor, self.patch, self.name_idx,
                       self.number, self.fix, name_from_tag=self.name_from_tag,
                       marked_invalid=True)

    # ------------------------------------------------------------------
    # Properties

    @property
    def is_valid(self) -> bool:
        return self.kind in (VersionKind.RELEASE, VersionKind.PRERELEASE)

    @property
    def is_malformed(self) -> bool:
        return self.kind == VersionKind.MALFORMED

    @property
    def is_prerelease(self) -> bool:
        return self.kind == VersionKind.PRERELEASE

    @property
    def is_release(self) -> bool:
        return self.kind == VersionKind.RELEASE

    @property
    def is_fix(self) -> bool:
        """True for a prerelease fix (e.g. '1.0.0-beta.2.1')."""
        return self.fix > 0

    @property
    def pre_release_name(self) -> str:
        """Standard prerelease name ('' for a release)."""
        return STANDARD_NAMES[self.name_idx] if self.is_prerelease else ""

    @property
    def is_pre_release_name_standard(self) -> bool:
        return self.is_prerelease and (
            self.name_idx != NON_STANDARD_NAME_IDX
            or self.name_from_tag.lower() == STANDARD_NAMES[NON_STANDARD_NAME_IDX]
        )

    @property
    def marker(self) -> str:
        return "+invalid" if self.marked_invalid else ""

    @property
    def definition_strength(self) -> int:
        """
        Strength used to choose between texts denoting the same version.

        Unparseable tags are 0, malformed ones 1. A valid tag starts at 3,
        loses 1 for a non standard prerelease name and gains 2 when marked
        invalid.
        """
        if self.kind == VersionKind.INVALID:
            return 0
        if self.kind == VersionKind.MALFORMED:
            return 1
        strength = 3
        if self.is_prerelease and not self.is_pre_release_name_standard:
            strength -= 1
        if self.marked_invalid:
            strength += 2
        return strength

    # ------------------------------------------------------------------
    # Successors and predecessors

    def get_direct_successors(self, patches_only: bool = False) -> Iterator['Version']:
        """
        Yield the versions that may directly follow this one, closest first.

        Args:
            patches_only: Only fixes of a prerelease, or the next patch of a
                release
        """
        if not self.is_valid:
            return
        major, minor, patch = self.major, self.minor, self.patch
        if self.is_prerelease:
            if self.fix + 1 <= MAX_FIX:
                yield Version._standard(major, minor, patch, self.name_idx, self.number, self.fix + 1)
            if not patches_only:
                if self.number + 1 <= MAX_NUMBER:
                    yield Version._standard(major, minor, patch, self.name_idx, self.number + 1)
                for idx in range(self.name_idx + 1, MAX_NAME_IDX + 1):
                    yield Version._standard(major, minor, patch, idx)
                yield Version.release(major, minor, patch)
        elif patch + 1 <= MAX_PATCH:
            # A prerelease can not reach the next patch.
            yield from _ladder(major, minor, patch + 1)
        if not patches_only:
            if minor + 1 <= MAX_MINOR:
                yield from _ladder(major, minor + 1, 0)
            if major + 1 <= MAX_MAJOR:
                yield from _ladder(major + 1, 0, 0)

    def is_direct_predecessor(self, previous: Optional['Version']) -> bool:
        """
        Check whether previous may be directly followed by this version.

        With no previous version, only FIRST_POSSIBLE_VERSIONS qualify.
        """
        if not self.is_valid:
            return False
        if previous is None:
            return self in FIRST_POSSIBLE_VERSIONS
        if previous.ordered >= self.ordered:
            return False
        if previous.ordered == self.ordered - 1:
            return True

        if self.major > previous.major + 1:
            return False
        if self.major != previous.major:
            return self.minor == 0 and self.patch == 0 and self.number == 0 and self.fix == 0

        if self.minor > previous.minor + 1:
            return False
        if self.minor != previous.minor:
            return self.patch == 0 and self.number == 0 and self.fix == 0

        if self.patch > previous.patch + 1:
            return False
        if self.patch != previous.patch:
            # 4.3.2 and its prereleases can not follow any 4.3.1 prerelease.
            if previous.is_prerelease:
                return False
            return self.number == 0 and self.fix == 0

        # Same Major.Minor.Patch: previous is a prerelease.
        if not self.is_prerelease:
            return True
        # Fixes are only reachable from the version just before them.
        if self.fix > 0:
            return False
        if self.number > 0:
            return previous.name_idx == self.name_idx and self.number == previous.number + 1
        return True

    # ------------------------------------------------------------------
    # Text

    def to_normalized(self) -> str:
        """Normalized form: 'v{Major}.{Minor}.{Patch}[-{Name}[.{Number}[.{Fix}]]][+invalid]'."""
        if not self.is_valid:
            return self.parse_error or ""
        return f"v{self.major}.{self.minor}.{self.patch}{self.pre_release_part()}{self.marker}"

    def pre_release_part(self, name: Optional[str] = None) -> str:
        if not self.is_prerelease:
            return ""
        name = name or self.pre_release_name
        if self.fix > 0:
            return f"-{name}.{self.number}.{self.fix}"
        if self.number > 0:
            return f"-{name}.{self.number}"
        return f"-{name}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        if not self.is_valid:
            return {
                'kind': self.kind.value,
                'text': self.original_text,
                'error': self.parse_error,
            }
        return {
            'kind': self.kind.value,
            'text': self.original_text,
            'normalized': self.to_normalized(),
            'major': self.major,
            'minor': self.minor,
            'patch': self.patch,
            'pre_release_name': self.pre_release_name,
            'pre_release_number': self.number,
            'pre_release_fix': self.fix,
            'marked_invalid': self.marked_invalid,
            'ordered_version': self.ordered,
            'definition_strength': self.definition_strength,
        }

    def __str__(self) -> str:
        return self.to_normalized()

    def __repr__(self) -> str:
        if self.is_valid:
            return f"Version('{self.to_normalized()}')"
        return f"Version({self.kind.name}, {self.original_text!r})"

    # ------------------------------------------------------------------
    # Ordering

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self.ordered == other.ordered

    def __lt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self.ordered < other.ordered

    def __hash__(self):
        return hash(self.ordered)


def _check_range(label: str, value: int, maximum: int) -> None:
    if not isinstance(value, int) or value < 0 or value > maximum:
        raise ValueError(f"{label} must be between 0 and {maximum}, got {value!r}.")


def _ladder(major: int, minor: int, patch: int) -> Iterator[Version]:
    """Every standard prerelease of a patch, then its release."""
    for idx in range(MAX_NAME_IDX + 1):
        yield Version._standard(major, minor, patch, idx)
    yield Version.release(major, minor, patch)


def _syntax_error_helper(approx: 're.Match') -> str:
    """Explain why a text matching the permissive grammar is not a version."""
    if approx.group(5) is None:
        return "There must be at least 3 numbers (Major.Minor.Patch)."
    rest = approx.group(6) or ""
    if rest:
        suffix = _REGEX_APPROX_SUFFIX.match(rest)
        if not suffix:
            return ("Major.Minor.Patch must be followed by a '-' and a pre release name "
                    "(ie. 'v1.0.2-alpha') and/or a '+invalid' build meta data.")
        prerelease = suffix.group(2) or ""
        metadata = suffix.group(4) or ""
        if prerelease:
            parts = prerelease.split('.')
            if not _REGEX_NAME.match(parts[0]):
                return ("Pre release name must be only alpha (a-z) and should be: "
                        + ", ".join(STANDARD_NAMES))
            if len(parts) > 1:
                number = _to_int(parts[1])
                if number is None or number < 0 or number > MAX_NUMBER:
                    return f"Pre Release Number must be between 1 and {MAX_NUMBER}."
                if len(parts) > 2:
                    fix = _to_int(parts[2])
                    if fix is None or fix < 1 or fix > MAX_FIX:
                        return f"Fix Number must be between 1 and {MAX_FIX}."
                elif number == 0:
                    return ("Incorrect '.0' release Number version. 0 can appear only to fix the first "
                            f"pre release (ie. '.0.XX' where XX is between 1 and {MAX_FIX}).")
            if len(parts) > 3:
                return "Too much parts: there can be at most two trailing numbers like in '-alpha.1.2'."
        if metadata and metadata.lower() != "invalid":
            return "Invalid build meta data: can only be '+invalid'."
    return ("Invalid tag. Valid examples are: '1.0.0', '1.0.0-beta', '1.0.0-beta.5', "
            "'1.0.0-rc.5.12', '3.0.12+invalid'")


def _to_int(text: str) -> Optional[int]:
    try:
        return int(text)
    except ValueError:
        return None


def _build_first_possible_versions() -> List[Version]:
    versions: List[Version] = []
    for major, minor in ((0, 0), (0, 1), (1, 0)):
        versions.extend(_ladder(major, minor, 0))
    return versions


FIRST_POSSIBLE_VERSIONS: Tuple[Version, ...] = tuple(_build_first_possible_versions())

VERY_FIRST_VERSION: Version = FIRST_POSSIBLE_VERSIONS[0]


def get_direct_successors(patches_only: bool = False, version: Optional[Version] = None) -> List[Version]:
    """Direct successors of a version, or FIRST_POSSIBLE_VERSIONS when there is none."""
    if version is None:
        return list(FIRST_POSSIBLE_VERSIONS)
    return list(version.get_direct_successors(patches_only))
