"""
Tag registry for gitcsemver.

Collects the release tags of a repository in three passes:

1. parse_tags(): every tag (and overridden tag) is parsed and attached to
   its commit; tags below the version floor are skipped.
2. resolve_tags(): the tags of each commit are reduced to at most one
   version; ambiguous commits are reported and dropped.
3. RepositoryVersions: the surviving tag commits are sorted and, optionally,
   checked for gaps.

Each pass appends one line per problem to a shared error list instead of
raising: a repository may have several problems and all of them are worth
reporting at once.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple
import logging

from ..domain import TagCommit, Version
from ..infra import CommitGraph, GitCommit
from .content_index import ContentEquivalenceIndex

logger = logging.getLogger(__name__)


class TagParsingMode(Enum):
    """How tags of a commit are analysed."""
    IGNORE_MALFORMED = "ignore_malformed"
    RAISE_ERROR_ON_MALFORMED = "raise_error_on_malformed"
    RAISE_ERROR_ON_MALFORMED_AND_NON_STANDARD_NAME = "raise_error_on_malformed_and_non_standard_name"

    @property
    def analyse_invalid(self) -> bool:
        return self != TagParsingMode.IGNORE_MALFORMED


ParsingModeSelector = Callable[[str], TagParsingMode]


@dataclass
class CollectedTags:
    """Valid versions collected on one commit, before resolution."""
    commit_sha: str
    content_sha: str
    versions: List[Version] = field(default_factory=list)

    def add(self, version: Version) -> None:
        self.versions.append(version)


@dataclass
class ParsedTags:
    """
    Output of the parsing pass.

    Attributes:
        floor: Parsed version floor (None when there is none)
        commits: Collected tags per commit sha, in discovery order
        floor_found: True when a commit is tagged with the floor
    """
    floor: Optional[Version] = None
    commits: Dict[str, CollectedTags] = field(default_factory=dict)
    floor_found: bool = True


def parse_floor(text: Optional[str], errors: List[str]) -> Tuple[Optional[Version], bool]:
    """
    Parse the version floor.

    Returns:
        Tuple of (floor, ok); ok is False when the text is not a valid version
    """
    if text is None:
        return None, True
    floor = Version.try_parse(text, analyse_invalid=True)
    if not floor.is_valid:
        errors.append(f"Invalid StartingVersionForCSemVer. {floor.parse_error}")
        return None, False
    return floor, True


def parse_tags(
    graph: CommitGraph,
    errors: List[str],
    floor: Optional[Version] = None,
    parsing_mode: Optional[ParsingModeSelector] = None,
    overridden_tags: Optional[Dict[str, List[str]]] = None
) -> ParsedTags:
    """
    Parse every tag of the repository, then the overridden ones.

    Args:
        graph: Repository to read tags and commits from
        errors: Error lines collector
        floor: Versions below it are ignored, and it must be found
        parsing_mode: Parsing mode per commit sha (IGNORE_MALFORMED if None)
        overridden_tags: Tags applied as if they existed, keyed by commit
            sha or "head"

    Returns:
        ParsedTags
    """
    result = ParsedTags(floor=floor, floor_found=floor is None)

    for tag in graph.tags():
        commit = graph.commit(tag.commit)
        if commit is None:
            logger.debug(f"Tag '{tag.name}' points to an unknown commit {tag.commit}")
            continue
        _register_one(result, errors, commit, tag.name, parsing_mode)

    for key, names in (overridden_tags or {}).items():
        commit = None
        if not key:
            errors.append("Invalid overriden commit: the key is null or empty.")
        elif key.lower() == "head":
            head = graph.head()
            commit = graph.commit(head) if head else None
        else:
            sha = graph.lookup(key)
            commit = graph.commit(sha) if sha else None
            if commit is None:
                errors.append(f"Overriden commit '{key}' does not exist.")
        if commit is not None:
            for name in names:
                _register_one(result, errors, commit, name, parsing_mode)

    if not result.floor_found:
        errors.append(
            f"Unable to find StartingVersionForCSemVer = '{floor}'. A commit must be tagged with it."
        )
    return result


def _register_one(
    result: ParsedTags,
    errors: List[str],
    commit: GitCommit,
    tag_name: str,
    parsing_mode: Optional[ParsingModeSelector]
) -> None:
    mode = parsing_mode(commit.sha) if parsing_mode else TagParsingMode.IGNORE_MALFORMED
    v = Version.try_parse(tag_name, analyse_invalid=mode.analyse_invalid)
    if v.is_malformed:
        if mode.analyse_invalid:
            errors.append(f"Malformed {v.parse_error} on commit '{commit.sha}'.")
        return
    if not v.is_valid:
        return

    if result.floor is not None:
        if v == result.floor:
            result.floor_found = True
        elif v < result.floor:
            logger.debug(f"Tag '{tag_name}' is below the version floor {result.floor}")
            return

    if (mode == TagParsingMode.RAISE_ERROR_ON_MALFORMED_AND_NON_STANDARD_NAME
            and v.is_prerelease and not v.is_pre_release_name_standard):
        errors.append(f"Invalid PreRelease name in '{v.original_text}' on commit '{commit.sha}'.")
        return

    collected = result.commits.get(commit.sha)
    if collected is None:
        collected = result.commits[commit.sha] = CollectedTags(commit.sha, commit.tree)
    collected.add(v)


def resolve_commit_tags(collected: CollectedTags, errors: List[str]) -> Optional[Version]:
    """
    Reduce the tags of one commit to its version.

    Tags denoting the same version are merged keeping the strongest
    definition; versions whose strongest tag is '+invalid' are removed.

    Returns:
        The single remaining version, None if there is none or more than one
    """
    strongest: Dict[Version, Version] = {}
    for v in collected.versions:
        current = strongest.get(v)
        if current is None or v.definition_strength > current.definition_strength:
            strongest[v] = v
    survivors = [v for v in strongest.values() if not v.marked_invalid]
    if len(survivors) > 1:
        errors.append(
            f"Commit '{collected.commit_sha}' has {len(survivors)} different released version tags. "
            "Delete some of them or create +invalid tag(s) if they are already pushed to a remote repository."
        )
        return None
    return survivors[0] if survivors else None


def resolve_tags(parsed: ParsedTags, errors: List[str]) -> List[TagCommit]:
    """Resolve every collected commit, keeping discovery order."""
    tag_commits = []
    for collected in parsed.commits.values():
        v = resolve_commit_tags(collected, errors)
        if v is not None:
            tag_commits.append(TagCommit(collected.commit_sha, collected.content_sha, v))
    return tag_commits


class RepositoryVersions:
    """
    Sorted tag commits of a repository.

    Duplicated versions are always reported. With check_existing_versions,
    the first version must be one of the first possible versions (when there
    is no floor) and consecutive versions must be direct successors.
    """

    def __init__(
        self,
        tag_commits: List[TagCommit],
        errors: List[str],
        floor: Optional[Version] = None,
        check_existing_versions: bool = True
    ):
        self.tag_commits: Tuple[TagCommit, ...] = tuple(
            sorted(tag_commits, key=lambda tc: (tc.version.ordered, tc.commit_sha))
        )
        if not self.tag_commits:
            return

        first = self.tag_commits[0]
        if check_existing_versions and floor is None and not first.version.is_direct_predecessor(None):
            errors.append(
                f"First existing version is '{first.version}' (on '{first.commit_sha}'). "
                "One or more previous versions are missing."
            )
        for prev, nxt in zip(self.tag_commits, self.tag_commits[1:]):
            if nxt.version == prev.version:
                errors.append(
                    f"Version '{prev.version}' is defined on '{prev.commit_sha}' and '{nxt.commit_sha}'."
                )
            elif check_existing_versions and not nxt.version.is_direct_predecessor(prev.version):
                errors.append(f"Missing one or more version(s) between '{prev.version}' and '{nxt.version}'.")

    @property
    def versions(self) -> List[Version]:
        return [tc.version for tc in self.tag_commits]

    def __len__(self) -> int:
        return len(self.tag_commits)

    def __iter__(self):
        return iter(self.tag_commits)


class TagRegistry:
    """
    Release tags of a repository, resolved and checked.

    The registry is immutable once built. When errors were reported, the
    content index is empty and the registry must not be used to compute
    versions.

    Example:
        errors = []
        registry = TagRegistry(graph, errors, starting_version="v1.0.0")
        if not errors:
            print(registry.repository_versions.versions)
    """

    def __init__(
        self,
        graph: CommitGraph,
        errors: List[str],
        starting_version: Optional[str] = None,
        parsing_mode: Optional[ParsingModeSelector] = None,
        overridden_tags: Optional[Dict[str, List[str]]] = None,
        check_existing_versions: bool = True
    ):
        """
        Initialize TagRegistry.

        Args:
            graph: Repository to read
            errors: Error lines collector (appended to)
            starting_version: Version floor text
            parsing_mode: Parsing mode per commit sha
            overridden_tags: Tags applied as if they existed
            check_existing_versions: Check that existing versions are compact
        """
        initial_errors = len(errors)
        self.floor: Optional[Version] = None
        self._by_commit: Dict[str, TagCommit] = {}
        self.repository_versions = RepositoryVersions([], errors)
        self.content_index = ContentEquivalenceIndex([])

        floor, ok = parse_floor(starting_version, errors)
        if not ok:
            return
        self.floor = floor

        parsed = parse_tags(graph, errors, floor, parsing_mode, overridden_tags)
        tag_commits = resolve_tags(parsed, errors)
        self._by_commit = {tc.commit_sha: tc for tc in tag_commits}
        self.repository_versions = RepositoryVersions(tag_commits, errors, floor, check_existing_versions)

        if len(errors) == initial_errors:
            self.content_index = ContentEquivalenceIndex(self.repository_versions.tag_commits)
        logger.debug(
            f"{len(self._by_commit)} tagged commits, {len(self.content_index)} content groups, "
            f"{len(errors) - initial_errors} errors"
        )

    def get_tag_commit(self, commit_sha: str) -> Optional[TagCommit]:
        """Tag commit of a sha, None for a commit without a valid release tag."""
        return self._by_commit.get(commit_sha)

    @property
    def existing_versions(self) -> List[TagCommit]:
        return list(self.repository_versions.tag_commits)
