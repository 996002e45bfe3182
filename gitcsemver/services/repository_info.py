"""
Repository evaluation for gitcsemver.

RepositoryInfo ties everything together for one commit of one repository:
it finds the commit, checks the working folder, builds the tag registry,
resolves the commit and either validates its release tag or computes a CI
version. SimpleRepositoryInfo flattens the outcome into plain values that
build scripts can consume directly.

Problems never raise: they end up in repository_error (the commit could not
be found) or in release_tag_error_lines.
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional, Union, Dict, Any
import logging

from ..domain import (
    Version,
    VersionFormat,
    TagCommit,
    RepositoryInfoOptions,
    CIBranchVersionMode,
    format_version,
    to_file_version,
    build_informational_version,
)
from ..domain.formatting import INVALID_INFORMATIONAL_VERSION, ZERO_FILE_VERSION
from ..infra import CommitGraph, GitCommit, GitRepository, GitStatus
from .ci_build import CIBuildComposer, CIReleaseInfo
from .commit_resolver import CommitResolver, BasicCommitInfo
from .tag_registry import TagRegistry, TagParsingMode

logger = logging.getLogger(__name__)

OptionsBuilder = Callable[[str], RepositoryInfoOptions]

ZERO_DATE = datetime(1, 1, 1, tzinfo=timezone.utc)


class RepositoryInfo:
    """
    Version information of one commit.

    Example:
        info = RepositoryInfo.load("/path/to/repo")
        if not info.has_error:
            print(info.final_sem_version)
    """

    def __init__(
        self,
        graph: Optional[CommitGraph],
        options: Optional[RepositoryInfoOptions] = None,
        root: Optional[str] = None
    ):
        """
        Evaluate a repository.

        Args:
            graph: Repository (None when there is no git repository)
            options: Evaluation options (defaults when None)
            root: Work tree root, for display only
        """
        self.options = options or RepositoryInfoOptions()
        self.root = root

        self.repository_error: Optional[str] = None
        self.release_tag_error_lines: Optional[List[str]] = None
        self.release_tag_error_text: Optional[str] = None
        self.release_tag_is_not_possible_error = False

        self.commit_sha: Optional[str] = None
        self.commit_date_utc: datetime = ZERO_DATE
        self.is_dirty = False
        self.is_dirty_explanations = ""
        self.ci_version_mode = CIBranchVersionMode.NONE
        self.ci_version_name: Optional[str] = None

        self.valid_release_tag: Optional[Version] = None
        self.this_commit: Optional[TagCommit] = None
        self.previous_release: Optional[TagCommit] = None
        self.previous_max_release: Optional[TagCommit] = None
        self.basic_info: Optional[BasicCommitInfo] = None
        self.existing_versions: List[TagCommit] = []
        self.possible_versions: List[Version] = []
        self.possible_versions_strict: List[Version] = []
        self.next_possible_versions: List[Version] = []
        self.ci_release: Optional[CIReleaseInfo] = None

        if graph is None:
            self.repository_error = "No Git repository."
            return

        commit = self._find_commit(graph)
        if commit is None:
            return
        self.commit_sha = commit.sha
        self.commit_date_utc = commit.committer_date.astimezone(timezone.utc)
        self.is_dirty = self._compute_is_dirty(graph.status())

        errors: List[str] = []
        target = commit.sha
        registry = TagRegistry(
            graph,
            errors,
            starting_version=self.options.starting_version_for_csemver,
            parsing_mode=lambda sha: (TagParsingMode.RAISE_ERROR_ON_MALFORMED if sha == target
                                      else TagParsingMode.IGNORE_MALFORMED),
            overridden_tags=self.options.overridden_tags,
            check_existing_versions=self.options.check_existing_versions,
        )
        if not errors:
            self._evaluate(graph, registry, commit, errors)
        if errors:
            self.release_tag_error_lines = [line for line in errors if line.strip()]
            self.release_tag_error_text = "\n".join(self.release_tag_error_lines)

    @classmethod
    def load(
        cls,
        path: str,
        options: Union[RepositoryInfoOptions, OptionsBuilder, None] = None
    ) -> 'RepositoryInfo':
        """
        Evaluate the repository containing path.

        Args:
            path: Any directory inside a git work tree
            options: Options, or a function building them from the work tree root
        """
        repo = GitRepository.open(path)
        if repo is None:
            return cls(None, options if isinstance(options, RepositoryInfoOptions) else None)
        if callable(options):
            options = options(repo.root)
        return cls(repo, options, repo.root)

    # ------------------------------------------------------------------
    # Steps

    def _find_commit(self, graph: CommitGraph) -> Optional[GitCommit]:
        opts = self.options
        if opts.starting_commit_sha and opts.starting_commit_sha.strip():
            sha = graph.lookup(opts.starting_commit_sha)
            commit = graph.commit(sha) if sha else None
            if commit is None:
                self.repository_error = f"Commit '{opts.starting_commit_sha}' not found."
            return commit

        if opts.starting_branch_name and opts.starting_branch_name.strip():
            name = opts.starting_branch_name
            branch = graph.find_branch(name) or graph.find_branch(f"{opts.remote_name}/{name}")
            if branch is None:
                self.repository_error = (
                    f"Unknown StartingBranchName: '{name}' (also tested on remote '{opts.remote_name}/{name}')."
                )
                return None
            commit = graph.commit(branch.tip)
            if commit is None:
                self.repository_error = f"Commit '{branch.tip}' not found."
                return None
            branch_names = [name]
        else:
            head = graph.head()
            commit = graph.commit(head) if head else None
            if commit is None:
                self.repository_error = "Unitialized Git repository."
                return None
            current = graph.current_branch()
            if current is None:
                # Detached head: any branch whose tip is the head qualifies.
                prefix = opts.remote_name + '/'
                branch_names = [
                    b.name[len(prefix):] if b.is_remote else b.name
                    for b in graph.branches()
                    if b.tip == commit.sha and (not b.is_remote or b.name.startswith(prefix))
                ]
            else:
                branch_names = [current]

        branch_options = opts.find_branch(branch_names)
        if branch_options is not None:
            self.ci_version_mode = branch_options.ci_version_mode
            self.ci_version_name = branch_options.effective_version_name
            logger.debug(f"CI mode {self.ci_version_mode.value} as '{self.ci_version_name}'")
        return commit

    def _compute_is_dirty(self, status: GitStatus) -> bool:
        ignored = self.options.ignore_modified_files
        reasons = []
        for label, paths in (("Added", status.added), ("Removed", status.removed), ("Staged", status.staged)):
            for p in paths:
                reasons.append(f"{label}: {p}")
        for p in status.modified:
            if p not in ignored:
                reasons.append(f"Modified: {p}")
        self.is_dirty_explanations = "\n".join(reasons)
        return bool(reasons)

    def _evaluate(self, graph: CommitGraph, registry: TagRegistry, commit: GitCommit, errors: List[str]) -> None:
        resolver = CommitResolver(
            graph,
            registry,
            single_major=self.options.single_major,
            only_patch=self.options.only_patch,
        )
        info = resolver.get_commit_info(commit.sha)
        basic = info.basic_info
        self.basic_info = basic
        self.existing_versions = registry.existing_versions
        self.possible_versions_strict = info.possible_versions
        self.possible_versions = info.possible_versions_all
        self.next_possible_versions = info.next_possible_versions

        if basic is not None:
            self.this_commit = basic.this_commit
            self.previous_release = basic.best_commit_below
            below = resolver.get_basic_info(commit.sha, basic.this_commit.version) if basic.this_commit else basic
            if below is not None:
                self.previous_max_release = below.max_commit

        valid_versions = (self.possible_versions_strict if self.options.possible_versions_mode.is_strict
                          else self.possible_versions)
        if self.this_commit is not None:
            tag = self.this_commit.version
            if tag in valid_versions:
                self.valid_release_tag = tag
            else:
                self.release_tag_is_not_possible_error = True
                errors.append(
                    f"Release tag '{tag.original_text}' is not valid here. "
                    f"Valid tags are: {', '.join(str(v) for v in valid_versions)}"
                )
        elif self.ci_version_name is not None:
            composer = CIBuildComposer(self.ci_version_mode, self.ci_version_name)
            self.ci_release = composer.compose(commit, basic, errors)

    # ------------------------------------------------------------------
    # Results

    @property
    def error_header_text(self) -> Optional[str]:
        if self.repository_error:
            return self.repository_error
        return self.release_tag_error_lines[0] if self.release_tag_error_lines else None

    @property
    def has_error(self) -> bool:
        return self.repository_error is not None or self.release_tag_error_text is not None

    @property
    def is_blocked_by_dirty_folder(self) -> bool:
        return self.is_dirty and not self.options.ignore_dirty_working_folder

    @property
    def final_sem_version(self) -> Optional[str]:
        """SemVer of the commit: its CI version, or its valid release tag."""
        if self.has_error or self.is_blocked_by_dirty_folder:
            return None
        if self.ci_release is not None:
            return self.ci_release.build_version
        if self.valid_release_tag is not None:
            return format_version(self.valid_release_tag, VersionFormat.SEMVER)
        return None

    @property
    def final_nuget_version(self) -> Optional[str]:
        """NuGet V2 version of the commit: its CI version, or its valid release tag."""
        if self.has_error or self.is_blocked_by_dirty_folder:
            return None
        if self.ci_release is not None:
            return self.ci_release.build_version_nuget
        if self.valid_release_tag is not None:
            return format_version(self.valid_release_tag, VersionFormat.NUGET_V2)
        return None

    @property
    def final_informational_version(self) -> str:
        sem, nuget = self.final_sem_version, self.final_nuget_version
        if sem is None or nuget is None:
            return INVALID_INFORMATIONAL_VERSION
        return build_informational_version(sem, nuget, self.commit_sha, self.commit_date_utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'root': self.root,
            'commit_sha': self.commit_sha,
            'commit_date_utc': self.commit_date_utc.isoformat() if self.commit_sha else None,
            'repository_error': self.repository_error,
            'release_tag_errors': self.release_tag_error_lines or [],
            'release_tag_is_not_possible_error': self.release_tag_is_not_possible_error,
            'is_dirty': self.is_dirty,
            'valid_release_tag': str(self.valid_release_tag) if self.valid_release_tag else None,
            'previous_release': self.previous_release.to_dict() if self.previous_release else None,
            'existing_versions': [tc.to_dict() for tc in self.existing_versions],
            'possible_versions': [str(v) for v in self.possible_versions],
            'possible_versions_strict': [str(v) for v in self.possible_versions_strict],
            'next_possible_versions': [str(v) for v in self.next_possible_versions],
            'ci_release': self.ci_release.to_dict() if self.ci_release else None,
            'final_sem_version': self.final_sem_version,
            'final_nuget_version': self.final_nuget_version,
            'final_informational_version': self.final_informational_version,
        }


class SimpleRepositoryInfo:
    """
    Flat view of a RepositoryInfo.

    When there is no valid version, every number is 0 and the safe version
    strings carry the reason instead of a version.

    Example:
        simple = SimpleRepositoryInfo.load("/path/to/repo")
        print(simple.safe_sem_version)
    """

    def __init__(self, info: RepositoryInfo):
        self.info = info
        self.is_valid_release = False
        self.is_valid_ci_build = False
        self.major = 0
        self.minor = 0
        self.patch = 0
        self.pre_release_name = ""
        self.pre_release_number = 0
        self.pre_release_fix = 0
        self.file_version: Optional[str] = None
        self.ordered_version = 0
        self.safe_sem_version = ""
        self.safe_nuget_version = ""
        self.original_tag_text: Optional[str] = None
        self.commit_sha: Optional[str] = None
        self.commit_date_utc: datetime = ZERO_DATE

        if info.has_error:
            logger.error(info.repository_error or info.release_tag_error_text)
            self._set_invalid_values(info.error_header_text)
        else:
            self._read(info)

    @classmethod
    def load(
        cls,
        path: str,
        options: Union[RepositoryInfoOptions, OptionsBuilder, None] = None
    ) -> 'SimpleRepositoryInfo':
        return cls(RepositoryInfo.load(path, options))

    def _read(self, info: RepositoryInfo) -> None:
        self.commit_sha = info.commit_sha
        self.commit_date_utc = info.commit_date_utc
        t = info.valid_release_tag
        if t is not None and t.is_prerelease and not t.is_pre_release_name_standard:
            logger.warning(f"Non standard pre release name '{t.name_from_tag}' is mapped to '{t.pre_release_name}'.")

        if info.is_blocked_by_dirty_folder:
            self._set_invalid_values("Working folder has non committed changes.")
            logger.info("Working folder has non committed changes.")
            logger.info(info.is_dirty_explanations)
            return
        if info.is_dirty:
            logger.warning("Working folder is dirty! Checking this has been disabled by ignore_dirty_working_folder.")
            logger.warning(info.is_dirty_explanations)

        if info.previous_release is not None:
            logger.debug(
                f"Previous release found '{info.previous_release.version}' on commit "
                f"'{info.previous_release.commit_sha}'."
            )
        if info.previous_max_release is not None and info.previous_max_release != info.previous_release:
            logger.debug(
                f"Previous max release found '{info.previous_max_release.version}' on commit "
                f"'{info.previous_max_release.commit_sha}'."
            )
        if info.previous_release is None and info.previous_max_release is None:
            logger.debug("No previous release found.")

        if info.ci_release is not None:
            self.is_valid_ci_build = True
            self.safe_sem_version = info.final_sem_version
            self.safe_nuget_version = info.final_nuget_version
            self._set_numerical_values(info.ci_release.base_tag, True)
            logger.info(f"CI release: '{self.safe_sem_version}'.")
            self._log_valid_versions(info)
        elif t is None:
            self._set_invalid_values("No valid release tag.")
            logger.info("No valid release tag.")
            self._log_valid_versions(info)
        else:
            self.is_valid_release = True
            self.safe_sem_version = info.final_sem_version
            self.safe_nuget_version = info.final_nuget_version
            self.original_tag_text = t.original_text
            self._set_numerical_values(t, False)
            logger.info(f"Release: '{self.safe_sem_version}'.")

    def _log_valid_versions(self, info: RepositoryInfo) -> None:
        if info.options.possible_versions_mode.is_strict:
            versions, label = info.possible_versions_strict, "Restricted"
        else:
            versions, label = info.possible_versions, "AllSuccessors"
        if not versions:
            logger.info("No possible versions.")
        else:
            logger.info(f"Possible version(s) ({label}): {', '.join(str(v) for v in versions)}")

    def _set_numerical_values(self, v: Version, is_ci_build: bool) -> None:
        self.major = v.major
        self.minor = v.minor
        self.patch = v.patch
        self.pre_release_name = v.pre_release_name
        self.pre_release_number = v.number
        self.pre_release_fix = v.fix
        self.file_version = to_file_version(v, is_ci_build)
        self.ordered_version = v.ordered

    def _set_invalid_values(self, reason: str) -> None:
        self.major = 0
        self.minor = 0
        self.patch = 0
        self.pre_release_name = ""
        self.pre_release_number = 0
        self.pre_release_fix = 0
        self.file_version = ZERO_FILE_VERSION
        self.ordered_version = 0
        self.safe_sem_version = reason
        self.safe_nuget_version = reason

    @property
    def is_valid(self) -> bool:
        return self.ordered_version != 0

    @property
    def major_minor(self) -> str:
        return f"{self.major}.{self.minor}"

    @property
    def major_minor_patch(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'is_valid': self.is_valid,
            'is_valid_release': self.is_valid_release,
            'is_valid_ci_build': self.is_valid_ci_build,
            'major': self.major,
            'minor': self.minor,
            'patch': self.patch,
            'pre_release_name': self.pre_release_name,
            'pre_release_number': self.pre_release_number,
            'pre_release_fix': self.pre_release_fix,
            'major_minor': self.major_minor,
            'major_minor_patch': self.major_minor_patch,
            'file_version': self.file_version,
            'ordered_version': self.ordered_version,
            'safe_sem_version': self.safe_sem_version,
            'safe_nuget_version': self.safe_nuget_version,
            'original_tag_text': self.original_tag_text,
            'commit_sha': self.commit_sha,
            'commit_date_utc': self.commit_date_utc.isoformat() if self.commit_sha else None,
        }
