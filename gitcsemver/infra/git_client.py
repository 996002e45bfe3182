"""
Git client infrastructure for gitcsemver.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic

The client only reads: nothing here ever writes to a repository.
"""

import subprocess
from dataclasses import dataclass, field
from typing import Optional, List, Tuple, Dict
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


@dataclass
class GitStatus:
    """Result of git status command."""
    branch: Optional[str] = None
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)
    staged: List[str] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)


@dataclass
class GitTag:
    """A git tag resolved to the commit it designates."""
    name: str
    commit: str


@dataclass
class GitCommit:
    """A git commit with the data version computation needs."""
    sha: str
    tree: str
    parents: Tuple[str, ...]
    committer_date: datetime


@dataclass
class GitBranch:
    """A local or remote-tracking branch."""
    name: str
    tip: str
    is_remote: bool = False


class GitClient:
    """
    Abstraction over git commands.

    Provides methods for common git operations with consistent
    error handling and return types.

    Example:
        client = GitClient()
        for tag in client.tags("/path/to/repo"):
            print(tag.name, tag.commit)
    """

    def __init__(self, timeout: int = 30):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 30)
        """
        self.timeout = timeout

    def _run(self, args: List[str], cwd: str, strip: bool = True) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            args: Arguments following 'git'
            cwd: Working directory
            strip: Strip surrounding whitespace from stdout

        Returns:
            Tuple of (stdout, returncode)
        """
        cmd = ["git", *args]
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
            if result.returncode != 0 and result.stderr:
                logger.debug(f"git {' '.join(args)}: {result.stderr.strip()}")
            output = result.stdout
            if output and strip:
                output = output.strip()
            return output or None, result.returncode

        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return None, -1
        except OSError as e:
            logger.warning(f"Git command failed: {' '.join(cmd)} - {e}")
            return None, -1

    def work_tree_root(self, path: str) -> Optional[str]:
        """Top level directory of the work tree containing path, None outside git."""
        output, code = self._run(["rev-parse", "--show-toplevel"], cwd=path)
        if code == 0 and output:
            return output
        return None

    def head_sha(self, path: str) -> Optional[str]:
        """Sha of the head commit, None for an empty repository."""
        output, code = self._run(["rev-parse", "--verify", "--quiet", "HEAD^{commit}"], cwd=path)
        if code == 0 and output:
            return output
        return None

    def current_branch(self, path: str) -> Optional[str]:
        """Current branch name, None when the head is detached."""
        output, code = self._run(["symbolic-ref", "--quiet", "--short", "HEAD"], cwd=path)
        if code == 0 and output:
            return output
        return None

    def resolve_commit(self, path: str, rev: str) -> Optional[str]:
        """Full sha of the commit designated by rev, None if there is none."""
        output, code = self._run(["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"], cwd=path)
        if code == 0 and output:
            return output
        return None

    def tags(self, path: str) -> List[GitTag]:
        """
        List tags pointing (possibly through annotated tag chains) to commits.

        Tags designating trees or blobs are skipped.

        Returns:
            List of GitTag objects
        """
        output, code = self._run(
            ["for-each-ref", "--format=%(refname:short)|%(objectname)|%(objecttype)|%(*objectname)|%(*objecttype)",
             "refs/tags"],
            cwd=path
        )
        if code != 0 or not output:
            return []

        tags = []
        for line in output.splitlines():
            parts = line.split('|')
            if len(parts) != 5:
                continue
            name, obj, obj_type, peeled, peeled_type = parts
            if obj_type == 'commit':
                tags.append(GitTag(name=name, commit=obj))
            elif obj_type == 'tag':
                # Annotated: %(*objectname) is the object the tag designates.
                if peeled_type == 'commit':
                    tags.append(GitTag(name=name, commit=peeled))
                elif peeled_type == 'tag':
                    sha = self.resolve_commit(path, f"refs/tags/{name}")
                    if sha:
                        tags.append(GitTag(name=name, commit=sha))
        return tags

    def commits(self, path: str, revs: List[str]) -> Dict[str, GitCommit]:
        """
        Read every commit reachable from revs.

        Returns:
            Mapping of sha to GitCommit
        """
        if not revs:
            return {}
        output, code = self._run(["log", "--format=%H|%T|%P|%cI", *revs, "--"], cwd=path)
        if code != 0 or not output:
            return {}

        commits = {}
        for line in output.splitlines():
            parts = line.split('|')
            if len(parts) != 4:
                continue
            sha, tree, parents, date_str = parts
            try:
                date = datetime.fromisoformat(date_str.replace('Z', '+00:00'))
            except ValueError:
                logger.warning(f"Unreadable commit date '{date_str}' on {sha}")
                date = datetime.fromtimestamp(0, tz=timezone.utc)
            commits[sha] = GitCommit(
                sha=sha,
                tree=tree,
                parents=tuple(parents.split()) if parents else (),
                committer_date=date
            )
        return commits

    def branches(self, path: str) -> List[GitBranch]:
        """List local and remote-tracking branches with their tips."""
        output, code = self._run(
            ["for-each-ref", "--format=%(refname)|%(objectname)", "refs/heads", "refs/remotes"],
            cwd=path
        )
        if code != 0 or not output:
            return []

        branches = []
        for line in output.splitlines():
            if '|' not in line:
                continue
            ref, tip = line.split('|', 1)
            if ref.startswith("refs/heads/"):
                branches.append(GitBranch(name=ref[len("refs/heads/"):], tip=tip))
            elif ref.startswith("refs/remotes/") and not ref.endswith("/HEAD"):
                branches.append(GitBranch(name=ref[len("refs/remotes/"):], tip=tip, is_remote=True))
        return branches

    def status(self, path: str) -> GitStatus:
        """
        Get working folder status.

        Args:
            path: Path to git repository

        Returns:
            GitStatus with the changed paths by category
        """
        result = GitStatus(branch=self.current_branch(path))
        # -z: raw paths, NUL terminated; a rename is followed by its source path
        output, code = self._run(["status", "--porcelain", "-z"], cwd=path, strip=False)
        if code != 0 or not output:
            return result

        entries = iter(output.split("\0"))
        for entry in entries:
            if len(entry) < 4:
                continue
            index, work, file_path = entry[0], entry[1], entry[3:]
            if index in 'RC':
                next(entries, None)
            if index == '?' and work == '?':
                result.untracked.append(file_path)
                continue
            if index == 'A':
                result.added.append(file_path)
            elif index in 'MRC':
                result.staged.append(file_path)
            if index == 'D' or work == 'D':
                result.removed.append(file_path)
            if work == 'M':
                result.modified.append(file_path)
        return result
