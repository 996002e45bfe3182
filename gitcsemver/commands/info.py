"""
Handles the 'info' command: the version of a commit.

This command follows our design principles:
- Default output is a JSON object on stdout
- Diagnostics go to stderr through logging
- Thin CLI layer that connects the services to output
"""

import sys
import click

from ..config import load_config, options_from_config
from ..cli_utils import standard_command
from ..exit_codes import NoRepositoryError, VersionError
from ..infra import GitRepository
from ..render import render_info
from ..services import RepositoryInfo, SimpleRepositoryInfo


@click.command(name='info')
@click.argument('path', default='.', required=False, type=click.Path(file_okay=False))
@click.option('-b', '--branch', default=None, help='Evaluate the tip of this branch instead of the head')
@click.option('-c', '--commit', default=None, help='Evaluate this commit instead of the head')
@click.option('--ignore-dirty', is_flag=True, help='Compute versions even with uncommitted changes')
@click.option('--table/--no-table', default=None, help='Display as formatted table (auto-detected by default)')
@click.option('--strict', is_flag=True, help='Exit with an error when there is no valid version')
@standard_command
def info_handler(path, branch, commit, ignore_dirty, table, strict, **kwargs):
    """Show the version of a commit.

    PATH: Any directory inside the git work tree (default: current directory)

    \b
    Options are read from gitcsemver.{json,toml,yaml} at the repository
    root, then overridden by GITCSEMVER_* environment variables and by
    the flags of this command.

    Examples:

    \b
        gitcsemver info                      # Head of the current repository
        gitcsemver info --branch develop     # Tip of develop
        gitcsemver info --commit 1a2b3c4     # A given commit
        gitcsemver info --strict --no-table  # Fail when there is no version
    """
    if table is None:
        table = sys.stdout.isatty()

    repo = GitRepository.open(path)
    if repo is None:
        raise NoRepositoryError(f"No Git repository at '{path}'.")

    config = load_config(repo.root)
    if branch:
        config['starting_branch_name'] = branch
    if commit:
        config['starting_commit_sha'] = commit
    if ignore_dirty:
        config['ignore_dirty_working_folder'] = True
    options = options_from_config(config)

    info = RepositoryInfo(repo, options, repo.root)
    simple = SimpleRepositoryInfo(info)

    diagnostics = [info.repository_error] if info.repository_error else list(info.release_tag_error_lines or [])
    possible = info.possible_versions_strict if options.possible_versions_mode.is_strict else info.possible_versions

    if strict and not simple.is_valid:
        raise VersionError(simple.safe_sem_version, diagnostics)

    if table:
        render_info(simple.to_dict(), diagnostics, [str(v) for v in possible])
        return None

    result = simple.to_dict()
    result['informational_version'] = info.final_informational_version
    result['is_dirty'] = info.is_dirty
    result['possible_versions'] = [str(v) for v in possible]
    result['ci_release'] = info.ci_release.to_dict() if info.ci_release else None
    result['errors'] = diagnostics
    return result
