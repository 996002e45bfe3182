"""
Handles the 'versions' command: existing release versions of a repository.
"""

import logging
import sys
import click

from ..config import load_config, options_from_config
from ..cli_utils import standard_command, format_option
from ..exit_codes import NoRepositoryError
from ..infra import GitRepository
from ..render import render_versions_table
from ..services import TagRegistry

logger = logging.getLogger(__name__)


@click.command(name='versions')
@click.argument('path', default='.', required=False, type=click.Path(file_okay=False))
@click.option('--table/--no-table', default=None, help='Display as formatted table (auto-detected by default)')
@format_option
@standard_command
def versions_handler(path, table, format, **kwargs):
    """List the release versions of a repository, lowest first.

    PATH: Any directory inside the git work tree (default: current directory)

    \b
    Problems found in the tags (ambiguous commits, missing versions) are
    reported on stderr; the versions are listed anyway.

    Examples:

    \b
        gitcsemver versions
        gitcsemver versions --format csv > versions.csv
    """
    if table is None:
        table = sys.stdout.isatty() and format is None

    repo = GitRepository.open(path)
    if repo is None:
        raise NoRepositoryError(f"No Git repository at '{path}'.")

    options = options_from_config(load_config(repo.root))
    errors = []
    registry = TagRegistry(
        repo,
        errors,
        starting_version=options.starting_version_for_csemver,
        overridden_tags=options.overridden_tags,
        check_existing_versions=options.check_existing_versions,
    )
    for line in errors:
        logger.warning(line)

    versions = [
        {**tc.to_dict(), 'ordered_version': tc.version.ordered}
        for tc in registry.existing_versions
    ]
    if table:
        render_versions_table(versions)
        return None
    return versions
