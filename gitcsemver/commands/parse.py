"""
Handles the 'parse' command: every rendering of a version.
"""

import click

from ..cli_utils import standard_command
from ..domain import Version, VersionFormat, format_version
from ..exit_codes import CommandError, DATA_ERROR


def describe_version(v: Version) -> dict:
    """Dictionary of a valid version with all its text formats."""
    result = v.to_dict()
    result['formats'] = {fmt.value: format_version(v, fmt) for fmt in VersionFormat}
    return result


@click.command(name='parse')
@click.argument('version')
@click.option('--ordered', is_flag=True, help='VERSION is an ordered version number')
@click.option('-s', '--successors', is_flag=True, help='Also list the direct successors')
@click.option('--patches-only', is_flag=True, help='Only list patch successors')
@standard_command
def parse_handler(version, ordered, successors, patches_only, **kwargs):
    """Parse a version and show its formats.

    \b
    Examples:
        gitcsemver parse v1.2.3-rc.5
        gitcsemver parse 1.0.0 --successors
        gitcsemver parse --ordered 40000500080001
    """
    if ordered:
        try:
            v = Version.from_ordered(int(version))
        except ValueError as e:
            raise CommandError(str(e), DATA_ERROR)
    else:
        v = Version.try_parse(version, analyse_invalid=True)
        if not v.is_valid:
            raise CommandError(v.parse_error, DATA_ERROR)

    result = describe_version(v)
    if successors or patches_only:
        result['successors'] = [str(s) for s in v.get_direct_successors(patches_only)]
    return result
