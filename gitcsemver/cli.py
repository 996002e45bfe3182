#!/usr/bin/env python3

import logging

import click

from gitcsemver.config import logger
from gitcsemver.commands.info import info_handler
from gitcsemver.commands.versions import versions_handler
from gitcsemver.commands.parse import parse_handler
from gitcsemver.commands.config import config_cmd


@click.group()
@click.version_option(package_name='gitcsemver')
@click.option('-v', '--verbose', is_flag=True, help='Show debug diagnostics on stderr')
def cli(verbose):
    """gitcsemver - CSemVer versions from git tags.

    Computes the version of a commit from the release tags of its
    repository, checks that release tags follow each other without gaps,
    and derives CI build versions on configured branches.
    """
    if verbose:
        logger.setLevel(logging.DEBUG)


cli.add_command(info_handler, name='info')
cli.add_command(versions_handler, name='versions')
cli.add_command(parse_handler, name='parse')
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
