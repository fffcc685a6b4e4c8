#!/usr/bin/env python3

import click

from hashrarity import __version__
from hashrarity.commands.scan import scan_handler
from hashrarity.commands.objects import objects_handler
from hashrarity.commands.commits import commits_handler
from hashrarity.commands.config import config_cmd


@click.group()
@click.version_option(version=__version__, prog_name="hashrarity")
def cli():
    """hashrarity - How statistically unusual are your git object hashes?

    Walks a repository's object store and tiers every object hash by its
    run of leading zero bits, assuming hashes are uniformly distributed.
    """
    pass


cli.add_command(scan_handler, name='scan')
cli.add_command(objects_handler, name='objects')
cli.add_command(commits_handler, name='commits')
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
