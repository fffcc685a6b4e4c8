"""
Handles the 'commits' command: rarity of each commit hash in the log.
"""

import click

from ..config import load_config, configure_logging, get_thresholds
from ..cli_utils import standard_command, add_common_options, resolve_table
from ..domain import ObjectHash
from ..exit_codes import NoRepositoryError
from ..infra import GitClient
from ..render import render_commits_table


@click.command(name='commits')
@click.argument('path', default='.', type=click.Path(file_okay=False))
@click.option('-a', '--all', 'all_refs', is_flag=True, help='Walk every ref, not just HEAD')
@click.option('-t', '--top', type=click.IntRange(min=1),
              help='Only show the N rarest commits, most zero bits first')
@click.option('--common-bits', type=click.IntRange(min=0), help='Fewest leading zero bits for Uncommon')
@click.option('--uncommon-bits', type=click.IntRange(min=0), help='Fewest leading zero bits for Rare')
@add_common_options('limit', 'table', 'format', 'fields', 'verbose', 'quiet')
@standard_command
def commits_handler(path, all_refs, top, common_bits, uncommon_bits, limit, table, format, progress, **kwargs):
    """Show commits from the log with the rarity of their hashes.

    PATH: Repository to read (default: current directory)

    Examples:

    \b
        hashrarity commits                 # HEAD history
        hashrarity commits --all --top 5   # Five rarest commits on any ref
    """
    config = load_config()
    configure_logging(config)
    thresholds = get_thresholds(config, common_bits, uncommon_bits)

    git = GitClient(timeout=config.get('git', {}).get('timeout_seconds', 30))
    if not git.is_git_repo(path):
        raise NoRepositoryError(f"Not a git repository: {path}")

    commits = git.log(path, all_refs=all_refs, limit=limit)
    if not commits:
        progress("No commits found")

    rows = []
    for commit in commits:
        object_hash = ObjectHash.from_hex(commit.hash)
        zero_bits = object_hash.leading_zero_bits()
        rows.append({
            'hash': commit.hash,
            'author': commit.author,
            'email': commit.email,
            'date': commit.date.isoformat(),
            'message': commit.message,
            'zero_bits': zero_bits,
            'tier': thresholds.tier_for(zero_bits).label,
        })

    if top:
        rows = sorted(rows, key=lambda row: -row['zero_bits'])[:top]

    if resolve_table(table, format):
        render_commits_table(rows)
    else:
        yield from rows
