"""
Handles the 'objects' command: list objects with their rarity.

Streams one record per object in enumeration order (which is not sorted)
unless --rarest-first asks for the whole set to be collected and ordered.
"""

from itertools import islice
from typing import Any, Dict, Iterable, Iterator, List

import click

from ..config import load_config, configure_logging, get_thresholds
from ..cli_utils import standard_command, add_common_options, resolve_table
from ..domain import RarityTier
from ..infra import GitClient
from ..render import render_objects_table
from ..services import enumerate_objects

KIND_BATCH_SIZE = 1000


def _with_kinds(rows: Iterable[Dict[str, Any]], git: GitClient, path: str) -> Iterator[Dict[str, Any]]:
    """Attach object kinds, looking them up in batches to keep streaming."""
    rows = iter(rows)
    while True:
        batch = list(islice(rows, KIND_BATCH_SIZE))
        if not batch:
            return
        kinds = git.object_types(path, (row['hash'] for row in batch))
        for row in batch:
            row['kind'] = kinds.get(row['hash'], 'unknown')
            yield row


@click.command(name='objects')
@click.argument('path', default='.', type=click.Path(file_okay=False))
@click.option('-t', '--tier', 'tiers', multiple=True,
              type=click.Choice([t.value for t in RarityTier], case_sensitive=False),
              help='Only show objects in this tier (repeatable)')
@click.option('--min-bits', type=click.IntRange(min=0),
              help='Only show objects with at least this many leading zero bits')
@click.option('--kinds', is_flag=True, help='Include object kind (commit, tree, blob, tag)')
@click.option('--rarest-first', is_flag=True, help='Sort by leading zero bits, most first')
@click.option('--common-bits', type=click.IntRange(min=0), help='Fewest leading zero bits for Uncommon')
@click.option('--uncommon-bits', type=click.IntRange(min=0), help='Fewest leading zero bits for Rare')
@click.option('--alternates/--no-alternates', default=None,
              help='Include objects from alternate object directories')
@add_common_options('limit', 'table', 'format', 'fields', 'verbose', 'quiet')
@standard_command
def objects_handler(path, tiers, min_bits, kinds, rarest_first, common_bits, uncommon_bits,
                    alternates, limit, table, format, progress, **kwargs):
    """List objects with their leading zero bits and rarity tier.

    PATH: Repository to scan (default: current directory)

    Examples:

    \b
        hashrarity objects --tier rare             # Only Rare objects
        hashrarity objects --min-bits 12 --kinds   # With commit/tree/blob/tag
        hashrarity objects --rarest-first --limit 10
    """
    config = load_config()
    configure_logging(config)
    thresholds = get_thresholds(config, common_bits, uncommon_bits)
    if alternates is None:
        alternates = config.get('scan', {}).get('include_alternates', True)

    wanted = {RarityTier.parse(t) for t in tiers}

    git = GitClient(timeout=config.get('git', {}).get('timeout_seconds', 30))
    store = git.open_store(path)
    progress(f"Object store: {store.path}")

    def rows() -> Iterator[Dict[str, Any]]:
        for object_hash in enumerate_objects(store, include_alternates=alternates):
            zero_bits = object_hash.leading_zero_bits()
            tier = thresholds.tier_for(zero_bits)
            if wanted and tier not in wanted:
                continue
            if min_bits is not None and zero_bits < min_bits:
                continue
            yield {'hash': object_hash.hex, 'zero_bits': zero_bits, 'tier': tier.label}

    selected: Iterable[Dict[str, Any]] = rows()
    if rarest_first:
        selected = sorted(selected, key=lambda row: (-row['zero_bits'], row['hash']))
    if limit:
        selected = islice(selected, limit)
    if kinds:
        selected = _with_kinds(selected, git, path)

    if resolve_table(table, format):
        collected: List[Dict[str, Any]] = list(selected)
        render_objects_table(collected)
    else:
        yield from selected
