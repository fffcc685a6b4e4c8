"""
Handles the 'scan' command: classify every object in a repository.

This command follows our design principles:
- Table output on a terminal, JSONL when piped
- --verbose/-v for progress output
- --quiet/-q to suppress data output
- Thin CLI layer that connects the services to output
"""

from pathlib import Path

import click

from ..config import load_config, configure_logging, get_thresholds
from ..cli_utils import standard_command, add_common_options, resolve_table
from ..exit_codes import CorruptObject, PartialSuccessError, StoreUnreadable
from ..infra import GitClient
from ..progress import timed
from ..render import render_summary_table
from ..services import ObjectEnumerator, RarityClassifier


@click.command(name='scan')
@click.argument('path', default='.', type=click.Path(file_okay=False))
@click.option('--common-bits', type=click.IntRange(min=0),
              help='Fewest leading zero bits for Uncommon (default: 8, or from config)')
@click.option('--uncommon-bits', type=click.IntRange(min=0),
              help='Fewest leading zero bits for Rare (default: 16, or from config)')
@click.option('--alternates/--no-alternates', default=None,
              help='Include objects from alternate object directories')
@click.option('--keep-going/--stop-on-error', default=None,
              help='Report a partial summary if enumeration fails midway')
@add_common_options('table', 'format', 'fields', 'verbose', 'quiet')
@standard_command
def scan_handler(path, common_bits, uncommon_bits, alternates, keep_going, table, format, progress, **kwargs):
    """Summarise how rare the repository's object hashes are.

    PATH: Repository to scan (default: current directory)

    \b
    Every object in the object store (loose and packed, every kind) is
    counted once and placed in a tier by its run of leading zero bits:
      Common     fewer than 8 zero bits
      Uncommon   8 to 15 zero bits
      Rare       16 or more zero bits

    Examples:

    \b
        hashrarity scan                        # Current repository
        hashrarity scan ~/src/linux --no-table # JSONL summary
        hashrarity scan --common-bits 4 --uncommon-bits 12
        hashrarity scan --keep-going           # Partial summary on corrupt packs
    """
    config = load_config()
    configure_logging(config)
    thresholds = get_thresholds(config, common_bits, uncommon_bits)

    scan_config = config.get('scan', {})
    if alternates is None:
        alternates = scan_config.get('include_alternates', True)
    if keep_going is None:
        keep_going = scan_config.get('keep_going', False)

    git = GitClient(timeout=config.get('git', {}).get('timeout_seconds', 30))
    store = git.open_store(path)
    progress(f"Object store: {store.path} ({store.hash_length * 8}-bit hashes)")

    enumerator = ObjectEnumerator(store, include_alternates=alternates)
    classifier = RarityClassifier(thresholds)
    failure = None

    with timed() as timing:
        with progress.task("Classifying objects") as update:
            try:
                for object_hash in enumerator:
                    classifier.observe(object_hash)
                    update(classifier.total)
            except (StoreUnreadable, CorruptObject) as e:
                if not keep_going:
                    raise
                failure = e

    summary = classifier.summary()
    progress.success(f"Classified {summary.total} objects")

    if resolve_table(table, format):
        render_summary_table(
            summary,
            thresholds,
            elapsed=timing.elapsed,
            enumeration=enumerator.to_dict(),
            partial=failure is not None,
        )
    else:
        record = {
            'repository': str(Path(path).resolve()),
            'objects_dir': str(store.path),
            'hash_bits': store.hash_length * 8,
            'thresholds': thresholds.to_dict(),
            **summary.to_dict(),
            'enumeration': enumerator.to_dict(),
            'elapsed_seconds': round(timing.elapsed, 3),
        }
        if failure is not None:
            record['partial'] = True
            record['error'] = str(failure)
        yield record

    if failure is not None:
        progress.warning(f"Summary is partial: {failure}")
        raise PartialSuccessError(
            f"Enumeration stopped after {summary.total} objects: {failure}",
            succeeded=summary.total,
            failed=1,
        )
