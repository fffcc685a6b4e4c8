"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
import click
from functools import wraps
from typing import Generator, Optional
from .progress import get_progress
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .format_utils import FORMATS, format_output, get_format_from_env


def _emit_error(e: Exception) -> None:
    error_obj = {
        "error": str(e),
        "type": type(e).__name__,
        "exit_code": get_exit_code_for_exception(e),
    }
    # Extra context carried by store errors and partial results
    for attr in ('path', 'pack', 'offset', 'succeeded', 'failed'):
        if hasattr(e, attr):
            error_obj[attr] = getattr(e, attr)
    print(json.dumps(error_obj, ensure_ascii=False), flush=True)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Progress reporting on stderr
    - Formatted data on stdout (JSONL unless --format says otherwise)
    - --quiet/-q consumes results without printing them
    - Consistent error handling and exit codes

    The wrapped command returns a generator of dicts, or None when it
    rendered its own output (table mode).
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        verbose = kwargs.get('verbose', False)
        quiet = kwargs.get('quiet', False)
        output_format = kwargs.get('format') or get_format_from_env('jsonl')
        fields_str = kwargs.get('fields', None)
        fields = fields_str.split(',') if fields_str else None

        progress = get_progress(enabled=verbose or None)
        kwargs['progress'] = progress

        try:
            result = func(*args, **kwargs)

            if isinstance(result, Generator):
                if quiet:
                    for _ in result:
                        pass
                else:
                    for line in format_output(result, output_format, fields):
                        print(line, flush=True)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            progress.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            # Click exceptions already have their exit code
            raise
        except CommandError as e:
            progress.error(str(e))
            if not quiet:
                _emit_error(e)
            sys.exit(e.exit_code)
        except Exception as e:
            progress.error(f"Command failed: {e}")
            if not quiet:
                _emit_error(e)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


def resolve_table(table: Optional[bool], output_format: Optional[str]) -> bool:
    """
    Decide between a rich table and structured output.

    An explicit --format always wins; otherwise --table/--no-table, and
    failing that, a table only when stdout is a terminal.
    """
    if output_format:
        return False
    if table is None:
        return sys.stdout.isatty()
    return table


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                            help='Force progress output even when piped'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                          help='Suppress data output, show only progress'),
    'limit': click.option('--limit', type=click.IntRange(min=1),
                          help='Limit number of items to process'),
    'format': click.option('-f', '--format',
                           type=click.Choice(FORMATS),
                           help='Output format (default: jsonl, or from HASHRARITY_FORMAT env)'),
    'fields': click.option('--fields',
                           help='Comma-separated list of fields to include (for CSV/TSV)'),
    'table': click.option('--table/--no-table', default=None,
                          help='Display as formatted table (auto-detected by default)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'quiet')
        def my_command(verbose, quiet):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator
