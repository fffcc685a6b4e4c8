"""
Progress reporting utilities for hashrarity.

Provides consistent progress reporting that respects piping and redirection,
and the scoped stopwatch commands use to time a scan.
"""

import sys
import os
from dataclasses import dataclass
from typing import Iterator, Optional
from contextlib import contextmanager
import logging
import time
import signal
from enum import Enum

logger = logging.getLogger(__name__)


class LogLevel(Enum):
    """Log levels for progress messages."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    SUCCESS = 4


@dataclass
class Timing:
    """Wall-clock duration of a timed block; elapsed is set on exit."""
    started: float
    elapsed: Optional[float] = None


@contextmanager
def timed() -> Iterator[Timing]:
    """
    Time the enclosed block.

    Example:
        with timed() as timing:
            summary = classify_all(enumerate_objects(store))
        print(f"{timing.elapsed:.2f}s")
    """
    timing = Timing(started=time.perf_counter())
    try:
        yield timing
    finally:
        timing.elapsed = time.perf_counter() - timing.started


class ProgressReporter:
    """Handles progress reporting to stderr while keeping stdout clean for data."""

    def __init__(self, enabled: Optional[bool] = None, force_tty: bool = False,
                 use_colors: Optional[bool] = None):
        """
        Initialize progress reporter.

        Args:
            enabled: Explicitly enable/disable progress. None = auto-detect
            force_tty: Treat stderr as TTY even if it's not (for testing)
            use_colors: Use ANSI colors in output
        """
        if enabled is None:
            # Auto-detect: show progress if stderr is a terminal
            self.enabled = sys.stderr.isatty() or force_tty
        else:
            self.enabled = enabled

        if use_colors is None:
            self.use_colors = sys.stderr.isatty() and os.environ.get('NO_COLOR') is None
        else:
            self.use_colors = use_colors

        self.start_time: Optional[float] = None
        self.last_update: float = 0.0
        self.min_update_interval = 0.1  # Don't update more than 10x per second
        self.interrupted = False

        # Signal handlers can only be installed from the main thread
        try:
            signal.signal(signal.SIGINT, self._handle_interrupt)
        except ValueError:
            logger.debug("Not on the main thread; leaving the SIGINT handler alone")

        self.colors = {
            'reset': '\033[0m',
            'dim': '\033[2m',
            'red': '\033[31m',
            'green': '\033[32m',
            'yellow': '\033[33m',
        }

    def _handle_interrupt(self, signum, frame):
        """Handle Ctrl+C gracefully."""
        self.interrupted = True
        if self.enabled:
            print("\n\nInterrupted by user", file=sys.stderr, flush=True)
        sys.exit(130)  # Standard exit code for SIGINT

    def _colorize(self, text: str, color: str) -> str:
        """Add color to text if colors are enabled."""
        if self.use_colors and color in self.colors:
            return f"{self.colors[color]}{text}{self.colors['reset']}"
        return text

    def __call__(self, message: str, force: bool = False, level: LogLevel = LogLevel.INFO):
        """
        Output progress message to stderr if enabled.

        Args:
            message: Progress message to display
            force: Force output even if disabled
            level: Log level for the message
        """
        if force or self.enabled:
            current_time = time.time()
            if level != LogLevel.INFO or current_time - self.last_update >= self.min_update_interval:
                if level == LogLevel.ERROR:
                    message = self._colorize(f"✗ {message}", 'red')
                elif level == LogLevel.WARNING:
                    message = self._colorize(f"⚠ {message}", 'yellow')
                elif level == LogLevel.SUCCESS:
                    message = self._colorize(f"✓ {message}", 'green')
                elif level == LogLevel.DEBUG:
                    message = self._colorize(f"  {message}", 'dim')

                print(message, file=sys.stderr, flush=True)
                self.last_update = current_time

    def error(self, message: str):
        """Always output errors to stderr."""
        error_msg = self._colorize(f"ERROR: {message}", 'red')
        print(error_msg, file=sys.stderr, flush=True)

    def warning(self, message: str):
        """Always output warnings to stderr."""
        warning_msg = self._colorize(f"WARNING: {message}", 'yellow')
        print(warning_msg, file=sys.stderr, flush=True)

    def success(self, message: str):
        """Output success message if enabled."""
        if self.enabled:
            self(message, level=LogLevel.SUCCESS)

    @contextmanager
    def task(self, description: str, every: int = 10000):
        """
        Context manager for tracking a task of unknown size.

        Args:
            description: Task description
            every: Report a running count once per this many items

        Example:
            with progress.task("Scanning objects") as update:
                for i, h in enumerate(hashes, 1):
                    update(i)
        """
        self.start_time = time.time()

        if self.enabled:
            print(f"{description}...", file=sys.stderr, flush=True)

        def update(current: int, item: str = ""):
            """Update progress for current item."""
            if not self.enabled or current % every or self.start_time is None:
                return
            elapsed = time.time() - self.start_time
            rate = current / elapsed if elapsed > 0 else 0
            msg = f"  [{current}] {item} ({rate:.0f}/s)" if item else f"  [{current}] ({rate:.0f}/s)"
            if sys.stderr.isatty():
                print(f"\r{msg}", end="", file=sys.stderr, flush=True)
            else:
                self(msg)

        try:
            yield update
        finally:
            if self.enabled and sys.stderr.isatty():
                print(file=sys.stderr)  # New line after progress

            if self.enabled:
                elapsed = time.time() - self.start_time
                print(f"Completed in {elapsed:.1f}s", file=sys.stderr, flush=True)


# Global progress reporter instance
_progress = None


def get_progress(enabled: Optional[bool] = None) -> ProgressReporter:
    """
    Get the global progress reporter.

    Args:
        enabled: Override auto-detection of progress display

    Returns:
        ProgressReporter instance
    """
    global _progress
    if _progress is None or enabled is not None:
        _progress = ProgressReporter(enabled)
    return _progress


# Environment variable override
if os.environ.get('HASHRARITY_PROGRESS') == '0':
    _progress = ProgressReporter(enabled=False)
elif os.environ.get('HASHRARITY_PROGRESS') == '1':
    _progress = ProgressReporter(enabled=True)
