"""
Standard exit codes for hashrarity commands.

Following Unix/POSIX conventions for command-line tools.
"""
from pathlib import Path
from typing import Optional, Union

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NO_REPOSITORY = 64       # Path is not a git repository
CONFIG_ERROR = 66        # Configuration file error
PERMISSION_ERROR = 67    # Insufficient permissions
DATA_ERROR = 70          # Data format or validation error
PARTIAL_SUCCESS = 71     # Enumeration stopped early, partial summary reported
STORE_UNREADABLE = 72    # Object store could not be read
CORRUPT_OBJECT = 73      # An object entry's hash could not be determined
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ValueError': DATA_ERROR,
    'InvalidHashLength': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'ConfigError': CONFIG_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class NoRepositoryError(CommandError):
    """Raised when a path does not belong to a git repository."""
    def __init__(self, message: str = "Not a git repository"):
        super().__init__(message, NO_REPOSITORY)


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)


class PartialSuccessError(CommandError):
    """Raised after a partial summary was reported for an interrupted scan."""
    def __init__(self, message: str, succeeded: int = 0, failed: int = 0):
        super().__init__(message, PARTIAL_SUCCESS)
        self.succeeded = succeeded
        self.failed = failed


class StoreUnreadable(CommandError):
    """
    The object store handle is invalid or its storage cannot be read.

    Covers a missing objects directory, permission problems and any I/O
    error while listing loose objects or reading pack indexes.
    """
    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(f"Object store unreadable at {path}: {reason}", STORE_UNREADABLE)
        self.path = str(path)
        self.reason = reason


class CorruptObject(CommandError):
    """
    An object entry whose hash cannot be extracted.

    Attributes:
        pack: Path of the offending pack index
        offset: Byte offset of the bad entry inside the index, if known
    """
    def __init__(self, pack: Union[str, Path], reason: str, offset: Optional[int] = None):
        location = f"{pack}" if offset is None else f"{pack} at offset {offset}"
        super().__init__(f"Corrupt object entry in {location}: {reason}", CORRUPT_OBJECT)
        self.pack = str(pack)
        self.offset = offset
        self.reason = reason
