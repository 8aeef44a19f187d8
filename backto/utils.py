"""Utility functions and constants for backto."""

from pathlib import Path
from typing import Union

# =============================================================================
# Constants for backup runs
# =============================================================================

# Name of the state file kept at the root of every backup target
STATE_FILE_NAME: str = "BackupState.bin"

# Temporary sibling used while the state file is being replaced
STATE_TEMP_FILE_NAME: str = STATE_FILE_NAME + ".tmp"

# Redraw rate of the live counters (10 Hz)
DEFAULT_REFRESH_PER_SECOND: float = 10.0

# Bounds accepted for --refresh-rate
MIN_REFRESH_PER_SECOND: float = 0.5
MAX_REFRESH_PER_SECOND: float = 60.0


# =============================================================================
# Path utilities
# =============================================================================


def relative_target_path(path: Union[str, Path], target_root: Union[str, Path]) -> str:
    """Express a path inside the backup target relative to the target root.

    Args:
        path: Absolute or root-prefixed path inside the target
        target_root: Root directory of the backup target

    Returns:
        Relative path using forward slashes on all platforms

    Examples:
        >>> relative_target_path("/backup/a/b.txt", "/backup")
        'a/b.txt'
        >>> relative_target_path("/backup", "/backup")
        '.'
    """
    return Path(path).relative_to(Path(target_root)).as_posix()


def is_reserved_root_name(name: str) -> bool:
    """Check whether a root-level name collides with the backup's own files.

    Examples:
        >>> is_reserved_root_name("BackupState.bin")
        True
        >>> is_reserved_root_name("notes.txt")
        False
    """
    return name in (STATE_FILE_NAME, STATE_TEMP_FILE_NAME)


# =============================================================================
# Formatting utilities
# =============================================================================


def format_count(count: int, noun: str) -> str:
    """Format a count with a naively pluralized noun.

    Examples:
        >>> format_count(1, "file")
        '1 file'
        >>> format_count(3, "path")
        '3 paths'
    """
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"
