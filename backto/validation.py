"""Preflight checks for backup source and target directories."""

import logging
import os
from pathlib import Path
from typing import Union

from .exceptions import BacktoSourceError, BacktoTargetError
from .sync.state import StateFileManager

logger = logging.getLogger(__name__)


def is_directory_empty(path: Union[str, Path]) -> bool:
    """Check whether a directory has no entries at all.

    Args:
        path: Directory to inspect

    Returns:
        True if the directory contains no files and no subdirectories
    """
    with os.scandir(path) as entries:
        return next(entries, None) is None


def validate_backup_paths(source: Union[str, Path], target: Union[str, Path]) -> bool:
    """Check that a source can be backed up into a target.

    A target without a state file must be empty, so that an unrelated
    directory is never silently adopted as a fresh backup.

    Args:
        source: Directory to back up
        target: Backup target directory

    Returns:
        True if the target already holds a backup, False for a fresh one

    Raises:
        BacktoSourceError: If the source is not an existing directory
        BacktoTargetError: If the target is not an existing directory, or it
            lies inside the source, or has no state file and is not empty
    """
    source_path = Path(source)
    target_path = Path(target)

    if not source_path.is_dir():
        raise BacktoSourceError(f"Invalid source: {source} is not a directory")
    if not target_path.is_dir():
        raise BacktoTargetError(f"Invalid target: {target} is not a directory")

    resolved_source = source_path.resolve()
    resolved_target = target_path.resolve()
    if resolved_target == resolved_source or resolved_source in resolved_target.parents:
        raise BacktoTargetError(
            f"Invalid target: {target} lies inside the source {source}"
        )

    manager = StateFileManager(target_path)
    if manager.exists():
        logger.debug(f"Updating existing backup in {target_path}")
        return True

    if not is_directory_empty(target_path):
        raise BacktoTargetError(
            f"The target doesn't contain {manager.state_file.name} but isn't empty!"
        )

    logger.debug(f"Creating fresh backup in {target_path}")
    return False
