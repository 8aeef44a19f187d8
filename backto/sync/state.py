"""State management for tracking backup history.

The state of a backup lives inside the backup target itself, in a single
file at the target root. It records which directories and files the last
run left in the target, so the next run only has to process deltas and
can tell which target entries belong to files deleted from the source.
"""

import logging
import os
from pathlib import Path
from typing import Union

from ..exceptions import BacktoStateError
from ..utils import STATE_FILE_NAME, STATE_TEMP_FILE_NAME
from .codec import decode_tree, encode_tree
from .tree import StateTree

logger = logging.getLogger(__name__)


class StateFileManager:
    """Loads and saves the state tree of one backup target."""

    def __init__(self, target_root: Union[str, Path]):
        """Initialize state manager.

        Args:
            target_root: Root directory of the backup target
        """
        self.target_root = Path(target_root)

    @property
    def state_file(self) -> Path:
        """Path to the state file."""
        return self.target_root / STATE_FILE_NAME

    @property
    def temp_file(self) -> Path:
        """Path the state is written to before it replaces the state file."""
        return self.target_root / STATE_TEMP_FILE_NAME

    def exists(self) -> bool:
        """Check whether the target already holds a backup state."""
        return self.state_file.is_file()

    def load(self) -> StateTree:
        """Load the state tree of the target.

        Returns:
            The decoded tree, or an empty tree when no state file exists

        Raises:
            BacktoStateError: If the state file exists but cannot be read
        """
        if not self.exists():
            logger.debug(f"No backup state found at {self.state_file}")
            return StateTree()

        try:
            text = self.state_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise BacktoStateError(
                f"Failed to read backup state {self.state_file}: {e}"
            ) from e

        tree = decode_tree(text)
        logger.debug(
            f"Loaded backup state with {tree.count_files()} files in "
            f"{tree.count_directories()} directories from {self.state_file}"
        )
        return tree

    def save(self, tree: StateTree) -> None:
        """Replace the state file with the given tree.

        The encoded state is written to a temporary sibling first and then
        moved over the state file, so the previous state stays intact if
        writing fails.

        Args:
            tree: Root state tree to persist

        Raises:
            StateEncodeError: If the tree holds names the format cannot store
            BacktoStateError: If the state file cannot be written
        """
        text = encode_tree(tree)

        try:
            with open(self.temp_file, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(self.temp_file, self.state_file)
        except OSError as e:
            raise BacktoStateError(
                f"Failed to write backup state {self.state_file}: {e}"
            ) from e

        logger.debug(
            f"Saved backup state with {tree.count_files()} files "
            f"({len(text)} bytes) to {self.state_file}"
        )
