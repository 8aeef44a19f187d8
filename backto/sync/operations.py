"""Filesystem operations used by the backup engine."""

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class FileSystemOperations:
    """Filesystem primitives behind a common interface.

    Every method raises an ``OSError`` subclass on failure. The engine
    decides which failures are recorded per entry and which abort a run,
    so nothing is caught here except the "already gone" cases of deletion.
    """

    def list_directory(
        self, directory: Path
    ) -> tuple[list[str], list[str], list[str]]:
        """List the entries of one directory.

        Symbolic links to directories are not followed; they are listed on
        their own so the caller can skip them. A link to a file is listed as
        a file and copied as the file it points to.

        Args:
            directory: Directory to list

        Returns:
            Tuple of (directory names, file names, directory link names),
            each sorted
        """
        dir_names: list[str] = []
        file_names: list[str] = []
        link_names: list[str] = []
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_dir(follow_symlinks=False):
                    dir_names.append(entry.name)
                elif entry.is_symlink() and entry.is_dir():
                    link_names.append(entry.name)
                else:
                    file_names.append(entry.name)
        return sorted(dir_names), sorted(file_names), sorted(link_names)

    def fingerprint(self, path: Path) -> str:
        """Compute the change fingerprint of a file.

        The fingerprint is the last-write time in nanoseconds, which stays
        stable while a file is untouched and changes whenever it is written.

        Args:
            path: File to fingerprint

        Returns:
            Integer string
        """
        return str(path.stat().st_mtime_ns)

    def copy_file(self, source: Path, target: Path) -> None:
        """Copy a file's content and metadata, overwriting the target.

        Args:
            source: File to copy
            target: Destination path
        """
        shutil.copy2(source, target)

    def make_directory(self, path: Path) -> None:
        """Create a directory; an existing directory is left as is.

        Args:
            path: Directory to create
        """
        path.mkdir(exist_ok=True)

    def delete_file(self, path: Path) -> None:
        """Delete a file. A file that is already gone counts as deleted.

        Args:
            path: File to delete
        """
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug(f"File already absent: {path}")

    def delete_directory(self, path: Path) -> None:
        """Delete an empty directory. One that is already gone counts as deleted.

        Args:
            path: Directory to delete
        """
        try:
            path.rmdir()
        except FileNotFoundError:
            logger.debug(f"Directory already absent: {path}")
