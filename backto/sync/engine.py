"""Core backup engine for reconciling source, target and state."""

import logging
from contextlib import AbstractContextManager, nullcontext
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..output import OutputFormatter
from ..utils import format_count, is_reserved_root_name, relative_target_path
from .codec import is_encodable_name
from .operations import FileSystemOperations
from .state import StateFileManager
from .tree import StateTree

logger = logging.getLogger(__name__)


@dataclass
class BackupStats:
    """Running counters of one backup run.

    Only the engine writes these; a progress display may poll them from
    another thread. Counters only ever grow during a run.
    """

    created: int = 0
    """Files copied that were not in the backup before"""

    changed: int = 0
    """Files copied over an older backed-up version"""

    deleted: int = 0
    """Files and directories removed from the target"""

    failing: int = 0
    """Paths that could not be processed in this run"""

    failed_paths: list[str] = field(default_factory=list)
    """Failing paths, relative to the target root"""

    @property
    def total_actions(self) -> int:
        """Number of filesystem changes made in the target."""
        return self.created + self.changed + self.deleted

    def to_dict(self) -> dict:
        """Convert stats to dictionary for JSON output."""
        return asdict(self)


class DeletionResult(Enum):
    """Outcome of removing a target subtree."""

    SUCCESS = "success"
    """Everything, including the directory itself, was removed"""

    SOME_FAILED = "some_failed"
    """Some entries were removed; the failed ones were already recorded"""

    ALL_FAILED = "all_failed"
    """Nothing could be removed, or the emptied directory itself could not"""


class BackupEngine:
    """Core backup engine that mirrors a source tree into a target tree."""

    def __init__(
        self,
        operations: Optional[FileSystemOperations] = None,
        output: Optional[OutputFormatter] = None,
    ):
        """Initialize backup engine.

        Args:
            operations: Filesystem primitives (defaults to the real filesystem)
            output: Output formatter for displaying the summary
        """
        self.operations = operations or FileSystemOperations()
        self.output = output or OutputFormatter()
        self.stats = BackupStats()
        self._source_root = Path()
        self._target_root = Path()

    def backup(
        self,
        source: Union[str, Path],
        target: Union[str, Path],
        stats: Optional[BackupStats] = None,
        progress: Optional[AbstractContextManager] = None,
    ) -> BackupStats:
        """Run one complete backup of source into target.

        Loads the target's state, reconciles everything, then persists the
        new state. The progress display is stopped before the state file is
        written, so the state file is the last thing a run produces.

        Args:
            source: Directory to back up
            target: Backup target directory
            stats: Counters to update (a fresh set if omitted)
            progress: Context manager wrapped around the reconciliation,
                typically a live display of ``stats``

        Returns:
            The run's counters

        Examples:
            >>> engine = BackupEngine()
            >>> stats = engine.backup("/home/user/docs", "/mnt/backup/docs")
            >>> print(f"Copied {stats.created} new files")
        """
        manager = StateFileManager(target)
        state = manager.load()

        with progress if progress is not None else nullcontext():
            stats = self.run(source, target, state, stats)

        manager.save(state)
        return stats

    def run(
        self,
        source: Union[str, Path],
        target: Union[str, Path],
        state: StateTree,
        stats: Optional[BackupStats] = None,
    ) -> BackupStats:
        """Reconcile a target with its source, mutating the state in place.

        Args:
            source: Directory to back up
            target: Backup target directory
            state: State tree of the target, updated to what the target holds
            stats: Counters to update (a fresh set if omitted)

        Returns:
            The run's counters

        Raises:
            ValueError: If source or target is not an existing directory
        """
        source_root = Path(source)
        target_root = Path(target)
        for label, root in (("Source", source_root), ("Target", target_root)):
            if not root.exists():
                raise ValueError(f"{label} directory does not exist: {root}")
            if not root.is_dir():
                raise ValueError(f"{label} path is not a directory: {root}")

        self.stats = stats if stats is not None else BackupStats()
        self._source_root = source_root
        self._target_root = target_root

        logger.debug(f"Backing up {source_root} to {target_root}")
        self.reconcile(source_root, target_root, state)
        logger.debug(
            f"Backup finished: created={self.stats.created} "
            f"changed={self.stats.changed} deleted={self.stats.deleted} "
            f"failing={self.stats.failing}"
        )
        return self.stats

    def reconcile(self, source_dir: Path, target_dir: Path, node: StateTree) -> None:
        """Align one target directory and its state node with the source.

        Stale entries are purged before new ones are created, so a name that
        changed between file and directory is never handled twice.

        Args:
            source_dir: Source directory
            target_dir: Corresponding target directory
            node: State of ``target_dir``
        """
        try:
            dir_names, file_names, link_names = self.operations.list_directory(
                source_dir
            )
        except PermissionError as e:
            # Leave the state alone; nothing is purged on a failed listing
            logger.warning(f"Cannot list source directory {source_dir}: {e}")
            self._record_failure(target_dir)
            return

        for name in link_names:
            logger.warning(f"Skipping {source_dir / name}: symlink to a directory")
            self._record_failure(target_dir / name)

        is_root = target_dir == self._target_root
        dir_names = self._accepted_names(dir_names, target_dir, is_root)
        file_names = self._accepted_names(file_names, target_dir, is_root)
        source_dirs = set(dir_names)
        source_files = set(file_names)

        self._purge_directories(target_dir, node, source_dirs)
        self._purge_files(target_dir, node, source_files)

        for name in dir_names:
            if name in node.files:
                logger.debug(f"Skipping {target_dir / name}: old file still pending")
                continue
            child_target = target_dir / name
            child = node.directories.get(name)
            if child is None:
                try:
                    self.operations.make_directory(child_target)
                except PermissionError as e:
                    logger.warning(f"Cannot create directory {child_target}: {e}")
                    self._record_failure(child_target)
                    continue
                child = StateTree()
                node.directories[name] = child
            self.reconcile(source_dir / name, child_target, child)

        for name in file_names:
            if name in node.directories:
                logger.debug(
                    f"Skipping {target_dir / name}: old directory still pending"
                )
                continue
            self._backup_file(source_dir / name, target_dir / name, node)

    def delete_subtree(self, path: Path, node: StateTree) -> DeletionResult:
        """Remove a target directory and everything the state knows inside it.

        Deletes whatever it can and keeps state entries for whatever it
        cannot, so a later run can retry. Failed paths are surfaced here
        only when something at this level succeeded; a subtree where nothing
        could be removed is left for the caller to report as a single path.

        Args:
            path: Target directory to remove
            node: State of ``path``, pruned as entries are removed

        Returns:
            Deletion outcome for ``path``
        """
        any_succeeded = False
        failed: list[str] = []

        for name, child in list(node.directories.items()):
            child_path = path / name
            result = self.delete_subtree(child_path, child)
            if result is DeletionResult.SUCCESS:
                del node.directories[name]
                any_succeeded = True
            elif result is DeletionResult.SOME_FAILED:
                any_succeeded = True
            else:
                failed.append(self._relative(child_path))

        for name in list(node.files):
            file_path = path / name
            try:
                self.operations.delete_file(file_path)
            except OSError as e:
                logger.warning(f"Cannot delete file {file_path}: {e}")
                failed.append(self._relative(file_path))
                continue
            del node.files[name]
            self.stats.deleted += 1
            any_succeeded = True

        if not failed:
            try:
                self.operations.delete_directory(path)
            except OSError as e:
                logger.warning(f"Cannot delete directory {path}: {e}")
                return DeletionResult.ALL_FAILED
            self.stats.deleted += 1
            return DeletionResult.SUCCESS

        if any_succeeded:
            self.stats.failed_paths.extend(failed)
            self.stats.failing += len(failed)
            return DeletionResult.SOME_FAILED

        return DeletionResult.ALL_FAILED

    def display_summary(self, stats: BackupStats) -> None:
        """Display backup summary.

        Args:
            stats: Counters of the finished run
        """
        self.output.print("")
        self.output.success("Backup complete!")

        if stats.total_actions > 0:
            self.output.info(f"Total actions: {stats.total_actions}")
            if stats.created > 0:
                self.output.info(f"  Created: {stats.created}")
            if stats.changed > 0:
                self.output.info(f"  Changed: {stats.changed}")
            if stats.deleted > 0:
                self.output.info(f"  Deleted: {stats.deleted}")
        else:
            self.output.info("No changes needed - backup is up to date!")

        if stats.failing > 0:
            self.output.warning(
                f"{format_count(stats.failing, 'path')} failed "
                "and will be retried on the next run:"
            )
            for failed_path in stats.failed_paths:
                self.output.warning(f"  {failed_path}")

    def _purge_directories(
        self, target_dir: Path, node: StateTree, source_dirs: set[str]
    ) -> None:
        """Remove backed-up directories that no longer exist in the source."""
        for name, child in list(node.directories.items()):
            if name in source_dirs:
                continue
            child_path = target_dir / name
            result = self.delete_subtree(child_path, child)
            if result is DeletionResult.SUCCESS:
                del node.directories[name]
            elif result is DeletionResult.ALL_FAILED:
                self._record_failure(child_path)

    def _purge_files(
        self, target_dir: Path, node: StateTree, source_files: set[str]
    ) -> None:
        """Remove backed-up files that no longer exist in the source."""
        for name in list(node.files):
            if name in source_files:
                continue
            file_path = target_dir / name
            try:
                self.operations.delete_file(file_path)
            except OSError as e:
                logger.warning(f"Cannot delete file {file_path}: {e}")
                self._record_failure(file_path)
                continue
            del node.files[name]
            self.stats.deleted += 1

    def _backup_file(
        self, source_path: Path, target_path: Path, node: StateTree
    ) -> None:
        """Copy one source file if it is new or changed since the last run."""
        try:
            fingerprint = self.operations.fingerprint(source_path)
        except FileNotFoundError:
            # Removed since the listing, or a dangling symlink
            logger.warning(f"Source file disappeared: {source_path}")
            self._record_failure(target_path)
            return

        if node.files.get(source_path.name) == fingerprint:
            return

        try:
            self.operations.copy_file(source_path, target_path)
        except PermissionError as e:
            logger.warning(f"Cannot copy {source_path}: {e}")
            self._record_failure(target_path)
            return

        if self._store_fingerprint(node, source_path.name, fingerprint):
            self.stats.created += 1
        else:
            self.stats.changed += 1

    @staticmethod
    def _store_fingerprint(node: StateTree, name: str, fingerprint: str) -> bool:
        """Record a file's fingerprint.

        Returns:
            True if the file was new to the state, False if it was updated
        """
        created = name not in node.files
        node.files[name] = fingerprint
        return created

    def _accepted_names(
        self, names: list[str], target_dir: Path, is_root: bool
    ) -> list[str]:
        """Drop source names that cannot be backed up, recording each one."""
        accepted = []
        for name in names:
            if not is_encodable_name(name):
                logger.warning(
                    f"Skipping {target_dir / name}: "
                    "name contains one of '=', '(', ')', ';'"
                )
                self._record_failure(target_dir / name)
            elif is_root and is_reserved_root_name(name):
                logger.warning(
                    f"Skipping {target_dir / name}: name is reserved for the "
                    "backup state"
                )
                self._record_failure(target_dir / name)
            else:
                accepted.append(name)
        return accepted

    def _record_failure(self, path: Path) -> None:
        self.stats.failed_paths.append(self._relative(path))
        self.stats.failing += 1

    def _relative(self, path: Path) -> str:
        return relative_target_path(path, self._target_root)
