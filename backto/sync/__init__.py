"""Backup engine for backto - state tracking and incremental mirroring."""

from .codec import RESERVED_CHARACTERS, decode_tree, encode_tree, is_encodable_name
from .engine import BackupEngine, BackupStats, DeletionResult
from .operations import FileSystemOperations
from .state import StateFileManager
from .tree import StateTree

__all__ = [
    "BackupEngine",
    "BackupStats",
    "DeletionResult",
    "FileSystemOperations",
    "StateFileManager",
    "StateTree",
    "RESERVED_CHARACTERS",
    "decode_tree",
    "encode_tree",
    "is_encodable_name",
]
