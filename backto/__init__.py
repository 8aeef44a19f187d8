"""backto - incremental mirror backups of a directory tree."""

from .exceptions import (
    BacktoError,
    BacktoSourceError,
    BacktoStateError,
    BacktoTargetError,
    StateEncodeError,
)
from .sync import (
    BackupEngine,
    BackupStats,
    DeletionResult,
    StateFileManager,
    StateTree,
    decode_tree,
    encode_tree,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BackupEngine",
    "BackupStats",
    "DeletionResult",
    "StateFileManager",
    "StateTree",
    "decode_tree",
    "encode_tree",
    "BacktoError",
    "BacktoSourceError",
    "BacktoStateError",
    "BacktoTargetError",
    "StateEncodeError",
]
