"""Exceptions raised by backto."""


class BacktoError(Exception):
    """Base exception for all backto errors."""


class BacktoSourceError(BacktoError):
    """Raised when the source directory cannot be used for a backup."""


class BacktoTargetError(BacktoError):
    """Raised when the target directory cannot be used as a backup target."""


class BacktoStateError(BacktoError):
    """Raised when the backup state file cannot be read or written."""


class StateEncodeError(BacktoStateError, ValueError):
    """Raised when a state tree holds a name the state format cannot store."""
