"""
Error taxonomy for the storage gateway.

Only two conditions ever reach a caller of ``store``: no input, or a local
disk failure. Everything raised by the remote tier is absorbed inside the
gateway and degrades to local-only persistence.
"""

from typing import Optional


class StorageError(Exception):
    """Base exception for storage gateway failures."""

    def __init__(self, message: str, details: Optional[dict[str, str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EmptyInputError(StorageError, ValueError):
    """Raised when a caller hands ``store`` no content."""
    pass


class LocalWriteError(StorageError, OSError):
    """Raised when an object cannot be written to the local tier."""
    pass


class LocalStorageError(StorageError, OSError):
    """Raised at startup when no local root directory can be created."""
    pass


class RemoteTransientError(StorageError):
    """
    Any failure talking to the remote object store.

    Never escapes the gateway. Network, auth and quota problems all land here.
    """
    pass


class RemoteUnavailableError(StorageError):
    """Remote tier is not configured or failed its startup probe."""
    pass
