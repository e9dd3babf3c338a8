"""
Storage domain concepts.

Object keys and the error taxonomy shared by the storage gateway and its
callers. Nothing here touches the filesystem or the network.
"""

from .errors import (
    EmptyInputError,
    LocalStorageError,
    LocalWriteError,
    RemoteTransientError,
    RemoteUnavailableError,
    StorageError,
)
from .keys import VIDEO_EXTENSIONS, ObjectKey, is_blank_key, is_video_key, new_object_key

__all__ = [
    "EmptyInputError",
    "LocalStorageError",
    "LocalWriteError",
    "RemoteTransientError",
    "RemoteUnavailableError",
    "StorageError",
    "VIDEO_EXTENSIONS",
    "ObjectKey",
    "is_blank_key",
    "is_video_key",
    "new_object_key",
]
