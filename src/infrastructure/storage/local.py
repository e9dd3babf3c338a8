"""
Local tier: a flat directory of uploaded objects.

Objects are stored directly under the root, one file per key. The same
directory is served at ``/uploads`` by the application.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO, Optional

from ...core.storage.errors import LocalStorageError

logger = logging.getLogger(__name__)

UPLOADS_DIR_NAME = "uploads"

_CHUNK_SIZE = 1024 * 1024


def resolve_local_root(workdir: Optional[Path] = None) -> Path:
    """
    Create the uploads directory and return its path.

    Tries ``<workdir>/uploads`` as an absolute path first, then a relative
    ``uploads``. Raises LocalStorageError only if neither can be created.
    """
    base = Path(workdir) if workdir is not None else Path(os.getcwd())
    root = (base / UPLOADS_DIR_NAME).absolute()

    try:
        root.mkdir(parents=True, exist_ok=True)
        logger.info("Local upload dir ready", extra={"local_root": str(root)})
        return root
    except OSError as e:
        logger.warning(
            "Could not create local upload dir, trying fallback",
            extra={"local_root": str(root), "error": str(e)},
        )

    fallback = Path(UPLOADS_DIR_NAME)
    try:
        fallback.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise LocalStorageError(
            f"No usable local upload directory: {e}",
            details={"primary": str(root), "fallback": str(fallback)},
        ) from e

    logger.warning("Using fallback upload dir", extra={"local_root": str(fallback)})
    return fallback


class LocalTier:
    """Filesystem operations on the local root."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def path_for(self, key: str) -> Optional[Path]:
        """
        Path of the file holding ``key``, or None if the key cannot name a
        file directly inside the root (separators, NUL, ``..``, empty).
        """
        if not key or key in (".", ".."):
            return None
        if "/" in key or "\\" in key or os.sep in key or "\x00" in key:
            return None
        return self.root / key

    def write(self, key: str, first_chunk: bytes, stream: BinaryIO) -> int:
        """
        Write ``first_chunk`` followed by the rest of ``stream``.

        Overwrites any existing file. Returns bytes written. Raises OSError
        (or ValueError for an unusable key); a partial file is removed.
        """
        path = self.path_for(key)
        if path is None:
            raise ValueError(f"Key cannot be stored under the local root: {key!r}")

        try:
            # The directory may have been removed since startup
            self.root.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as fh:
                fh.write(first_chunk)
                shutil.copyfileobj(stream, fh, _CHUNK_SIZE)
                written = fh.tell()
        except OSError:
            self.remove(key)
            raise

        return written

    def exists(self, key: str) -> bool:
        path = self.path_for(key)
        if path is None:
            return False
        try:
            return path.is_file()
        except OSError:
            # e.g. ENAMETOOLONG, which is_file() does not swallow
            return False

    def open(self, key: str) -> BinaryIO:
        path = self.path_for(key)
        if path is None:
            raise FileNotFoundError(key)
        return open(path, "rb")

    def remove(self, key: str) -> bool:
        """
        Delete the file for ``key``. Returns True if a file was removed.

        Missing files and OS errors are logged, never raised.
        """
        path = self.path_for(key)
        if path is None:
            return False
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(
                "Failed to delete local copy",
                extra={"key": key, "error": str(e)},
            )
            return False
