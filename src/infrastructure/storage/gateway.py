"""
Tiered storage gateway.

Every upload lands on local disk first. If the remote tier is usable the
object is then copied there and the local file is deleted. Reads prefer
the remote tier, fall back to local disk, and URL generation finally
falls back to generic placeholder URLs so callers always get a link.

Which tiers are usable is decided once by ``initialize`` and captured in
an immutable BackendState that is passed to the gateway.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Optional
from urllib.parse import quote

from ...core.storage.errors import (
    EmptyInputError,
    LocalWriteError,
    RemoteTransientError,
    RemoteUnavailableError,
)
from ...core.storage.keys import ObjectKey, is_blank_key, is_video_key, new_object_key
from .client import RemoteObjectStore, StorageConfig, create_object_store
from .credentials import is_blank_or_placeholder, normalize_bucket_region, resolve_region
from .local import UPLOADS_DIR_NAME, LocalTier, resolve_local_root

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_URL_EXPIRY_SECONDS = 2 * 60 * 60
PLACEHOLDER_IMAGE_URL = "https://images.unsplash.com/photo-1516321318423-f06f85e504b3?w=800&q=80"
SAMPLE_VIDEO_URL = "https://www.w3schools.com/html/mov_bbb.mp4"

_FIRST_CHUNK_SIZE = 64 * 1024

StoreFactory = Callable[[StorageConfig, str], RemoteObjectStore]


@dataclass(frozen=True)
class BackendState:
    """
    Which tiers are usable, computed once at startup.

    ``remote`` is set only when the remote tier passed credential screening
    and the bucket probe.
    """
    local_root: Path
    remote: Optional[RemoteObjectStore] = None

    @property
    def remote_enabled(self) -> bool:
        return self.remote is not None


@dataclass(frozen=True)
class UrlPolicy:
    """Where URLs point when an object cannot be signed."""
    public_base_url: str = "http://localhost:8000"
    expiry_seconds: int = DEFAULT_URL_EXPIRY_SECONDS
    placeholder_image_url: str = PLACEHOLDER_IMAGE_URL
    sample_video_url: str = SAMPLE_VIDEO_URL


def initialize(
    config: StorageConfig,
    workdir: Optional[Path] = None,
    store_factory: Optional[StoreFactory] = None,
    force_local: bool = False,
) -> BackendState:
    """
    Build the BackendState for this process.

    The local root is mandatory: LocalStorageError propagates if no upload
    directory can be created. Every remote problem leaves the process in
    local-only mode instead.

    Args:
        config: Remote tier configuration (may hold blank/template values)
        workdir: Base directory for ``uploads``; defaults to the CWD
        store_factory: Builds a remote store for a region (default: boto3)
        force_local: Skip the remote tier entirely
    """
    local_root = resolve_local_root(workdir)

    try:
        remote = _connect_remote(config, store_factory or create_object_store, force_local)
    except RemoteUnavailableError as e:
        logger.warning(
            "Remote tier unavailable, using local storage only",
            extra={"reason": e.message, **e.details},
        )
        return BackendState(local_root=local_root)

    logger.info(
        "Remote tier initialized",
        extra={"bucket": remote.bucket_name, "region": remote.region},
    )
    return BackendState(local_root=local_root, remote=remote)


def _connect_remote(
    config: StorageConfig,
    store_factory: StoreFactory,
    force_local: bool,
) -> RemoteObjectStore:
    """Return a probed remote store bound to the bucket's region."""
    if force_local:
        raise RemoteUnavailableError("local-only mode forced by configuration")

    if (
        is_blank_or_placeholder(config.access_key_id)
        or is_blank_or_placeholder(config.secret_access_key)
        or is_blank_or_placeholder(config.bucket_name)
    ):
        raise RemoteUnavailableError("remote credentials not configured")

    configured_region = resolve_region(config.region)

    try:
        store = store_factory(config, configured_region)
        bucket_region = normalize_bucket_region(store.bucket_location())

        # Requests signed for the wrong region are rejected, so rebind
        if bucket_region.lower() != configured_region.lower():
            logger.info(
                "Bucket lives in a different region, rebuilding client",
                extra={"configured_region": configured_region, "bucket_region": bucket_region},
            )
            store = store_factory(config, bucket_region)
    except RemoteTransientError as e:
        raise RemoteUnavailableError(
            f"remote probe failed: {e.message}",
            details={"bucket": config.bucket_name},
        ) from e

    return store


class StorageGateway:
    """
    Store, locate and delete uploaded objects across both tiers.

    Only ``store`` raises, and only for conditions that make storing
    impossible (no input, local disk failure). ``url_for``, ``exists`` and
    ``delete`` never raise.
    """

    def __init__(self, state: BackendState, urls: Optional[UrlPolicy] = None) -> None:
        self._state = state
        self._local = LocalTier(state.local_root)
        self._urls = urls or UrlPolicy()

    @property
    def state(self) -> BackendState:
        return self._state

    # -----------------------------------------------------------------------
    # Write path
    # -----------------------------------------------------------------------

    def store(
        self,
        stream: Optional[BinaryIO],
        original_name: Optional[str],
        size_hint: Optional[int] = None,
        content_type: Optional[str] = None,
    ) -> ObjectKey:
        """
        Persist an upload and return its key.

        The local write must succeed before the remote tier is tried. A
        remote failure keeps the local copy and is not reported; a remote
        success removes the local copy.

        Raises:
            EmptyInputError: no stream, a zero size hint, or no bytes
            LocalWriteError: the local copy could not be written
        """
        if stream is None or size_hint == 0:
            raise EmptyInputError("File is empty or missing")

        first_chunk = stream.read(_FIRST_CHUNK_SIZE)
        if not first_chunk:
            raise EmptyInputError("File is empty or missing")

        key = new_object_key(original_name)

        try:
            written = self._local.write(key, first_chunk, stream)
        except (OSError, ValueError) as e:
            logger.error("Local write failed", extra={"key": key, "error": str(e)})
            raise LocalWriteError(f"Local write failed: {e}", details={"key": key}) from e

        logger.info(
            "Saved object locally",
            extra={"key": key, "size_bytes": written, "size_hint": size_hint},
        )

        if self._state.remote is not None:
            self._offload(key, written, content_type or DEFAULT_CONTENT_TYPE)

        return key

    def _offload(self, key: ObjectKey, size: int, content_type: str) -> None:
        """Copy the local file to the remote tier and reclaim local space."""
        remote = self._state.remote

        try:
            with self._local.open(key) as fh:
                remote.put_object(key, fh, size, content_type)
        except RemoteTransientError as e:
            logger.warning(
                "Remote upload failed, keeping local copy for serving",
                extra={"key": key, "error": e.message},
            )
            return
        except OSError as e:
            logger.warning(
                "Could not re-read local copy for remote upload",
                extra={"key": key, "error": str(e)},
            )
            return

        logger.info("Uploaded object to remote tier", extra={"key": key})

        # Remote is authoritative now; a stale local copy is harmless
        if self._local.remove(key):
            logger.debug("Deleted local copy after remote upload", extra={"key": key})

    # -----------------------------------------------------------------------
    # Read path
    # -----------------------------------------------------------------------

    def url_for(self, key: Optional[str]) -> str:
        """
        Best available URL for ``key``.

        Signed remote URL, then the local static URL, then a placeholder
        chosen by extension. A returned URL is not proof the object exists.
        """
        if is_blank_key(key):
            return self._urls.placeholder_image_url

        signed = self._remote_url(key)
        if signed is not None:
            return signed

        if self._local.exists(key):
            return self.local_url(key)

        if is_video_key(key):
            return self._urls.sample_video_url
        return self._urls.placeholder_image_url

    def local_url(self, key: ObjectKey) -> str:
        base = self._urls.public_base_url.rstrip("/")
        return f"{base}/{UPLOADS_DIR_NAME}/{quote(key, safe='')}"

    def _remote_url(self, key: ObjectKey) -> Optional[str]:
        if self._state.remote is None:
            return None
        try:
            return self._state.remote.presigned_get_url(key, self._urls.expiry_seconds)
        except RemoteTransientError as e:
            logger.warning("Presign failed", extra={"key": key, "error": e.message})
            return None

    def exists(self, key: Optional[str]) -> bool:
        """Local tier first; the remote tier only when local has nothing."""
        if is_blank_key(key):
            return False
        if self._local.exists(key):
            return True
        return bool(self._remote_exists(key))

    def _remote_exists(self, key: ObjectKey) -> Optional[bool]:
        if self._state.remote is None:
            return None
        try:
            return self._state.remote.object_exists(key)
        except RemoteTransientError as e:
            logger.warning("Remote existence check failed", extra={"key": key, "error": e.message})
            return None

    # -----------------------------------------------------------------------
    # Delete
    # -----------------------------------------------------------------------

    def delete(self, key: Optional[str]) -> None:
        """Remove ``key`` from both tiers. Idempotent, never raises."""
        if is_blank_key(key):
            return

        removed_local = self._local.remove(key)

        removed_remote = False
        if self._state.remote is not None:
            try:
                self._state.remote.delete_object(key)
                removed_remote = True
            except RemoteTransientError as e:
                logger.warning("Remote delete failed", extra={"key": key, "error": e.message})

        logger.debug(
            "Deleted object",
            extra={"key": key, "local": removed_local, "remote": removed_remote},
        )
