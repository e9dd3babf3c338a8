"""
Remote object store client for the storage gateway.

Talks to AWS S3 or any S3-compatible store (MinIO, R2) through boto3.
Every botocore failure is converted to RemoteTransientError so the
gateway only has one exception type to absorb.

An in-memory store is included for local development and tests.
"""

import logging
from dataclasses import dataclass
from typing import BinaryIO, Optional, Protocol, Union

from ...core.storage.errors import RemoteTransientError

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"

# S3 answers 404 in a few different shapes depending on the call
_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


@dataclass
class StorageConfig:
    """
    Remote tier credentials and location.

    Blank or template values are allowed here; initialization decides
    whether they are usable.
    """
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    region: str = DEFAULT_REGION
    endpoint_url: Optional[str] = None


class RemoteObjectStore(Protocol):
    """
    Operations the gateway needs from a remote tier.

    Implementations raise RemoteTransientError for every failure.
    """

    bucket_name: str
    region: str

    def bucket_location(self) -> Optional[str]:
        """Return the raw location constraint reported for the bucket."""
        ...

    def put_object(
        self,
        key: str,
        body: Union[bytes, BinaryIO],
        content_length: int,
        content_type: str,
    ) -> None:
        ...

    def presigned_get_url(self, key: str, expiry_seconds: int) -> str:
        ...

    def object_exists(self, key: str) -> bool:
        ...

    def delete_object(self, key: str) -> None:
        ...


class S3ObjectStore:
    """
    boto3-backed remote tier.

    A client is bound to one region. S3 rejects signed requests sent to
    the wrong region, so initialization may build a second instance once
    the bucket's real region is known.
    """

    def __init__(self, config: StorageConfig, region: str) -> None:
        """
        Build the boto3 client.

        boto3 is imported here so the in-memory store and local-only mode
        never pay for it.
        """
        try:
            import boto3
            from botocore.config import Config
            from botocore.exceptions import BotoCoreError, ClientError
        except ImportError:
            raise ImportError(
                "boto3 is required for the remote tier. Install with: pip install boto3"
            )

        self.bucket_name = config.bucket_name
        self.region = region
        self._ClientError = ClientError
        self._errors = (BotoCoreError, ClientError)

        boto_config = Config(signature_version="s3v4")

        try:
            self._s3_client = boto3.client(
                "s3",
                endpoint_url=config.endpoint_url,
                aws_access_key_id=config.access_key_id,
                aws_secret_access_key=config.secret_access_key,
                region_name=region,
                config=boto_config,
            )
        except (ValueError, *self._errors) as e:
            # boto3 rejects a malformed endpoint_url with a plain ValueError
            raise RemoteTransientError(f"Client construction failed: {e}")

        logger.info(
            "Initialized S3 object store client",
            extra={"bucket": config.bucket_name, "region": region},
        )

    def bucket_location(self) -> Optional[str]:
        try:
            response = self._s3_client.get_bucket_location(Bucket=self.bucket_name)
        except self._errors as e:
            raise RemoteTransientError(
                f"Bucket location probe failed: {e}",
                details={"bucket": self.bucket_name},
            )
        return response.get("LocationConstraint")

    def put_object(
        self,
        key: str,
        body: Union[bytes, BinaryIO],
        content_length: int,
        content_type: str,
    ) -> None:
        try:
            self._s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=body,
                ContentLength=content_length,
                ContentType=content_type,
            )
        except self._errors as e:
            raise RemoteTransientError(f"Upload failed: {e}", details={"key": key})

        logger.debug(
            "Uploaded object",
            extra={"key": key, "size_bytes": content_length},
        )

    def presigned_get_url(self, key: str, expiry_seconds: int) -> str:
        """
        Generate a time-limited GET URL.

        Signing happens locally; S3 is not contacted and the object is not
        checked for existence.
        """
        try:
            return self._s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=expiry_seconds,
            )
        except self._errors as e:
            raise RemoteTransientError(
                f"Presigned URL generation failed: {e}", details={"key": key}
            )

    def object_exists(self, key: str) -> bool:
        try:
            self._s3_client.head_object(Bucket=self.bucket_name, Key=key)
            return True
        except self._ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                return False
            raise RemoteTransientError(f"Existence check failed: {e}", details={"key": key})
        except self._errors as e:
            raise RemoteTransientError(f"Existence check failed: {e}", details={"key": key})

    def delete_object(self, key: str) -> None:
        try:
            self._s3_client.delete_object(Bucket=self.bucket_name, Key=key)
        except self._errors as e:
            raise RemoteTransientError(f"Delete failed: {e}", details={"key": key})


# ---------------------------------------------------------------------------
# In-memory store for local development
# ---------------------------------------------------------------------------

class InMemoryObjectStore:
    """
    Remote tier kept in a dict.

    Lets the full upload -> offload -> reclaim flow run without a bucket.
    Presigned URLs use a ``memory://`` scheme and, like real S3 signing,
    are issued whether or not the object exists.
    """

    def __init__(
        self,
        bucket_name: str = "memory",
        region: str = DEFAULT_REGION,
        location: Optional[str] = None,
    ) -> None:
        self.bucket_name = bucket_name
        self.region = region
        self._location = location
        self._objects: dict[str, bytes] = {}
        self._content_types: dict[str, str] = {}
        logger.info("Initialized in-memory object store", extra={"bucket": bucket_name})

    def bucket_location(self) -> Optional[str]:
        return self._location

    def put_object(
        self,
        key: str,
        body: Union[bytes, BinaryIO],
        content_length: int,
        content_type: str,
    ) -> None:
        data = body if isinstance(body, bytes) else body.read()
        if len(data) != content_length:
            raise RemoteTransientError(
                f"Content length mismatch: declared {content_length}, got {len(data)}",
                details={"key": key},
            )
        self._objects[key] = data
        self._content_types[key] = content_type

    def presigned_get_url(self, key: str, expiry_seconds: int) -> str:
        return f"memory://{self.bucket_name}/{key}?expires={expiry_seconds}"

    def object_exists(self, key: str) -> bool:
        return key in self._objects

    def delete_object(self, key: str) -> None:
        self._objects.pop(key, None)
        self._content_types.pop(key, None)

    def get_object(self, key: str) -> bytes:
        """Return stored bytes. Only the in-memory store offers reads."""
        if key not in self._objects:
            raise RemoteTransientError(f"Object not found: {key}")
        return self._objects[key]

    def content_type_of(self, key: str) -> Optional[str]:
        return self._content_types.get(key)


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_object_store(
    config: StorageConfig,
    region: str,
    mock_mode: bool = False,
) -> RemoteObjectStore:
    """
    Create a remote store bound to ``region``.

    Args:
        config: Remote tier configuration
        region: Region the client signs requests for
        mock_mode: If True, return an in-memory store

    Returns:
        RemoteObjectStore implementation (S3 or in-memory)
    """
    if mock_mode:
        return InMemoryObjectStore(bucket_name=config.bucket_name or "memory", region=region)

    return S3ObjectStore(config, region)
