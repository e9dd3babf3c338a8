"""
Tiered object storage for uploaded files.

Local disk is always available; an S3-compatible remote tier is used when
credentials are configured and the bucket answers at startup.
"""

from .client import InMemoryObjectStore, RemoteObjectStore, S3ObjectStore, StorageConfig
from .gateway import BackendState, StorageGateway, UrlPolicy, initialize

__all__ = [
    "BackendState",
    "InMemoryObjectStore",
    "RemoteObjectStore",
    "S3ObjectStore",
    "StorageConfig",
    "StorageGateway",
    "UrlPolicy",
    "initialize",
]
