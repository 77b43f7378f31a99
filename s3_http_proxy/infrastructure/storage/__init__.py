"""
Object storage integration for serving bucket contents.

Supports S3-compatible backends via boto3.
Includes mock mode for local development without credentials.
"""

from .client import (
    ClientConstructionError,
    FetchErrorKind,
    MockStorageClient,
    ObjectFetchError,
    S3StorageClient,
    StorageClient,
    StorageClientError,
    StorageConnectionConfig,
    StoredObject,
    create_storage_client,
)

__all__ = [
    "ClientConstructionError",
    "FetchErrorKind",
    "MockStorageClient",
    "ObjectFetchError",
    "S3StorageClient",
    "StorageClient",
    "StorageClientError",
    "StorageConnectionConfig",
    "StoredObject",
    "create_storage_client",
]
