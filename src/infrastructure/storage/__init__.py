"""
Object storage integration for bucket synchronization.

Supports AWS S3 and S3-compatible endpoints via boto3.
Includes mock mode for local development without credentials.
"""

from .client import (
    BucketNotFoundError,
    MockStorageClient,
    ObjectStorageClient,
    S3StorageClient,
    StorageConfig,
    StorageError,
    create_storage_client,
)

__all__ = [
    "BucketNotFoundError",
    "MockStorageClient",
    "ObjectStorageClient",
    "S3StorageClient",
    "StorageConfig",
    "StorageError",
    "create_storage_client",
]
