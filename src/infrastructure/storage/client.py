"""
Object storage client for bucket synchronization.

Talks to AWS S3 (or any S3-compatible endpoint) through boto3, with a
mock mode that keeps buckets in memory for local development and tests.

boto3 is synchronous. Every call is pushed onto a worker thread with
asyncio.to_thread so uploads into a bucket, and operations on different
buckets, actually run in parallel.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most this many keys per request
DELETE_BATCH_LIMIT = 1000


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


class BucketNotFoundError(StorageError, LookupError):
    """Raised when the target bucket does not exist."""

    def __init__(self, bucket_name: str) -> None:
        self.bucket_name = bucket_name
        super().__init__(f"The specified bucket does not exist: {bucket_name}")


@dataclass
class StorageConfig:
    """
    Configuration for the S3 client.

    region, profile and the CA bundle come from deployment configuration;
    endpoint_url is only set for S3-compatible stores (MinIO, R2, ...).
    """
    region: str = "us-east-1"
    profile: Optional[str] = None
    ca_bundle_path: Optional[str] = None
    endpoint_url: Optional[str] = None


class ObjectStorageClient(Protocol):
    """
    Protocol for object storage operations.

    Using a protocol means tests can provide mocks and the sync logic
    never sees boto3.
    """

    async def list_objects(self, bucket_name: str) -> list[str]:
        """Return every key in the bucket."""
        ...

    async def put_object(
        self,
        bucket_name: str,
        key: str,
        body: bytes,
        content_type: str,
    ) -> None:
        """Create or overwrite one object."""
        ...

    async def delete_objects(self, bucket_name: str, keys: list[str]) -> int:
        """Delete the given keys. Returns count deleted."""
        ...


class S3StorageClient:
    """
    AWS S3 object storage client.

    One instance is built per invocation and shared by every operation in
    that invocation. boto3 low-level clients are thread-safe, which is what
    makes the to_thread fan-out safe.
    """

    def __init__(self, config: StorageConfig) -> None:
        """
        Initialize the S3 client with boto3.

        A named profile selects credentials from the shared credentials
        file; a CA bundle path replaces the default certificate store
        (self-signed proxies, private endpoints).
        """
        try:
            import boto3
            from botocore.config import Config
            from botocore.exceptions import BotoCoreError
        except ImportError:
            raise ImportError(
                "boto3 is required for S3 storage. Install with: pip install boto3"
            )

        self._config = config

        if config.profile:
            logger.info("Using AWS profile", extra={"profile": config.profile})
        if config.ca_bundle_path:
            logger.info("Using custom CA bundle", extra={"ca_bundle": config.ca_bundle_path})

        try:
            session = boto3.Session(
                profile_name=config.profile or None,
                region_name=config.region,
            )

            self._s3_client = session.client(
                "s3",
                region_name=config.region,
                endpoint_url=config.endpoint_url,
                verify=config.ca_bundle_path or None,
                config=Config(signature_version="s3v4"),
            )
        except BotoCoreError as e:
            logger.error(
                "Failed to create S3 client",
                extra={"profile": config.profile, "region": config.region, "error": str(e)}
            )
            raise StorageError(f"Cannot create S3 client: {e}") from e

        logger.info(
            "Initialized S3 storage client",
            extra={
                "region": config.region,
                "endpoint": config.endpoint_url,
            }
        )

    async def list_objects(self, bucket_name: str) -> list[str]:
        """
        List every key in a bucket.

        Uses the list_objects_v2 paginator so buckets with more than
        1000 objects are listed completely.
        """
        try:
            return await asyncio.to_thread(self._list_all_keys, bucket_name)
        except Exception as e:
            raise self._translate(e, bucket_name, "List failed") from e

    def _list_all_keys(self, bucket_name: str) -> list[str]:
        paginator = self._s3_client.get_paginator("list_objects_v2")
        keys: list[str] = []
        for page in paginator.paginate(Bucket=bucket_name):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return keys

    async def put_object(
        self,
        bucket_name: str,
        key: str,
        body: bytes,
        content_type: str,
    ) -> None:
        """Upload one object."""
        try:
            await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=bucket_name,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except Exception as e:
            logger.error(
                "Failed to upload object",
                extra={"bucket": bucket_name, "key": key, "error": str(e)},
            )
            raise self._translate(e, bucket_name, "Upload failed") from e

        logger.debug(
            "Uploaded object",
            extra={"bucket": bucket_name, "key": key, "size_bytes": len(body)},
        )

    async def delete_objects(self, bucket_name: str, keys: list[str]) -> int:
        """
        Delete keys from a bucket.

        Callers hand over the whole batch; requests are split at the
        DeleteObjects limit. Per-key errors reported in the response are
        treated as a failure of the whole call.
        """
        if not keys:
            return 0

        try:
            deleted = await asyncio.to_thread(self._delete_in_chunks, bucket_name, keys)
        except StorageError:
            raise
        except Exception as e:
            raise self._translate(e, bucket_name, "Delete failed") from e

        logger.info("Deleted objects", extra={"bucket": bucket_name, "count": deleted})

        return deleted

    def _delete_in_chunks(self, bucket_name: str, keys: list[str]) -> int:
        deleted = 0
        for start in range(0, len(keys), DELETE_BATCH_LIMIT):
            chunk = keys[start:start + DELETE_BATCH_LIMIT]
            response = self._s3_client.delete_objects(
                Bucket=bucket_name,
                Delete={
                    "Objects": [{"Key": key} for key in chunk],
                    "Quiet": True,
                },
            )

            errors = response.get("Errors", [])
            if errors:
                first = errors[0]
                raise StorageError(
                    f"Delete failed for {len(errors)} key(s) in {bucket_name}: "
                    f"{first.get('Key')}: {first.get('Code')} {first.get('Message')}"
                )

            deleted += len(chunk)

        return deleted

    @staticmethod
    def _translate(error: Exception, bucket_name: str, action: str) -> StorageError:
        """Map boto3 errors onto storage errors."""
        response = getattr(error, "response", None)
        if isinstance(response, dict):
            code = response.get("Error", {}).get("Code")
            if code == "NoSuchBucket":
                return BucketNotFoundError(bucket_name)

        return StorageError(f"{action}: {error}")


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory object storage.

    Buckets are dictionaries of {key: (body, content_type)}. Every call is
    recorded in `operations` as (operation, bucket, detail) so tests can
    assert exactly which network calls a run would have made.

    Missing buckets behave like S3: listing or deleting raises
    BucketNotFoundError. Puts create the bucket when auto_create_buckets
    is set, which keeps local development friction-free.
    """

    def __init__(
        self,
        buckets: Optional[Iterable[str]] = None,
        auto_create_buckets: bool = True,
    ) -> None:
        self._buckets: dict[str, dict[str, tuple[bytes, str]]] = {
            name: {} for name in (buckets or [])
        }
        self._auto_create = auto_create_buckets
        self.operations: list[tuple[str, str, object]] = []
        logger.info("Initialized mock storage client (in-memory)")

    def create_bucket(self, bucket_name: str) -> None:
        self._buckets.setdefault(bucket_name, {})

    def get_object(self, bucket_name: str, key: str) -> tuple[bytes, str]:
        """Return (body, content_type) of a stored object."""
        bucket = self._require(bucket_name)
        if key not in bucket:
            raise StorageError(f"Object not found: s3://{bucket_name}/{key}")
        return bucket[key]

    def keys(self, bucket_name: str) -> set[str]:
        return set(self._require(bucket_name))

    async def list_objects(self, bucket_name: str) -> list[str]:
        self.operations.append(("list", bucket_name, None))
        return list(self._require(bucket_name))

    async def put_object(
        self,
        bucket_name: str,
        key: str,
        body: bytes,
        content_type: str,
    ) -> None:
        self.operations.append(("put", bucket_name, key))

        if bucket_name not in self._buckets and self._auto_create:
            self.create_bucket(bucket_name)
        self._require(bucket_name)[key] = (body, content_type)

        logger.debug(
            "Stored object in mock storage",
            extra={"bucket": bucket_name, "key": key, "size_bytes": len(body)},
        )

    async def delete_objects(self, bucket_name: str, keys: list[str]) -> int:
        self.operations.append(("delete", bucket_name, sorted(keys)))

        bucket = self._require(bucket_name)
        deleted = 0
        for key in keys:
            if bucket.pop(key, None) is not None:
                deleted += 1

        logger.debug(
            "Deleted objects from mock storage",
            extra={"bucket": bucket_name, "count": deleted},
        )

        return deleted

    def _require(self, bucket_name: str) -> dict[str, tuple[bytes, str]]:
        if bucket_name not in self._buckets:
            raise BucketNotFoundError(bucket_name)
        return self._buckets[bucket_name]


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> ObjectStorageClient:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return in-memory client

    Returns:
        ObjectStorageClient implementation (S3 or Mock)
    """
    if mock_mode:
        return MockStorageClient()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3StorageClient(config)
