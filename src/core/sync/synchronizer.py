"""
Per-bucket operations: mirror a directory into a bucket, empty a bucket.

Both functions take the storage client as an argument instead of
reaching for a shared one. The orchestrator decides which buckets to
touch and in what order; this module only knows about one bucket at a time.
"""

import asyncio
import logging
import os
from typing import Protocol

from .errors import BucketSyncError, DeleteError, ListError, UploadError
from .models import BucketSyncResult, DeleteBatch, EmptyResult, FileEntry, SyncTarget, UploadObject
from .walker import content_type, to_key, walk

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class ObjectStore(Protocol):
    """
    What the synchronizer needs from a storage backend.

    Matches ObjectStorageClient in the infrastructure layer, restated
    here so core logic doesn't import boto3-aware code.
    """

    async def list_objects(self, bucket_name: str) -> list[str]:
        ...

    async def put_object(
        self,
        bucket_name: str,
        key: str,
        body: bytes,
        content_type: str,
    ) -> None:
        ...

    async def delete_objects(self, bucket_name: str, keys: list[str]) -> int:
        ...


# ---------------------------------------------------------------------------
# Bucket Synchronizer
# ---------------------------------------------------------------------------

def build_upload(entry: FileEntry, root_dir: str) -> UploadObject:
    """Read a file and describe the put request for it."""
    with open(entry.absolute_path, "rb") as f:
        body = f.read()

    return UploadObject(
        key=to_key(entry.absolute_path, root_dir),
        body=body,
        content_type=content_type(entry.absolute_path),
    )


async def sync_bucket(target: SyncTarget, storage: ObjectStore) -> BucketSyncResult:
    """
    Upload every file under target.local_dir into target.bucket_name.

    All uploads are attempted even if some fail. Raises BucketSyncError
    with every UploadError once they have all finished, or WalkError if
    the directory can't be read.
    """
    root = os.path.abspath(target.local_dir)
    bucket = target.bucket_name

    files = walk(root)

    tasks = []
    for path in files:
        logger.info("Processing file: %s", path, extra={"bucket": bucket})
        tasks.append(asyncio.create_task(_upload_file(FileEntry(path), root, bucket, storage)))

    outcomes = await asyncio.gather(*tasks, return_exceptions=True)

    failures: list[UploadError] = []
    uploaded: list[str] = []
    for outcome in outcomes:
        if isinstance(outcome, UploadError):
            failures.append(outcome)
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            uploaded.append(outcome)

    if failures:
        logger.error(
            "Error trying to sync the bucket: %s", bucket,
            extra={"bucket": bucket, "failed": len(failures), "uploaded": len(uploaded)},
        )
        raise BucketSyncError(bucket, failures)

    logger.info("Bucket is sync: %s", bucket, extra={"bucket": bucket, "count": len(uploaded)})

    return BucketSyncResult(bucket_name=bucket, local_dir=target.local_dir, uploaded_keys=uploaded)


async def _upload_file(
    entry: FileEntry,
    root: str,
    bucket: str,
    storage: ObjectStore,
) -> str:
    key = ""
    try:
        upload = build_upload(entry, root)
        key = upload.key
        await storage.put_object(bucket, upload.key, upload.body, upload.content_type)
    except Exception as e:
        error = UploadError(entry.absolute_path, bucket, key, e)
        logger.error(
            str(error),
            extra={"path": entry.absolute_path, "bucket": bucket, "key": key, "error": str(e)},
        )
        raise error from e

    logger.info(
        "Successfully uploaded %s to s3://%s/%s", entry.absolute_path, bucket, key,
        extra={"size_bytes": len(upload.body), "content_type": upload.content_type},
    )

    return key


# ---------------------------------------------------------------------------
# Bucket Emptier
# ---------------------------------------------------------------------------

async def empty_bucket(
    bucket_name: str,
    storage: ObjectStore,
    strict: bool = False,
) -> EmptyResult:
    """
    Delete every object in a bucket with a single bulk delete.

    A bucket that doesn't exist is already empty unless strict is set,
    in which case the listing failure is raised as ListError. Storage
    clients signal a missing bucket with a LookupError subclass.
    """
    try:
        keys = await storage.list_objects(bucket_name)
    except LookupError as e:
        if strict:
            logger.error(
                "Bucket does not exist: %s", bucket_name,
                extra={"bucket": bucket_name, "strict": True},
            )
            raise ListError(bucket_name, e) from e
        logger.info("Bucket did not exist (thus already empty): %s", bucket_name)
        return EmptyResult(bucket_name=bucket_name, bucket_missing=True)
    except Exception as e:
        error = ListError(bucket_name, e)
        logger.error(str(error), extra={"bucket": bucket_name, "error": str(e)})
        raise error from e

    if not keys:
        logger.info("Emptied bucket: %s", bucket_name, extra={"bucket": bucket_name, "count": 0})
        return EmptyResult(bucket_name=bucket_name)

    batch = DeleteBatch(bucket_name=bucket_name, keys=frozenset(keys))

    try:
        deleted = await storage.delete_objects(batch.bucket_name, sorted(batch.keys))
    except Exception as e:
        error = DeleteError(bucket_name, e)
        logger.error(str(error), extra={"bucket": bucket_name, "error": str(e)})
        raise error from e

    logger.info("Emptied bucket: %s", bucket_name, extra={"bucket": bucket_name, "count": deleted})

    return EmptyResult(bucket_name=bucket_name, deleted_count=deleted)
