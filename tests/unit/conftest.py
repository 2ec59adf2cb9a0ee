"""
Shared fixtures for the sync tests.

Directories are built under pytest's tmp_path; storage is the in-memory
MockStorageClient, optionally rigged to fail specific calls.
"""

from pathlib import Path

import pytest

from src.infrastructure.storage.client import MockStorageClient, StorageError


class FailingStorageClient(MockStorageClient):
    """Mock storage that fails chosen operations."""

    def __init__(self, *args, fail_keys=(), fail_list=False, fail_delete=False, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_keys = set(fail_keys)
        self.fail_list = fail_list
        self.fail_delete = fail_delete

    async def list_objects(self, bucket_name):
        if self.fail_list:
            self.operations.append(("list", bucket_name, None))
            raise StorageError("List failed: Access Denied")
        return await super().list_objects(bucket_name)

    async def put_object(self, bucket_name, key, body, content_type):
        if key in self.fail_keys:
            self.operations.append(("put", bucket_name, key))
            raise StorageError(f"Upload failed: simulated failure for {key}")
        await super().put_object(bucket_name, key, body, content_type)

    async def delete_objects(self, bucket_name, keys):
        if self.fail_delete:
            self.operations.append(("delete", bucket_name, sorted(keys)))
            raise StorageError("Delete failed: Access Denied")
        return await super().delete_objects(bucket_name, keys)


def write_files(root: Path, files: dict[str, bytes]) -> Path:
    """Create files (relative slash paths) under root."""
    for relative, content in files.items():
        path = root.joinpath(*relative.split("/"))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return root


def puts(storage: MockStorageClient) -> list[tuple[str, str]]:
    """(bucket, key) of every put, in call order."""
    return [(bucket, key) for op, bucket, key in storage.operations if op == "put"]


@pytest.fixture
def site_dir(tmp_path) -> Path:
    """A small static site: a.txt and b/c.json."""
    root = tmp_path / "dist"
    root.mkdir()
    return write_files(root, {
        "a.txt": b"hello",
        "b/c.json": b'{"ok": true}',
    })


@pytest.fixture
def storage() -> MockStorageClient:
    return MockStorageClient(buckets=["bkt1"])
