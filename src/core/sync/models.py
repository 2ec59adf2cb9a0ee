"""
Domain models for directory-to-bucket synchronization.

These are plain values. They don't know about boto3, HTTP, or the
filesystem; the walker and the synchronizer produce and consume them.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping

from .errors import ConfigError


@dataclass(frozen=True)
class SyncTarget:
    """
    A pairing of a local directory and the bucket it is mirrored into.

    Frozen because targets come wholesale from configuration and are
    never modified during a run.
    """
    local_dir: str
    bucket_name: str

    def __post_init__(self) -> None:
        if not self.bucket_name or not self.local_dir:
            raise ConfigError(
                "Invalid sync target: missing required field(s) (bucketName/localDir)"
            )

    @classmethod
    def from_config(cls, entry: Any) -> "SyncTarget":
        """
        Build a target from one configuration entry.

        Deployment configs use camelCase (bucketName/localDir); snake_case
        keys are accepted too.
        """
        if not isinstance(entry, Mapping):
            raise ConfigError(f"Invalid sync target: expected a mapping, got {entry!r}")

        bucket_name = entry.get("bucketName", entry.get("bucket_name"))
        local_dir = entry.get("localDir", entry.get("local_dir"))

        if not isinstance(bucket_name, str) or not isinstance(local_dir, str):
            raise ConfigError(
                "Invalid sync target: missing required field(s) (bucketName/localDir)"
            )

        return cls(local_dir=local_dir, bucket_name=bucket_name)


@dataclass(frozen=True)
class FileEntry:
    """A file discovered while walking a directory."""
    absolute_path: str


@dataclass(frozen=True)
class UploadObject:
    """One put request: what gets stored under which key."""
    key: str
    body: bytes = field(repr=False)
    content_type: str


@dataclass(frozen=True)
class DeleteBatch:
    """Every key of a bucket, removed with a single bulk delete."""
    bucket_name: str
    keys: frozenset[str]

    def __len__(self) -> int:
        return len(self.keys)


@dataclass
class BucketSyncResult:
    """Outcome of synchronizing one target."""
    bucket_name: str
    local_dir: str
    uploaded_keys: list[str] = field(default_factory=list)

    @property
    def uploaded_count(self) -> int:
        return len(self.uploaded_keys)


@dataclass
class EmptyResult:
    """Outcome of emptying one bucket."""
    bucket_name: str
    deleted_count: int = 0
    bucket_missing: bool = False


@dataclass
class RunReport:
    """
    Summary of an orchestrator run.

    `phase` is the last phase that ran ("none" when there was no
    configuration to act on).
    """
    phase: str = "none"
    emptied: list[EmptyResult] = field(default_factory=list)
    synced: list[BucketSyncResult] = field(default_factory=list)

    @property
    def uploaded_count(self) -> int:
        return sum(result.uploaded_count for result in self.synced)

    @property
    def deleted_count(self) -> int:
        return sum(result.deleted_count for result in self.emptied)
