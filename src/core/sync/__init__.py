"""
Directory-to-bucket synchronization logic.

Contains the tree walker, key and content-type mapping, the per-bucket
synchronizer and emptier, the orchestrator, and the lifecycle entry points.
"""

from .errors import (
    BucketSyncError,
    ConfigError,
    DeleteError,
    EmptyError,
    InvalidPathError,
    ListError,
    OrchestratorError,
    SyncError,
    UploadError,
    WalkError,
)
from .lifecycle import SyncLifecycle
from .models import (
    BucketSyncResult,
    DeleteBatch,
    EmptyResult,
    FileEntry,
    RunReport,
    SyncTarget,
    UploadObject,
)
from .orchestrator import SyncOrchestrator, parse_targets
from .synchronizer import ObjectStore, empty_bucket, sync_bucket
from .walker import DEFAULT_CONTENT_TYPE, content_type, to_key, walk

__all__ = [
    "BucketSyncError",
    "ConfigError",
    "DeleteError",
    "EmptyError",
    "InvalidPathError",
    "ListError",
    "OrchestratorError",
    "SyncError",
    "UploadError",
    "WalkError",
    "SyncLifecycle",
    "BucketSyncResult",
    "DeleteBatch",
    "EmptyResult",
    "FileEntry",
    "RunReport",
    "SyncTarget",
    "UploadObject",
    "SyncOrchestrator",
    "parse_targets",
    "ObjectStore",
    "empty_bucket",
    "sync_bucket",
    "DEFAULT_CONTENT_TYPE",
    "content_type",
    "to_key",
    "walk",
]
