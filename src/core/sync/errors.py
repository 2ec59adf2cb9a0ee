"""
Error taxonomy for bucket synchronization.

Every error carries enough context (paths, bucket names, the underlying
cause) to be logged on its own and still make sense in a deployment log.
Nothing here retries; errors go straight back to the caller.
"""

from typing import Optional, Sequence


class SyncError(Exception):
    """Base class for all synchronization failures."""
    pass


class ConfigError(SyncError):
    """A sync target is missing its bucket name or local directory."""
    pass


class WalkError(SyncError, OSError):
    """
    A local directory could not be read.

    Also an OSError so code that expects plain IO failures from a
    directory walk keeps working.
    """

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot read directory {path}: {cause}")
        if isinstance(cause, OSError):
            self.errno = cause.errno
            self.strerror = cause.strerror
        self.filename = path

    def __str__(self) -> str:
        return f"Cannot read directory {self.path}: {self.cause}"


class InvalidPathError(SyncError):
    """A file path is not located under the root it was mapped against."""

    def __init__(self, path: str, root: str) -> None:
        self.path = path
        self.root = root
        super().__init__(f"Path {path} is not under {root}")


class UploadError(SyncError):
    """A single file could not be uploaded."""

    def __init__(
        self,
        path: str,
        bucket_name: str,
        key: str,
        cause: BaseException,
    ) -> None:
        self.path = path
        self.bucket_name = bucket_name
        self.key = key
        self.cause = cause
        super().__init__(
            f"error in uploading {path} to s3 bucket {bucket_name}. error: {cause}"
        )


class BucketSyncError(SyncError):
    """One or more uploads into a bucket failed."""

    def __init__(self, bucket_name: str, failures: Sequence[UploadError]) -> None:
        self.bucket_name = bucket_name
        self.failures = list(failures)
        super().__init__(
            f"{len(self.failures)} upload(s) to {bucket_name} failed; "
            f"first: {self.failures[0] if self.failures else 'n/a'}"
        )


class EmptyError(SyncError):
    """Emptying a bucket failed."""

    def __init__(self, bucket_name: str, cause: BaseException) -> None:
        self.bucket_name = bucket_name
        self.cause = cause
        super().__init__(f"error emptying s3 bucket {bucket_name}. error: {cause}")


class ListError(EmptyError):
    """Listing the objects of a bucket failed."""
    pass


class DeleteError(EmptyError):
    """The bulk delete of a bucket's objects failed."""
    pass


class OrchestratorError(SyncError):
    """Aggregates the failures of one phase across all targets."""

    def __init__(self, phase: str, errors: Sequence[BaseException]) -> None:
        self.phase = phase
        self.errors = list(errors)
        details = "; ".join(str(e) for e in self.errors)
        super().__init__(f"{phase} phase failed for {len(self.errors)} target(s): {details}")
