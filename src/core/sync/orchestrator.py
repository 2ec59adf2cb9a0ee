"""
Runs the empty and sync phases across every configured target.

A run has at most two phases:
1. empty: every target bucket is emptied, concurrently
2. sync: every target directory is uploaded, concurrently

The phases are separated by a barrier, so no upload starts before all
empties have resolved. Within a phase nothing is cancelled early: every
operation finishes, then the failures are raised together.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from .errors import ConfigError, OrchestratorError
from .models import BucketSyncResult, EmptyResult, RunReport, SyncTarget
from .synchronizer import ObjectStore, empty_bucket, sync_bucket

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def parse_targets(raw_targets: Any) -> list[SyncTarget] | None:
    """
    Validate raw configuration into targets.

    Returns None when there is no usable configuration (absent, or not a
    list). Raises ConfigError if any entry is invalid, so a bad target
    stops the whole batch before any network call.
    """
    if not isinstance(raw_targets, list):
        return None

    targets = []
    for index, entry in enumerate(raw_targets):
        try:
            targets.append(SyncTarget.from_config(entry))
        except ConfigError as e:
            logger.error(
                "Invalid sync target configuration",
                extra={"index": index, "error": str(e)},
            )
            raise

    return targets


class SyncOrchestrator:
    """
    Empties and fills buckets for a batch of targets.

    Holds only its dependencies: the storage client shared by every
    operation in a run, and the strictness flag for missing buckets.
    """

    def __init__(self, storage: ObjectStore, strict: bool = False) -> None:
        self._storage = storage
        self._strict = strict

    async def run_sync(self, raw_targets: Any) -> RunReport:
        """Empty every target bucket, then upload every target directory."""
        targets = parse_targets(raw_targets)
        if targets is None:
            logger.warning("No configuration found")
            return RunReport()

        report = RunReport()
        report.emptied = await self._empty_phase(targets)
        report.synced = await self._run_phase("sync", targets, self._sync_one)
        report.phase = "sync"

        logger.info(
            "Bucket(s) are sync'd",
            extra={"buckets": len(report.synced), "uploaded": report.uploaded_count},
        )

        return report

    async def run_empty(self, raw_targets: Any) -> RunReport:
        """Empty every target bucket."""
        targets = parse_targets(raw_targets)
        if targets is None:
            logger.warning("No configuration found")
            return RunReport()

        report = RunReport(phase="empty")
        report.emptied = await self._empty_phase(targets)

        return report

    async def _empty_phase(self, targets: Sequence[SyncTarget]) -> list[EmptyResult]:
        # a bucket shared by several targets is emptied once
        bucket_names = list(dict.fromkeys(target.bucket_name for target in targets))
        results = await self._run_phase("empty", bucket_names, self._empty_one)

        logger.info("Bucket(s) are empty", extra={"buckets": len(results)})

        return results

    async def _empty_one(self, bucket_name: str) -> EmptyResult:
        logger.info("Emptying bucket: %s", bucket_name)
        return await empty_bucket(bucket_name, self._storage, strict=self._strict)

    async def _sync_one(self, target: SyncTarget) -> BucketSyncResult:
        logger.info("Processing bucket/folder %s/%s", target.bucket_name, target.local_dir)
        return await sync_bucket(target, self._storage)

    async def _run_phase(
        self,
        phase: str,
        items: Sequence[T],
        operation: Callable[[T], Awaitable[R]],
    ) -> list[R]:
        logger.info("Phase %s starting", phase, extra={"phase": phase, "targets": len(items)})

        outcomes = await asyncio.gather(
            *(operation(item) for item in items),
            return_exceptions=True,
        )

        errors = [outcome for outcome in outcomes if isinstance(outcome, Exception)]
        # anything that isn't an Exception (e.g. CancelledError) is not ours to aggregate
        for outcome in outcomes:
            if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
                raise outcome

        if errors:
            logger.error(
                "Phase %s failed", phase,
                extra={"phase": phase, "errors": [str(e) for e in errors]},
            )
            raise OrchestratorError(phase, errors)

        logger.info("Phase %s finished", phase, extra={"phase": phase})

        return list(outcomes)
