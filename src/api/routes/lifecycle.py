"""
Deployment lifecycle trigger endpoints.

A deployment pipeline calls these instead of running sync code itself:
- POST /api/v1/lifecycle/deploy-complete  -> empty buckets, then upload
- POST /api/v1/lifecycle/before-remove    -> empty buckets
- POST /api/v1/sync                       -> manual sync, with notifications

Each request is one invocation: it gets its own storage client and
blocks until every operation of the run has finished.
"""

import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from ...core.sync.errors import ConfigError, OrchestratorError
from ...core.sync.models import RunReport
from ..dependencies import AuthenticatedUser, SyncLifecycleDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class BucketEmptied(BaseModel):
    """One bucket emptied during a run."""
    bucket_name: str
    deleted_count: int
    bucket_missing: bool = Field(description="True if the bucket did not exist (lenient mode)")


class BucketSynced(BaseModel):
    """One directory uploaded during a run."""
    bucket_name: str
    local_dir: str
    uploaded_count: int
    uploaded_keys: list[str]


class RunResponse(BaseModel):
    """Response after a lifecycle run."""
    status: str = Field(description="'ok', or 'skipped' when no sync configuration is present")
    phase: str = Field(description="Last phase that ran: none, empty or sync")
    emptied: list[BucketEmptied] = Field(default_factory=list)
    synced: list[BucketSynced] = Field(default_factory=list)


class RunFailure(BaseModel):
    """Error detail for a failed run."""
    phase: str
    errors: list[str]


def _to_response(report: RunReport) -> RunResponse:
    return RunResponse(
        status="skipped" if report.phase == "none" else "ok",
        phase=report.phase,
        emptied=[
            BucketEmptied(
                bucket_name=result.bucket_name,
                deleted_count=result.deleted_count,
                bucket_missing=result.bucket_missing,
            )
            for result in report.emptied
        ],
        synced=[
            BucketSynced(
                bucket_name=result.bucket_name,
                local_dir=result.local_dir,
                uploaded_count=result.uploaded_count,
                uploaded_keys=sorted(result.uploaded_keys),
            )
            for result in report.synced
        ],
    )


def _raise_http(error: Exception) -> None:
    """Translate sync errors into HTTP errors."""
    if isinstance(error, ConfigError):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(error),
        ) from error

    if isinstance(error, OrchestratorError):
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=RunFailure(
                phase=error.phase,
                errors=[str(e) for e in error.errors],
            ).model_dump(),
        ) from error

    raise error


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/lifecycle/deploy-complete",
    response_model=RunResponse,
    summary="Deployment finished",
    description="Empty every target bucket, then upload every target directory.",
)
async def deploy_complete(
    api_key: AuthenticatedUser,
    lifecycle: SyncLifecycleDep,
) -> RunResponse:
    try:
        report = await lifecycle.on_deploy_complete()
    except (ConfigError, OrchestratorError) as e:
        _raise_http(e)

    return _to_response(report)


@router.post(
    "/lifecycle/before-remove",
    response_model=RunResponse,
    summary="Deployment about to be removed",
    description="Empty every target bucket.",
)
async def before_remove(
    api_key: AuthenticatedUser,
    lifecycle: SyncLifecycleDep,
) -> RunResponse:
    try:
        report = await lifecycle.on_before_remove()
    except (ConfigError, OrchestratorError) as e:
        _raise_http(e)

    return _to_response(report)


@router.post(
    "/sync",
    response_model=RunResponse,
    summary="Manual sync",
    description="Run a full sync on demand. Start and completion are logged as notifications.",
)
async def manual_sync(
    api_key: AuthenticatedUser,
    lifecycle: SyncLifecycleDep,
) -> RunResponse:
    """
    Operator-triggered sync.

    The before/after notifications go to the log, tagged with a prefix of
    the caller's key so runs can be traced back to who started them.
    """
    caller = api_key[:8]

    def announce_start() -> None:
        logger.info("Manual sync requested", extra={"caller": caller})

    def announce_finish(report: RunReport) -> None:
        logger.info(
            "Manual sync finished",
            extra={
                "caller": caller,
                "uploaded": report.uploaded_count,
                "deleted": report.deleted_count,
            },
        )

    try:
        report = await lifecycle.sync_command(before=announce_start, after=announce_finish)
    except (ConfigError, OrchestratorError) as e:
        _raise_http(e)

    return _to_response(report)
