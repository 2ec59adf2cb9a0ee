"""
Health check endpoints.

- /health: Basic liveness check (is the process running?)
- /health/ready: Readiness check (could a sync run right now?)

Readiness only looks at local state: configuration and the directories
that would be uploaded. It never calls the storage backend.
"""

import logging
import os
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ...core.sync.errors import ConfigError
from ...core.sync.orchestrator import parse_targets
from ..dependencies import SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """
    Health check response.

    Standardized format makes it easy for monitoring tools to parse.
    """
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """Individual readiness check result."""
    name: str
    status: str  # "ok" or "error"
    error: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response with details."""
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Does not check dependencies.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """Liveness check - is the process alive?"""
    return HealthResponse(
        status="ok",
        version=__version__,
        details={
            "mock_mode": {
                "storage": settings.storage_mock_mode,
            },
            "strict_empty": settings.strict_empty,
        }
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Returns 200 if a sync could run. Checks configuration and local directories.",
    responses={
        503: {
            "description": "Service not ready",
            "model": ReadinessResponse,
        }
    },
)
async def readiness_check(settings: SettingsDep, response: Response) -> ReadinessResponse:
    """
    Readiness check - is the configuration usable?

    Checks required settings, that every sync target is valid, and that
    every target directory exists. Returns 503 if any check fails.
    """
    checks: list[ReadinessCheck] = []

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        checks.append(ReadinessCheck(
            name="configuration",
            status="error",
            error=f"Missing required fields: {', '.join(missing_fields)}"
        ))
    else:
        checks.append(ReadinessCheck(name="configuration", status="ok"))

    try:
        targets = parse_targets(settings.sync_targets)
    except ConfigError as e:
        targets = None
        checks.append(ReadinessCheck(name="sync_targets", status="error", error=str(e)))
    else:
        if targets is None:
            # no configuration is a valid state: syncs are no-ops
            checks.append(ReadinessCheck(
                name="sync_targets",
                status="ok",
                error="no sync configuration"
            ))
        else:
            checks.append(ReadinessCheck(name="sync_targets", status="ok"))

    for target in targets or []:
        if os.path.isdir(target.local_dir):
            checks.append(ReadinessCheck(name=f"local_dir:{target.local_dir}", status="ok"))
        else:
            checks.append(ReadinessCheck(
                name=f"local_dir:{target.local_dir}",
                status="error",
                error="directory not found"
            ))

    all_ok = all(check.status == "ok" for check in checks)

    if not all_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "Readiness check failed",
            extra={
                "checks": [
                    {"name": c.name, "status": c.status, "error": c.error}
                    for c in checks
                ]
            }
        )

    return ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        version=__version__,
        checks=checks,
    )
