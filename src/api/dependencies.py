"""
FastAPI dependency injection.

Dependencies provide the storage client, the lifecycle entry points and
configuration to route handlers. Routes never build their own clients,
so tests can swap any of them through app.dependency_overrides.
"""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.sync.lifecycle import SyncLifecycle
from ..core.sync.orchestrator import SyncOrchestrator
from ..infrastructure.storage.client import (
    ObjectStorageClient,
    StorageConfig,
    create_storage_client,
)

logger = logging.getLogger(__name__)

# API Key security scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Global mock instance (shared across requests so synced objects persist)
_mock_storage_client = None


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

async def verify_api_key(
    settings: Annotated[Settings, Depends(get_settings)],
    api_key: str = Security(api_key_header),
) -> str:
    """
    Validate API key from request header.

    Raises 403 if key is invalid or missing.
    """
    if not api_key:
        logger.warning("Request missing API key")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="API key required. Provide X-API-Key header.",
        )

    if api_key not in settings.api_keys_list:
        logger.warning(
            "Invalid API key attempt",
            extra={"key_prefix": api_key[:8] if api_key else ""}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key",
        )

    return api_key


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_storage_client(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ObjectStorageClient:
    """
    Provide the storage client for one trigger invocation.

    A real S3 client is built per request: region, profile and CA bundle
    are read from settings each time, and the client is dropped when the
    request ends. In mock mode the same in-memory client is reused so
    objects survive between requests.
    """
    global _mock_storage_client

    if settings.storage_mock_mode:
        if _mock_storage_client is None:
            _mock_storage_client = create_storage_client(mock_mode=True)
            logger.info("Created shared mock storage client for session")
        logger.debug("Using shared mock storage client")
        return _mock_storage_client

    config = StorageConfig(
        region=settings.aws_region,
        profile=settings.aws_profile,
        ca_bundle_path=settings.ca_bundle_path,
        endpoint_url=settings.s3_endpoint_url,
    )
    client = create_storage_client(config=config)
    logger.debug("Created S3 storage client")

    return client


def get_sync_lifecycle(
    settings: Annotated[Settings, Depends(get_settings)],
    storage: Annotated[ObjectStorageClient, Depends(get_storage_client)],
) -> SyncLifecycle:
    """Provide lifecycle entry points bound to the configured targets."""
    orchestrator = SyncOrchestrator(storage, strict=settings.strict_empty)
    return SyncLifecycle(orchestrator, settings.sync_targets)


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

AuthenticatedUser = Annotated[str, Depends(verify_api_key)]
StorageClientDep = Annotated[ObjectStorageClient, Depends(get_storage_client)]
SyncLifecycleDep = Annotated[SyncLifecycle, Depends(get_sync_lifecycle)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
