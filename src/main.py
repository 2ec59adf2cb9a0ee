"""
FastAPI application entry point.

Exposes the sync lifecycle over HTTP so a deployment pipeline can trigger
it with a single request. Using an application factory (create_app) so
tests can build apps against different settings.

For local development:
    STORAGE_MOCK_MODE=true uvicorn src.main:app --reload

For production:
    gunicorn src.main:app -w 1 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from . import __version__
from .api.routes import health, lifecycle
from .config.settings import get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Logs the effective configuration on startup and reports missing
    settings. No clients are created here: each trigger request builds
    its own.
    """
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info(
        "Bucket Sync API starting",
        extra={
            "version": __version__,
            "mock_mode": settings.storage_mock_mode,
            "strict_empty": settings.strict_empty,
            "has_sync_targets": settings.has_sync_targets,
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("Bucket Sync API shutting down")


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Mirrors local directories into object storage buckets.

        ## Triggers

        - `POST /api/v1/lifecycle/deploy-complete`: empty every target bucket, then upload
        - `POST /api/v1/lifecycle/before-remove`: empty every target bucket
        - `POST /api/v1/sync`: manual sync

        ## Authentication

        Trigger endpoints require an API key in the `X-API-Key` header.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        lifecycle.router,
        prefix="/api/v1",
        tags=["Lifecycle"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        """Root endpoint - service pointer."""
        return {
            "message": "Bucket Sync API",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Logs the full error server-side and returns a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error. Check the service logs for details."
            }
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
