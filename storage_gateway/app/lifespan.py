"""Application lifespan management.

Startup Order:
1. Logging - configured from LOG_* settings
2. Storage (S3/MinIO) - conditional on configuration

Shutdown Order: Reverse of startup.

When storage fails to start the application keeps serving in degraded mode
(storage routes answer 503, readiness reports not ready) unless
STORAGE_STARTUP_REQUIRE_STORAGE is set.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from storage_gateway.core.settings import get_app_settings, get_storage_settings
from storage_gateway.infra.logging.config import setup_logging
from storage_gateway.infra.storage import get_storage_service

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

logger = logging.getLogger(__name__)


async def _startup_storage() -> None:
    """Initialize the storage gateway service."""
    settings = get_storage_settings()

    if not settings.is_configured:
        logger.info("Storage disabled, storage routes will answer 503")
        return

    try:
        storage_service = get_storage_service()
        await storage_service.startup()
        logger.info(
            "Storage service initialized",
            extra={
                "backend": settings.backend,
                "endpoint": settings.endpoint,
                "region": settings.region,
            },
        )
    except Exception as e:
        if settings.startup_require_storage:
            logger.exception("Storage service required but unavailable, failing startup")
            raise
        logger.warning(
            "Storage service unavailable, continuing in degraded mode",
            extra={"error": str(e)},
        )


async def _shutdown_storage() -> None:
    try:
        await get_storage_service().shutdown()
    except Exception:
        logger.exception("Error shutting down storage service")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start and stop the services the gateway depends on."""
    setup_logging(force=True)

    app_settings = get_app_settings()
    logger.info(
        "Application starting",
        extra={
            "service": app_settings.service_name,
            "version": app_settings.version,
            "environment": app_settings.environment,
        },
    )

    await _startup_storage()

    yield

    logger.info("Application shutting down", extra={"service": app_settings.service_name})
    await _shutdown_storage()
