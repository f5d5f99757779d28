"""FastAPI dependency injection for the storage gateway service.

Two dependency patterns are provided:

1. **get_storage_service**: Base dependency that retrieves the singleton
2. **require_storage**: Enforces storage availability (HTTP 503 if unavailable)

Example Usage
-------------
::

    from storage_gateway.infra.storage.dependencies import Storage

    @router.get("/buckets")
    async def list_buckets(storage: Storage) -> list[str]:
        return await storage.list_buckets()

Tests replace ``get_storage_service`` through ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, status

from .service import StorageGatewayService


def get_storage_service() -> StorageGatewayService:
    """Get the singleton storage service instance.

    The returned service may not be ready; check ``is_ready``.
    """
    from .service import get_storage_service as _get_storage_service

    return _get_storage_service()


async def require_storage(
    storage: Annotated[StorageGatewayService, Depends(get_storage_service)],
) -> StorageGatewayService:
    """Dependency that requires storage to be available.

    Raises:
        HTTPException: 503 Service Unavailable if storage is not ready,
            either because it is disabled or because startup failed
    """
    if not storage.is_ready:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error": "storage_unavailable",
                "message": "Storage service is not available",
            },
        )
    return storage


Storage = Annotated[StorageGatewayService, Depends(require_storage)]
"""Ready storage service; responds 503 before the handler runs otherwise."""

__all__ = [
    "Storage",
    "get_storage_service",
    "require_storage",
]
