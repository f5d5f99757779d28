"""Health check API endpoints.

- Liveness probes: /health/live - Is the process alive?
- Readiness probes: /health/ready - Can the object store be reached?
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from storage_gateway.core.settings import get_app_settings
from storage_gateway.features.health.schemas import LivenessResponse, ReadinessResponse
from storage_gateway.infra.storage.dependencies import get_storage_service
from storage_gateway.infra.storage.service import StorageGatewayService  # noqa: TC001

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live", response_model=LivenessResponse, summary="Liveness probe")
async def liveness() -> LivenessResponse:
    """Report that the process is running; never touches the store."""
    return LivenessResponse(service=get_app_settings().service_name)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    responses={503: {"model": ReadinessResponse, "description": "Storage unavailable"}},
)
async def readiness(
    response: Response,
    storage: Annotated[StorageGatewayService, Depends(get_storage_service)],
) -> ReadinessResponse:
    """Check that the object store answers.

    Responds 503 while storage is disabled, failed to start or is unreachable.
    """
    storage_ok = await storage.health_check()
    if not storage_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(ready=storage_ok, checks={"storage": storage_ok})
