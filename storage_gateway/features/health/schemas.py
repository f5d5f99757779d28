"""Health check response schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class LivenessResponse(BaseModel):
    """Liveness probe response."""

    status: Literal["alive"] = "alive"
    service: str = Field(..., description="Service name")


class ReadinessResponse(BaseModel):
    """Readiness probe response."""

    ready: bool = Field(..., description="Whether the service can accept traffic")
    checks: dict[str, bool] = Field(
        default_factory=dict, description="Result of each dependency check"
    )
