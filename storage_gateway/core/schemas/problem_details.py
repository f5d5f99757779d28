"""RFC 7807 Problem Details schemas for error responses."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See: https://datatracker.ietf.org/doc/html/rfc7807

    Example:
        return JSONResponse(
            status_code=404,
            content=ProblemDetail(
                type="storage-bucket-not-found",
                title="Not Found",
                status=404,
                detail="Bucket reports does not exist.",
                instance="/api/v1/storage/buckets/reports/objects",
            ).model_dump(exclude_none=True),
        )
    """

    type: str = Field(
        default="about:blank",
        min_length=1,
        max_length=200,
        description="URI reference identifying the problem type",
    )
    title: str = Field(
        min_length=1, max_length=200, description="Short, human-readable summary of the problem"
    )
    status: int = Field(ge=100, le=599, description="HTTP status code")
    # Unbounded: bulk upload failures list one line per failed file
    detail: str | None = Field(
        default=None,
        description="Human-readable explanation specific to this occurrence",
    )
    instance: str | None = Field(
        default=None,
        max_length=2000,
        description="URI reference identifying the specific occurrence",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "storage-bucket-not-found",
                "title": "Not Found",
                "status": 404,
                "detail": "Bucket reports does not exist.",
                "instance": "/api/v1/storage/buckets/reports/objects",
            }
        },
    )

    @staticmethod
    def default_title(status_code: int) -> str:
        """Reason phrase for ``status_code``, or ``"Error"`` for unknown codes."""
        try:
            return HTTPStatus(status_code).phrase
        except ValueError:
            return "Error"


class ValidationError(BaseModel):
    """A single field-level validation failure."""

    field: str = Field(description="Dotted path of the offending field")
    message: str = Field(description="Validation message")
    type: str = Field(description="Pydantic error type")
    value: Any | None = Field(default=None, description="Rejected input value")


class ValidationProblemDetail(ProblemDetail):
    """Problem detail carrying field-level validation errors."""

    errors: list[ValidationError] = Field(default_factory=list)
