"""Render every error as ``application/problem+json`` (RFC 7807)."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storage_gateway.core.exceptions import AppException
from storage_gateway.core.schemas.problem_details import (
    ProblemDetail,
    ValidationError,
    ValidationProblemDetail,
)
from storage_gateway.infra.metrics.prometheus import errors_total

logger = logging.getLogger(__name__)

_JSON_SCALARS = (str, int, float, bool, type(None))


def _problem_response(
    request: Request,
    problem: ProblemDetail,
    extra: dict[str, Any] | None = None,
) -> JSONResponse:
    """Serialize ``problem``, merge ``extra`` and stamp the request id."""
    body = problem.model_dump(exclude_none=True)
    if extra:
        body.update(extra)
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        body["request_id"] = request_id

    errors_total.labels(error_type=problem.type, status_code=str(problem.status)).inc()
    return JSONResponse(
        status_code=problem.status,
        content=body,
        media_type="application/problem+json",
    )


def _request_fields(request: Request) -> dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", None),
        "path": request.url.path,
        "method": request.method,
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Storage and other domain errors, with their metadata in the body.

    Bulk upload failures rely on this to return per-file outcomes next to
    the joined error text.
    """
    logger.warning(
        "Request failed with %s",
        exc.type,
        extra={**_request_fields(request), "status_code": exc.status_code, "detail": exc.detail},
    )
    problem = ProblemDetail(
        type=exc.type,
        title=exc.title,
        status=exc.status_code,
        detail=exc.detail,
        instance=exc.instance or request.url.path,
    )
    return _problem_response(request, problem, exc.extra)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """422 with one entry per rejected field."""
    errors = []
    for error in exc.errors():
        value = error.get("input")
        errors.append(
            ValidationError(
                field=".".join(str(loc) for loc in error["loc"]),
                message=error["msg"],
                type=error["type"],
                value=value if isinstance(value, _JSON_SCALARS) else str(value),
            )
        )

    logger.warning(
        "Request validation failed",
        extra={**_request_fields(request), "error_count": len(errors)},
    )
    problem = ValidationProblemDetail(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Request validation failed for {len(errors)} field(s)",
        instance=request.url.path,
        errors=errors,
    )
    return _problem_response(request, problem)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """500 without internal details; the traceback only goes to the log."""
    logger.error(
        "Unhandled %s",
        type(exc).__name__,
        extra=_request_fields(request),
        exc_info=exc,
    )
    problem = ProblemDetail(
        type="internal-error",
        title="Internal Server Error",
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        instance=request.url.path,
    )
    return _problem_response(request, problem)


def configure_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
