"""Middleware configuration for the FastAPI application.

Stack, outermost first:
- Request ID: per-request ID in state, logs and response headers
- Metrics: request counts and latency

Starlette runs the most recently added middleware first, so they are
added innermost first.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from storage_gateway.app.middleware.metrics import MetricsMiddleware
from storage_gateway.app.middleware.request_id import RequestIDMiddleware

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

__all__ = [
    "MetricsMiddleware",
    "RequestIDMiddleware",
    "configure_middleware",
]


def configure_middleware(app: FastAPI) -> None:
    """Install the middleware stack in order."""
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    logger.debug("Middleware configured", extra={"middleware": ["RequestID", "Metrics"]})
