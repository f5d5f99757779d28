"""Metrics middleware for HTTP request instrumentation."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from storage_gateway.infra.metrics.prometheus import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import Request, Response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Collect request counts, durations and in-progress requests.

    Uses the route path template (``/buckets/{bucket_name}``) as the endpoint
    label to keep cardinality low, and adds an ``X-Process-Time`` header.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        endpoint = request.url.path
        route = request.scope.get("route")
        if route is not None and hasattr(route, "path"):
            endpoint = route.path

        method = request.method
        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()

        start_time = time.perf_counter()
        status_code = 500  # Default to error in case of exception

        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Process-Time"] = str(time.perf_counter() - start_time)
            return response
        finally:
            duration = time.perf_counter() - start_time
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)
            http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()
