"""Prometheus metrics endpoint.

Endpoints:
    GET /metrics - Prometheus scrape endpoint

Metrics Exposed:
    HTTP Request Metrics:
        - http_requests_total - Total request count by method, path, status
        - http_request_duration_seconds - Request latency histogram
        - http_requests_in_progress - Currently processing requests gauge

    Storage Metrics:
        - storage_operations_total, storage_operation_duration_seconds, storage_errors_total
        - storage_bulk_items, storage_bulk_item_outcomes_total
        - storage_delete_requests_total - DeleteObjects calls made by bulk deletes
        - storage_presigned_urls_total
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from storage_gateway.infra.metrics.prometheus import REGISTRY

router = APIRouter(tags=["observability"])


@router.get("/metrics")
async def metrics() -> Response:
    """Expose Prometheus metrics from the application registry."""
    data = generate_latest(REGISTRY)
    return Response(
        content=data,
        media_type=CONTENT_TYPE_LATEST,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
