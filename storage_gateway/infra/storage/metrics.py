"""Prometheus metrics for object store traffic.

Registered on the shared REGISTRY, so ``GET /metrics`` exposes them next to
the HTTP metrics.

Usage:
    from storage_gateway.infra.storage.metrics import record_bulk_operation

    record_bulk_operation("bulk_upload", total=10, succeeded=9, failed=1)
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

from storage_gateway.infra.metrics.prometheus import REGISTRY

# Round trips to the store, 10ms to 30s
LATENCY_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0)
# 1KiB to 100MiB
OBJECT_SIZE_BUCKETS = (1024, 10240, 102400, 1048576, 10485760, 52428800, 104857600)
# Files per bulk upload, keys per bulk delete
BULK_ITEM_BUCKETS = (1, 5, 10, 25, 50, 100, 250, 500, 1000, 5000, 25000)

storage_operations_total = Counter(
    "storage_operations_total",
    "Gateway storage operations by outcome",
    ["operation", "status"],
    registry=REGISTRY,
)

storage_operation_duration_seconds = Histogram(
    "storage_operation_duration_seconds",
    "Wall time of gateway storage operations",
    ["operation"],
    buckets=LATENCY_BUCKETS,
    registry=REGISTRY,
)

storage_operations_in_progress = Gauge(
    "storage_operations_in_progress",
    "Gateway storage operations currently running",
    ["operation"],
    registry=REGISTRY,
)

storage_errors_total = Counter(
    "storage_errors_total",
    "Failed storage operations by error class",
    ["operation", "error_type"],
    registry=REGISTRY,
)

storage_object_size_bytes = Histogram(
    "storage_object_size_bytes",
    "Size of transferred objects",
    ["operation"],
    buckets=OBJECT_SIZE_BUCKETS,
    registry=REGISTRY,
)

storage_bulk_items = Histogram(
    "storage_bulk_items",
    "Items selected per bulk operation",
    ["operation"],
    buckets=BULK_ITEM_BUCKETS,
    registry=REGISTRY,
)

storage_bulk_item_outcomes_total = Counter(
    "storage_bulk_item_outcomes_total",
    "Per-item results of bulk operations",
    ["operation", "outcome"],
    registry=REGISTRY,
)

storage_delete_requests_total = Counter(
    "storage_delete_requests_total",
    "Delete-objects requests submitted by bulk deletes",
    registry=REGISTRY,
)

storage_presigned_urls_total = Counter(
    "storage_presigned_urls_total",
    "Presigned download URLs issued",
    registry=REGISTRY,
)


def record_operation(
    operation: str,
    duration_seconds: float,
    error_type: str | None = None,
    size_bytes: int | None = None,
) -> None:
    """Count one finished operation; ``error_type`` marks it failed."""
    status = "success" if error_type is None else "error"
    storage_operations_total.labels(operation=operation, status=status).inc()
    storage_operation_duration_seconds.labels(operation=operation).observe(duration_seconds)
    if error_type is not None:
        storage_errors_total.labels(operation=operation, error_type=error_type).inc()
    elif size_bytes is not None:
        storage_object_size_bytes.labels(operation=operation).observe(size_bytes)


def record_bulk_operation(
    operation: str,
    total: int,
    succeeded: int,
    failed: int,
    requests: int | None = None,
) -> None:
    """Record a bulk upload or bulk delete.

    Args:
        operation: ``bulk_upload`` or ``bulk_delete``
        total: Items selected
        succeeded: Items stored or deleted
        failed: Items that failed or were never attempted
        requests: Delete-objects requests submitted, for bulk deletes
    """
    storage_bulk_items.labels(operation=operation).observe(total)
    storage_bulk_item_outcomes_total.labels(operation=operation, outcome="succeeded").inc(succeeded)
    storage_bulk_item_outcomes_total.labels(operation=operation, outcome="failed").inc(failed)
    if requests:
        storage_delete_requests_total.inc(requests)


def record_presigned_urls(count: int) -> None:
    storage_presigned_urls_total.inc(count)
