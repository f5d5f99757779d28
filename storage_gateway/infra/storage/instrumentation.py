"""Tracing and metrics around gateway storage operations."""

from __future__ import annotations

from contextlib import asynccontextmanager
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from . import metrics

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

_tracer = trace.get_tracer("storage_gateway.storage")


@asynccontextmanager
async def track_storage_operation(
    operation: str,
    key: str | None = None,
    bucket: str | None = None,
    size_bytes: int | None = None,
    metadata: dict[str, Any] | None = None,
) -> AsyncIterator[dict[str, Any]]:
    """Run a block inside a ``storage.<operation>`` span and record its metrics.

    The caller may fill the yielded dict; entries become
    ``storage.result.*`` span attributes on success, and ``result_size``
    replaces ``size_bytes`` for the object size histogram. Exceptions are
    recorded on the span, counted by class and re-raised.

    Example:
        async with track_storage_operation("list", bucket="reports") as ctx:
            keys = await list_all_keys(backend, "reports")
            ctx["count"] = len(keys)
    """
    attributes: dict[str, Any] = {"storage.operation": operation}
    if bucket:
        attributes["storage.bucket"] = bucket
    if key:
        attributes["storage.key"] = key
    if size_bytes is not None:
        attributes["storage.size_bytes"] = size_bytes
    for name, value in (metadata or {}).items():
        attributes[f"storage.metadata.{name}"] = str(value)

    results: dict[str, Any] = {}
    in_progress = metrics.storage_operations_in_progress.labels(operation=operation)
    in_progress.inc()
    started = time.perf_counter()

    with _tracer.start_as_current_span(
        f"storage.{operation}",
        attributes=attributes,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield results
        except Exception as e:
            metrics.record_operation(
                operation, time.perf_counter() - started, error_type=type(e).__name__
            )
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
        else:
            metrics.record_operation(
                operation,
                time.perf_counter() - started,
                size_bytes=results.get("result_size", size_bytes),
            )
            for name, value in results.items():
                span.set_attribute(f"storage.result.{name}", str(value))
            span.set_status(Status(StatusCode.OK))
        finally:
            in_progress.dec()


def add_storage_event(name: str, attributes: dict[str, Any] | None = None) -> None:
    """Attach an event to the active span, if it is recording."""
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes=attributes or {})
