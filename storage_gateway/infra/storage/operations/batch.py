"""Bulk upload orchestration.

Uploads many payloads to one bucket with:
- A bounded pool of workers consuming a queue of pending payloads
- One result slot per payload, filled by whichever worker handled it
- No fail-fast: a failing payload never cancels its siblings
- An aggregate outcome listing every payload, successes included
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from storage_gateway.infra.storage.exceptions import EmptyUploadError
from storage_gateway.infra.storage.instrumentation import add_storage_event
from storage_gateway.infra.storage.metrics import record_bulk_operation
from storage_gateway.infra.storage.path import build_upload_key

if TYPE_CHECKING:
    from collections.abc import Sequence

    from storage_gateway.infra.storage.backends.protocol import (
        ObjectStoreBackend,
        UploadSource,
    )

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 8


@dataclass
class UploadPayload:
    """One file to upload.

    Attributes:
        name: File name used to derive the object key (base name only)
        source: Open binary stream or local file path
        content_type: MIME type, if known
    """

    name: str
    source: UploadSource
    content_type: str | None = None


@dataclass(frozen=True)
class UploadOutcome:
    """Result of uploading a single payload."""

    name: str
    key: str
    success: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "name": self.name,
            "key": self.key,
            "success": self.success,
            "error": self.error,
        }


@dataclass
class BulkOutcome:
    """Aggregate result of a bulk upload.

    The aggregate only counts outcomes, so it does not depend on the order
    in which uploads completed.
    """

    total: int
    outcomes: list[UploadOutcome] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failures(self) -> list[UploadOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.success]

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def success(self) -> bool:
        """True only when every payload was stored."""
        return not self.failures

    @property
    def error_messages(self) -> list[str]:
        return [outcome.error or f"Error uploading file {outcome.name}" for outcome in self.failures]

    @property
    def error_summary(self) -> str:
        """Newline-joined failure messages."""
        return "\n".join(self.error_messages)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "duration_seconds": round(self.duration_seconds, 3),
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }


async def bulk_upload(
    backend: ObjectStoreBackend,
    bucket: str,
    payloads: Sequence[UploadPayload],
    prefix: str | None = None,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> BulkOutcome:
    """Upload every payload into ``bucket`` concurrently.

    ``min(max_concurrency, len(payloads))`` workers take payloads off a
    queue until it is empty. A payload whose upload raises is recorded as a
    failed UploadOutcome and the worker moves on to the next one. Cancelling
    the caller cancels the workers; objects already written stay written.

    Args:
        backend: Object store backend
        bucket: Target bucket
        payloads: Files to upload, at least one
        prefix: Optional key prefix applied to every payload
        max_concurrency: Number of concurrent put-object workers

    Returns:
        BulkOutcome with one outcome per payload, in payload order

    Raises:
        EmptyUploadError: If ``payloads`` is empty (no store call is made)

    Example:
        payloads = [
            UploadPayload("a.txt", io.BytesIO(b"a"), "text/plain"),
            UploadPayload("b.txt", Path("/tmp/b.txt")),
        ]
        outcome = await bulk_upload(backend, "reports", payloads, prefix="daily/")
        if not outcome.success:
            print(outcome.error_summary)
    """
    if not payloads:
        raise EmptyUploadError(metadata={"bucket": bucket})

    start_time = time.perf_counter()

    queue: asyncio.Queue[tuple[int, UploadPayload]] = asyncio.Queue()
    for index, payload in enumerate(payloads):
        queue.put_nowait((index, payload))

    slots: list[UploadOutcome | None] = [None] * len(payloads)

    async def worker() -> None:
        while True:
            try:
                index, payload = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            slots[index] = await _upload_one(backend, bucket, payload, prefix)
            queue.task_done()

    worker_count = max(1, min(max_concurrency, len(payloads)))
    await asyncio.gather(*(worker() for _ in range(worker_count)))

    outcomes = [outcome for outcome in slots if outcome is not None]
    result = BulkOutcome(
        total=len(payloads),
        outcomes=outcomes,
        duration_seconds=time.perf_counter() - start_time,
    )

    record_bulk_operation(
        "bulk_upload",
        total=result.total,
        succeeded=result.succeeded,
        failed=result.failed,
    )

    logger.info(
        "Bulk upload finished",
        extra={
            "bucket": bucket,
            "prefix": prefix,
            "total": result.total,
            "succeeded": result.succeeded,
            "failed": result.failed,
            "workers": worker_count,
        },
    )
    return result


async def _upload_one(
    backend: ObjectStoreBackend,
    bucket: str,
    payload: UploadPayload,
    prefix: str | None,
) -> UploadOutcome:
    key = build_upload_key(payload.name, prefix)
    try:
        await backend.put_object(bucket, key, payload.source, payload.content_type)
    except Exception as e:
        logger.warning(
            "Bulk upload item failed",
            extra={"bucket": bucket, "key": key, "file_name": payload.name, "error": str(e)},
        )
        add_storage_event(
            "storage.bulk_upload.item_failed",
            {"storage.key": key, "error.type": type(e).__name__},
        )
        return UploadOutcome(
            name=payload.name,
            key=key,
            success=False,
            error=f"Error uploading file {payload.name}: {e}",
        )
    return UploadOutcome(name=payload.name, key=key, success=True)
