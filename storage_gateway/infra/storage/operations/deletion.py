"""Filtered bulk deletion.

Lists a bucket exhaustively, selects keys by extension (or all of them) and
submits the selection through delete-objects requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from storage_gateway.infra.storage.exceptions import (
    BatchDeleteError,
    NothingToDeleteError,
    StorageBucketNotFoundError,
)
from storage_gateway.infra.storage.metrics import record_bulk_operation
from storage_gateway.infra.storage.operations.listing import list_all_keys

if TYPE_CHECKING:
    from collections.abc import Iterable

    from storage_gateway.infra.storage.backends.protocol import ObjectStoreBackend

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most this many keys per request
MAX_DELETE_BATCH_SIZE = 1000


@dataclass
class BulkDeleteResult:
    """Outcome of a bulk delete where every batch succeeded."""

    selected: int
    deleted: list[str] = field(default_factory=list)
    batches: int = 0


def select_keys(
    keys: Iterable[str],
    delete_all: bool = False,
    extension: str | None = None,
) -> list[str]:
    """Pick the keys a bulk delete should remove.

    ``delete_all`` wins over ``extension``. Extensions match the end of the
    key case-insensitively (``".log"`` matches ``"c.LOG"``). With neither
    criterion nothing is selected.
    """
    if delete_all:
        return list(keys)
    if extension:
        suffix = extension.lower()
        return [key for key in keys if key.lower().endswith(suffix)]
    return []


async def bulk_delete(
    backend: ObjectStoreBackend,
    bucket: str,
    prefix: str | None = None,
    delete_all: bool = False,
    extension: str | None = None,
    batch_size: int = MAX_DELETE_BATCH_SIZE,
) -> BulkDeleteResult:
    """Delete the selected objects of a bucket.

    Args:
        backend: Object store backend
        bucket: Bucket to purge
        prefix: Only consider keys under this prefix
        delete_all: Select every listed key
        extension: Select keys ending with this suffix (case-insensitive)
        batch_size: Keys per delete-objects request, capped at 1000

    Returns:
        BulkDeleteResult with the deleted keys

    Raises:
        NothingToDeleteError: If the selection is empty; the store's delete
            call is not made
        BatchDeleteError: If a batch raises, answers with a non-2xx status,
            or reports per-key errors. Earlier batches stay deleted.
    """
    keys = await list_all_keys(backend, bucket, prefix)
    selected = select_keys(keys, delete_all=delete_all, extension=extension)

    if not selected:
        raise NothingToDeleteError(
            metadata={
                "bucket": bucket,
                "prefix": prefix,
                "extension": extension,
                "delete_all": delete_all,
                "listed": len(keys),
            }
        )

    size = max(1, min(batch_size, MAX_DELETE_BATCH_SIZE))
    result = BulkDeleteResult(selected=len(selected))

    for start in range(0, len(selected), size):
        chunk = selected[start : start + size]
        try:
            status = await backend.delete_objects(bucket, chunk)
        except StorageBucketNotFoundError:
            raise
        except Exception as e:
            _record(result, failed=len(selected) - len(result.deleted))
            raise BatchDeleteError(
                f"Error deleting files: {e}",
                metadata={
                    "bucket": bucket,
                    "selected": len(selected),
                    "deleted": len(result.deleted),
                    "batch": result.batches + 1,
                },
            ) from e

        result.batches += 1

        if not status.is_success:
            _record(result, failed=len(selected) - len(result.deleted) - len(status.deleted))
            metadata: dict[str, Any] = {
                "bucket": bucket,
                "status_code": status.status_code,
                "selected": len(selected),
                "deleted": len(result.deleted) + len(status.deleted),
                "batch": result.batches,
            }
            if status.errors:
                metadata["errors"] = status.errors
            raise BatchDeleteError(
                "An error occurred while deleting the files.",
                metadata=metadata,
            )

        result.deleted.extend(status.deleted or chunk)

    _record(result, failed=0)
    logger.info(
        "Bulk delete finished",
        extra={
            "bucket": bucket,
            "prefix": prefix,
            "extension": extension,
            "delete_all": delete_all,
            "deleted": len(result.deleted),
            "batches": result.batches,
        },
    )
    return result


def _record(result: BulkDeleteResult, failed: int) -> None:
    record_bulk_operation(
        "bulk_delete",
        total=result.selected,
        succeeded=len(result.deleted),
        failed=failed,
        requests=result.batches,
    )
