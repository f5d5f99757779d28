"""Exhaustive cursor-driven object listing."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from storage_gateway.infra.storage.exceptions import (
    StorageBucketNotFoundError,
    StorageError,
    StorageListingError,
    StorageNotConfiguredError,
)

if TYPE_CHECKING:
    from storage_gateway.infra.storage.backends.protocol import ObjectStoreBackend

logger = logging.getLogger(__name__)


async def list_all_keys(
    backend: ObjectStoreBackend,
    bucket: str,
    prefix: str | None = None,
) -> list[str]:
    """List every key under ``prefix``, following continuation cursors.

    Pages are requested strictly one after another. The loop ends only when
    a page comes back without a cursor (None or ""); an empty page that
    still carries a cursor is followed like any other. The whole key set is
    held in memory and returned only after the last page.

    Args:
        backend: Object store backend
        bucket: Bucket to list
        prefix: Optional key prefix filter

    Returns:
        All keys, in the order the store returned them

    Raises:
        StorageBucketNotFoundError: If the store reports the bucket missing
        StorageListingError: If any other page request fails; nothing
            gathered so far is returned
    """
    keys: list[str] = []
    cursor: str | None = None
    pages = 0

    while True:
        try:
            page = await backend.list_objects_page(bucket, prefix=prefix, cursor=cursor)
        except (StorageBucketNotFoundError, StorageNotConfiguredError):
            raise
        except Exception as e:
            logger.warning(
                "Listing aborted",
                extra={"bucket": bucket, "prefix": prefix, "pages": pages, "error": str(e)},
            )
            metadata = {"bucket": bucket, "prefix": prefix, "pages_read": pages}
            if isinstance(e, StorageError):
                metadata["cause"] = e.code
            raise StorageListingError(
                f"Listing objects in bucket {bucket} failed: {e}",
                metadata=metadata,
            ) from e

        pages += 1
        keys.extend(page.keys)

        if not page.has_more:
            break
        cursor = page.next_cursor

    logger.debug(
        "Listed all objects",
        extra={"bucket": bucket, "prefix": prefix, "pages": pages, "count": len(keys)},
    )
    return keys
