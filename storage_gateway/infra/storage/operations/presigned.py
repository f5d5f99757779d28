"""Presigned download links for listed objects."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from storage_gateway.infra.storage.metrics import record_presigned_urls

if TYPE_CHECKING:
    from collections.abc import Iterable

    from storage_gateway.infra.storage.backends.protocol import ObjectStoreBackend

logger = logging.getLogger(__name__)


@dataclass
class ListedObject:
    """A listed key with a freshly signed download URL."""

    key: str
    url: str
    expires_at: datetime
    expires_in_seconds: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "key": self.key,
            "url": self.url,
            "expires_at": self.expires_at.isoformat(),
            "expires_in_seconds": self.expires_in_seconds,
        }


async def issue_access_links(
    backend: ObjectStoreBackend,
    bucket: str,
    keys: Iterable[str],
    expires_in: int,
) -> list[ListedObject]:
    """Sign a GET URL for every key.

    Each link's expiry is computed when that link is signed, so two calls
    for the same key never share a URL or an expiry. Nothing is cached.

    Args:
        backend: Object store backend
        bucket: Bucket holding the keys
        keys: Keys to sign, typically from list_all_keys
        expires_in: URL lifetime in seconds

    Returns:
        One ListedObject per key, in input order
    """
    links: list[ListedObject] = []
    for key in keys:
        url = await backend.generate_presigned_url(bucket, key, expires_in)
        links.append(
            ListedObject(
                key=key,
                url=url,
                expires_at=datetime.now(UTC) + timedelta(seconds=expires_in),
                expires_in_seconds=expires_in,
            )
        )

    record_presigned_urls(len(links))
    logger.debug(
        "Issued presigned links",
        extra={"bucket": bucket, "count": len(links), "expires_in": expires_in},
    )
    return links
