"""Object store protocol and normalized data structures.

This module defines:
- Protocol interface that every object store backend implements
- Normalized data structures returned by the backends, so the bulk
  operations never see raw client responses
"""

from __future__ import annotations

from dataclasses import dataclass, field
from os import PathLike
from typing import BinaryIO, Protocol

# A put-object source: an open binary stream or a path on the local filesystem
type UploadSource = BinaryIO | str | PathLike[str]

# ============================================================================
# Normalized Data Structures
# ============================================================================


@dataclass(frozen=True)
class ObjectPage:
    """One page of a cursor-driven object listing.

    Attributes:
        keys: Object keys on this page, possibly empty
        next_cursor: Opaque continuation token; None or "" means no more pages
    """

    keys: list[str]
    next_cursor: str | None = None

    @property
    def has_more(self) -> bool:
        """Whether another page must be requested."""
        return bool(self.next_cursor)


@dataclass(frozen=True)
class BatchDeleteStatus:
    """Outcome of a single delete-objects request.

    Attributes:
        status_code: HTTP status the store answered with
        deleted: Keys the store reported as deleted
        errors: Per-key failures as reported by the store
            (``{"key": ..., "code": ..., "message": ...}``)
    """

    status_code: int
    deleted: list[str] = field(default_factory=list)
    errors: list[dict[str, str]] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        """True for a 2xx status with no per-key errors."""
        return 200 <= self.status_code < 300 and not self.errors


@dataclass(frozen=True)
class StoredObject:
    """An object fetched in full from the store.

    Attributes:
        key: Object key
        body: Complete object content
        content_type: Stored MIME type, if the store kept one
    """

    key: str
    body: bytes
    content_type: str | None = None

    @property
    def size_bytes(self) -> int:
        return len(self.body)


# ============================================================================
# Object Store Protocol
# ============================================================================


class ObjectStoreBackend(Protocol):
    """Protocol that all object store backends must implement.

    Buckets are passed explicitly to every call; a backend is not bound to a
    single bucket. Failures are raised as StorageError subclasses, never as
    client-library exceptions.
    """

    @property
    def backend_name(self) -> str:
        """Backend identifier (e.g., "s3")."""
        ...

    @property
    def is_ready(self) -> bool:
        """Whether the backend client has been started."""
        ...

    # Lifecycle

    async def startup(self) -> None:
        """Create the client and its connection pool."""
        ...

    async def shutdown(self) -> None:
        """Close the client."""
        ...

    async def health_check(self) -> bool:
        """Return True when the store answers and credentials are accepted."""
        ...

    # Buckets

    async def bucket_exists(self, bucket: str) -> bool:
        """Return False for a missing bucket; raise for any other failure."""
        ...

    async def create_bucket(self, bucket: str) -> None: ...

    async def delete_bucket(self, bucket: str) -> None: ...

    async def list_buckets(self) -> list[str]: ...

    # Objects

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: UploadSource,
        content_type: str | None = None,
    ) -> None:
        """Store one object from a binary stream or a filesystem path."""
        ...

    async def get_object(self, bucket: str, key: str) -> StoredObject: ...

    async def delete_object(self, bucket: str, key: str) -> None: ...

    async def list_objects_page(
        self,
        bucket: str,
        prefix: str | None = None,
        cursor: str | None = None,
    ) -> ObjectPage:
        """Fetch a single listing page, continuing from ``cursor`` if given."""
        ...

    async def delete_objects(self, bucket: str, keys: list[str]) -> BatchDeleteStatus:
        """Submit one multi-key delete request (at most 1000 keys)."""
        ...

    async def generate_presigned_url(
        self,
        bucket: str,
        key: str,
        expires_in: int,
    ) -> str:
        """Sign a time-limited GET URL; computed locally, no store round trip."""
        ...
