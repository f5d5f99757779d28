"""High-level storage gateway service with singleton pattern and observability.

This module provides the caller-facing storage operations shared by the HTTP
API and the CLI:
- Singleton pattern for application-wide access
- OpenTelemetry spans and Prometheus metrics around every operation
- Lifecycle management (startup/shutdown) and health checks
- Advisory bucket existence checks for friendlier not-found errors
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from storage_gateway.core.settings import get_storage_settings

from .backends.factory import create_storage_backend
from .exceptions import (
    EmptyUploadError,
    StorageBucketExistsError,
    StorageBucketNotFoundError,
    StorageFolderNotFoundError,
    StorageNotConfiguredError,
)
from .instrumentation import track_storage_operation
from .operations import (
    BulkDeleteResult,
    BulkOutcome,
    ListedObject,
    UploadPayload,
    bulk_delete,
    bulk_upload,
    issue_access_links,
    list_all_keys,
)
from .path import build_upload_key

if TYPE_CHECKING:
    from collections.abc import Sequence

    from storage_gateway.core.settings.storage import StorageSettings

    from .backends.protocol import ObjectStoreBackend, StoredObject

logger = logging.getLogger(__name__)


class StorageGatewayService:
    """Storage operations over an object store backend.

    Every bucket-dependent operation first checks that the bucket exists so
    it can answer with a clear "does not exist" message. The check is only
    advisory: the bucket can disappear between check and act, and the
    store's own not-found answer surfaces as the same
    StorageBucketNotFoundError.

    Example:
        service = get_storage_service()
        await service.startup()

        outcome = await service.bulk_upload("reports", payloads, prefix="daily/")
        links = await service.list_objects("reports", prefix="daily/")

        await service.shutdown()
    """

    def __init__(
        self,
        settings: StorageSettings | None = None,
        backend: ObjectStoreBackend | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Optional settings override. If not provided,
                loads from environment via get_storage_settings()
            backend: Optional pre-built backend; otherwise one is created
                from settings at startup
        """
        self._settings = settings or get_storage_settings()
        self._backend = backend
        self._initialized = False

    @property
    def is_ready(self) -> bool:
        """Check if the service is initialized and ready for operations."""
        return self._initialized and self._backend is not None and self._backend.is_ready

    @property
    def settings(self) -> StorageSettings:
        return self._settings

    async def startup(self) -> None:
        """Create and start the backend.

        A service constructed with an explicit backend starts it even when
        storage is disabled in settings.

        Raises:
            StorageError: If the backend fails to initialize
        """
        if self._backend is None:
            if not self._settings.is_configured:
                logger.info("Storage not configured, skipping initialization")
                return
            self._backend = create_storage_backend(self._settings)

        logger.info(
            "Starting storage service",
            extra={
                "backend": self._backend.backend_name,
                "endpoint": self._settings.endpoint,
            },
        )

        await self._backend.startup()
        self._initialized = True

        logger.info("Storage service started successfully")

    async def shutdown(self) -> None:
        """Shutdown the backend gracefully."""
        if not self._initialized:
            logger.debug("Storage service not initialized, nothing to shutdown")
            return

        logger.info("Shutting down storage service")

        if self._backend is not None:
            await self._backend.shutdown()

        self._initialized = False
        logger.info("Storage service shutdown complete")

    async def health_check(self) -> bool:
        """Check storage service health."""
        if not self.is_ready or self._backend is None:
            return False
        return await self._backend.health_check()

    def _ensure_ready(self) -> ObjectStoreBackend:
        """Return the backend, raising if the service has not started.

        Raises:
            StorageNotConfiguredError: If service is not ready
        """
        if not self.is_ready or self._backend is None:
            raise StorageNotConfiguredError(
                message="Storage service is not initialized",
                metadata={"is_configured": self._settings.is_configured},
            )
        return self._backend

    async def _require_bucket(self, backend: ObjectStoreBackend, bucket: str) -> None:
        if not await backend.bucket_exists(bucket):
            raise StorageBucketNotFoundError(
                f"Bucket {bucket} does not exist.",
                metadata={"bucket": bucket},
            )

    # ========== Bucket Operations ==========

    async def create_bucket(self, bucket: str) -> None:
        """Create ``bucket``.

        Raises:
            StorageBucketExistsError: If a bucket with that name already exists
        """
        backend = self._ensure_ready()

        async with track_storage_operation("create_bucket", bucket=bucket):
            if await backend.bucket_exists(bucket):
                raise StorageBucketExistsError(
                    f"Bucket {bucket} already exists.",
                    metadata={"bucket": bucket},
                )
            await backend.create_bucket(bucket)

    async def list_buckets(self) -> list[str]:
        backend = self._ensure_ready()

        async with track_storage_operation("list_buckets") as ctx:
            names = await backend.list_buckets()
            ctx["count"] = len(names)
            return names

    async def delete_bucket(self, bucket: str) -> None:
        backend = self._ensure_ready()

        async with track_storage_operation("delete_bucket", bucket=bucket):
            await backend.delete_bucket(bucket)

    # ========== Object Operations ==========

    async def upload_file(
        self,
        bucket: str,
        payload: UploadPayload,
        prefix: str | None = None,
    ) -> str:
        """Upload one file and return its object key.

        Raises:
            StorageBucketNotFoundError: If the bucket does not exist
        """
        backend = self._ensure_ready()
        key = build_upload_key(payload.name, prefix)

        async with track_storage_operation(
            "upload",
            key=key,
            bucket=bucket,
            metadata={"content_type": payload.content_type},
        ):
            await self._require_bucket(backend, bucket)
            await backend.put_object(bucket, key, payload.source, payload.content_type)
            return key

    async def bulk_upload(
        self,
        bucket: str,
        payloads: Sequence[UploadPayload],
        prefix: str | None = None,
    ) -> BulkOutcome:
        """Upload many files concurrently.

        Per-file failures do not raise; they are reported in the returned
        BulkOutcome.

        Raises:
            EmptyUploadError: If ``payloads`` is empty
            StorageBucketNotFoundError: If the bucket does not exist
        """
        backend = self._ensure_ready()

        async with track_storage_operation(
            "bulk_upload",
            bucket=bucket,
            metadata={"count": len(payloads), "prefix": prefix},
        ) as ctx:
            if not payloads:
                raise EmptyUploadError(metadata={"bucket": bucket})
            await self._require_bucket(backend, bucket)

            outcome = await bulk_upload(
                backend,
                bucket,
                payloads,
                prefix=prefix,
                max_concurrency=self._settings.bulk_upload_max_concurrency,
            )
            ctx["succeeded"] = outcome.succeeded
            ctx["failed"] = outcome.failed
            return outcome

    async def bulk_upload_folder(
        self,
        bucket: str,
        folder: str | Path,
        prefix: str | None = None,
    ) -> BulkOutcome:
        """Upload the regular files directly inside a server-side folder.

        Subfolders are not descended into.

        Raises:
            StorageFolderNotFoundError: If ``folder`` is not a directory
            EmptyUploadError: If the folder holds no files
            StorageBucketNotFoundError: If the bucket does not exist
        """
        directory = Path(folder)
        if not await asyncio.to_thread(directory.is_dir):
            raise StorageFolderNotFoundError(
                f"Folder {folder} does not exist.",
                metadata={"folder": str(folder)},
            )

        files = await asyncio.to_thread(_list_files, directory)
        if not files:
            raise EmptyUploadError(
                "No files found in the folder to upload.",
                metadata={"folder": str(folder)},
            )

        payloads = [UploadPayload(name=path.name, source=path) for path in files]
        return await self.bulk_upload(bucket, payloads, prefix=prefix)

    async def list_objects(
        self,
        bucket: str,
        prefix: str | None = None,
    ) -> list[ListedObject]:
        """List every object under ``prefix`` with a presigned download URL.

        URLs are signed fresh on every call and expire after
        ``presigned_url_expiry_seconds``.
        """
        backend = self._ensure_ready()

        async with track_storage_operation("list", bucket=bucket, key=prefix) as ctx:
            await self._require_bucket(backend, bucket)
            keys = await list_all_keys(backend, bucket, prefix)
            links = await issue_access_links(
                backend,
                bucket,
                keys,
                expires_in=self._settings.presigned_url_expiry_seconds,
            )
            ctx["count"] = len(links)
            return links

    async def get_object(self, bucket: str, key: str) -> StoredObject:
        """Fetch an object's content and content type.

        Raises:
            StorageBucketNotFoundError: If the bucket does not exist
            StorageObjectNotFoundError: If the key does not exist
        """
        backend = self._ensure_ready()

        async with track_storage_operation("download", key=key, bucket=bucket) as ctx:
            await self._require_bucket(backend, bucket)
            stored = await backend.get_object(bucket, key)
            ctx["result_size"] = stored.size_bytes
            return stored

    async def delete_object(self, bucket: str, key: str) -> None:
        backend = self._ensure_ready()

        async with track_storage_operation("delete", key=key, bucket=bucket):
            await self._require_bucket(backend, bucket)
            await backend.delete_object(bucket, key)

    async def bulk_delete(
        self,
        bucket: str,
        extension: str | None = None,
        delete_all: bool = False,
        prefix: str | None = None,
    ) -> BulkDeleteResult:
        """Delete every object (``delete_all``) or those ending in ``extension``.

        Raises:
            StorageBucketNotFoundError: If the bucket does not exist
            NothingToDeleteError: If nothing matched the selection
            BatchDeleteError: If the store failed to delete a batch
        """
        backend = self._ensure_ready()

        async with track_storage_operation(
            "bulk_delete",
            bucket=bucket,
            metadata={"extension": extension, "delete_all": delete_all, "prefix": prefix},
        ) as ctx:
            await self._require_bucket(backend, bucket)
            result = await bulk_delete(
                backend,
                bucket,
                prefix=prefix,
                delete_all=delete_all,
                extension=extension,
                batch_size=self._settings.delete_batch_size,
            )
            ctx["deleted"] = len(result.deleted)
            return result


def _list_files(directory: Path) -> list[Path]:
    return sorted(path for path in directory.iterdir() if path.is_file())


_storage_service: StorageGatewayService | None = None


def get_storage_service() -> StorageGatewayService:
    """Get the singleton storage service instance.

    Creates the instance on first call. The service must be started via
    startup() before use.
    """
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageGatewayService()
    return _storage_service


def reset_storage_service() -> None:
    """Reset the singleton instance (for testing only)."""
    global _storage_service
    _storage_service = None
