"""aioboto3 implementation of ObjectStoreBackend.

Works against AWS S3 and any S3-compatible endpoint (MinIO, LocalStack).
Every store call runs inside ``_translating``, which turns botocore client
errors into the StorageError hierarchy via ``map_boto_error``.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
import logging
import mimetypes
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

import aioboto3
from botocore.config import Config
from botocore.exceptions import ClientError

from storage_gateway.infra.storage.exceptions import (
    StorageDownloadError,
    StorageError,
    StorageNotConfiguredError,
    StorageUploadError,
    map_boto_error,
)

from ..protocol import BatchDeleteStatus, ObjectPage, StoredObject

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

    from storage_gateway.core.settings.storage import StorageSettings

    from ..protocol import UploadSource

logger = logging.getLogger(__name__)

_MISSING_BUCKET_CODES = frozenset({"NoSuchBucket", "404", "NotFound"})


class S3Backend:
    """S3-compatible object store backend.

    One aiobotocore client is opened at startup and shared by all requests;
    its connection pool is sized by ``STORAGE_MAX_POOL_CONNECTIONS``.

    Example:
        async with S3Backend(settings) as backend:
            await backend.put_object("reports", "2024/q1.csv", Path("q1.csv"))
            page = await backend.list_objects_page("reports", prefix="2024/")
    """

    backend_name = "s3"

    def __init__(self, settings: StorageSettings) -> None:
        if not settings.is_configured:
            msg = "S3 backend not configured. Set STORAGE_ENABLED=true and provide credentials."
            raise StorageNotConfiguredError(msg)

        self.settings = settings
        self._session = aioboto3.Session()
        self._client: Any = None
        self._client_context: Any = None

    @property
    def is_ready(self) -> bool:
        return self._client is not None

    # ========================================================================
    # Client lifecycle
    # ========================================================================

    async def startup(self) -> None:
        """Open the shared client. A second call is a no-op."""
        if self._client is not None:
            return

        logger.info(
            "Connecting to object store",
            extra={"endpoint": self.settings.endpoint, "region": self.settings.region},
        )

        try:
            self._client_context = self._session.client("s3", **self._client_kwargs())
            self._client = await self._client_context.__aenter__()
        except Exception as e:
            self._client_context = None
            logger.exception("Could not open S3 client")
            raise StorageError(
                f"Failed to initialize S3 backend: {e}",
                code="STORAGE_INITIALIZATION_ERROR",
                status_code=503,
            ) from e

        logger.info("Object store client ready")

    def _client_kwargs(self) -> dict[str, Any]:
        settings = self.settings
        client_kwargs: dict[str, Any] = {
            "region_name": settings.region,
            "use_ssl": settings.use_ssl,
            "verify": settings.verify_ssl,
            "config": Config(
                retries={"max_attempts": settings.max_retries, "mode": settings.retry_mode},
                connect_timeout=settings.timeout,
                read_timeout=settings.timeout,
                max_pool_connections=settings.max_pool_connections,
                # MinIO and LocalStack do not resolve virtual-hosted bucket names
                s3={"addressing_style": "path" if settings.is_minio else "auto"},
            ),
        }
        if settings.is_minio:
            client_kwargs["endpoint_url"] = settings.endpoint
        # Without static keys the default provider chain (env, profile, IAM role) applies
        if settings.access_key is not None and settings.secret_key is not None:
            client_kwargs["aws_access_key_id"] = settings.access_key.get_secret_value()
            client_kwargs["aws_secret_access_key"] = settings.secret_key.get_secret_value()
        return client_kwargs

    async def shutdown(self) -> None:
        if self._client_context is None:
            return

        try:
            await self._client_context.__aexit__(None, None, None)
        except Exception as e:
            logger.warning("Error closing S3 client", extra={"error": str(e)})
        finally:
            self._client = None
            self._client_context = None

        logger.info("Object store client closed")

    async def health_check(self) -> bool:
        """True when a ListBuckets call succeeds with the configured credentials."""
        if self._client is None:
            return False

        try:
            await self._client.list_buckets()
        except Exception as e:
            logger.warning("S3 health check failed", extra={"error": str(e)})
            return False
        return True

    def _ensure_client(self) -> Any:
        if self._client is None:
            msg = "S3 backend not initialized. Call startup() first."
            raise StorageNotConfiguredError(msg)
        return self._client

    @asynccontextmanager
    async def _translating(
        self,
        operation: str,
        failure: str,
        *,
        error_type: type[StorageError] = StorageError,
        code: str | None = None,
        bucket: str | None = None,
        key: str | None = None,
        **context: Any,
    ) -> AsyncIterator[None]:
        """Map anything raised inside the block onto a StorageError.

        ClientErrors go through ``map_boto_error``. Other exceptions become
        ``error_type`` with message ``"{failure}: {error}"``. StorageErrors
        pass through unchanged.
        """
        try:
            yield
        except StorageError:
            raise
        except ClientError as e:
            logger.exception("S3 %s failed", operation, extra={"bucket": bucket, "key": key})
            raise map_boto_error(e, operation=operation, key=key, bucket=bucket) from e
        except Exception as e:
            logger.exception(
                "Unexpected error during S3 %s", operation, extra={"bucket": bucket, "key": key}
            )
            metadata = {"bucket": bucket, **context, "error": str(e)}
            if key is not None:
                metadata["key"] = key
            raise error_type(f"{failure}: {e}", code=code, metadata=metadata) from e

    # ========================================================================
    # Buckets
    # ========================================================================

    async def bucket_exists(self, bucket: str) -> bool:
        """HeadBucket probe.

        Returns:
            False when the store answers NoSuchBucket/404; True otherwise

        Raises:
            StorageError: For any other failure (e.g. access denied)
        """
        client = self._ensure_client()
        try:
            await client.head_bucket(Bucket=bucket)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code", "") in _MISSING_BUCKET_CODES:
                return False
            logger.exception("Bucket existence check failed", extra={"bucket": bucket})
            raise map_boto_error(e, operation="bucket_exists", bucket=bucket) from e
        return True

    async def create_bucket(self, bucket: str) -> None:
        """Create ``bucket`` in the configured region.

        Raises:
            StorageBucketExistsError: If the name is already taken
        """
        client = self._ensure_client()
        region = self.settings.region
        request: dict[str, Any] = {"Bucket": bucket}
        # us-east-1 rejects an explicit LocationConstraint
        if region and region != "us-east-1":
            request["CreateBucketConfiguration"] = {"LocationConstraint": region}

        async with self._translating(
            "create_bucket",
            f"Failed to create bucket {bucket}",
            code="STORAGE_CREATE_BUCKET_ERROR",
            bucket=bucket,
            region=region,
        ):
            await client.create_bucket(**request)

        logger.info("Bucket created", extra={"bucket": bucket, "region": region})

    async def delete_bucket(self, bucket: str) -> None:
        """Delete an empty bucket.

        Raises:
            StorageBucketNotFoundError: If the bucket does not exist
            StorageValidationError: If the bucket still holds objects
        """
        client = self._ensure_client()
        async with self._translating(
            "delete_bucket",
            f"Failed to delete bucket {bucket}",
            code="STORAGE_DELETE_BUCKET_ERROR",
            bucket=bucket,
        ):
            await client.delete_bucket(Bucket=bucket)

        logger.info("Bucket deleted", extra={"bucket": bucket})

    async def list_buckets(self) -> list[str]:
        client = self._ensure_client()
        async with self._translating(
            "list_buckets", "Failed to list buckets", code="STORAGE_LIST_BUCKETS_ERROR"
        ):
            response = await client.list_buckets()

        names = [item["Name"] for item in response.get("Buckets", [])]
        logger.info("Listed buckets", extra={"count": len(names)})
        return names

    # ========================================================================
    # Objects
    # ========================================================================

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: UploadSource,
        content_type: str | None = None,
    ) -> None:
        """Upload one object.

        Args:
            bucket: Target bucket
            key: Object key
            data: Open binary stream, or a path to a local file
            content_type: MIME type; guessed from the file name for paths

        Raises:
            StorageUploadError: If the source cannot be read or the put fails
        """
        client = self._ensure_client()

        async with self._translating(
            "upload",
            f"Failed to upload {key}",
            error_type=StorageUploadError,
            bucket=bucket,
            key=key,
        ):
            if isinstance(data, str | os.PathLike):
                path = Path(data)
                body = await asyncio.to_thread(path.read_bytes)
                content_type = content_type or mimetypes.guess_type(path.name)[0]
            else:
                body = await asyncio.to_thread(data.read)

            request: dict[str, Any] = {"Bucket": bucket, "Key": key, "Body": body}
            if content_type:
                request["ContentType"] = content_type
            await client.put_object(**request)

        logger.info(
            "Object uploaded",
            extra={"bucket": bucket, "key": key, "size_bytes": len(body), "content_type": content_type},
        )

    async def get_object(self, bucket: str, key: str) -> StoredObject:
        """Download an object in full.

        Raises:
            StorageObjectNotFoundError: If the key does not exist
            StorageDownloadError: If reading the body fails
        """
        client = self._ensure_client()

        async with self._translating(
            "download",
            f"Failed to download {key}",
            error_type=StorageDownloadError,
            bucket=bucket,
            key=key,
        ):
            response = await client.get_object(Bucket=bucket, Key=key)
            raw = await response["Body"].read()

        body = raw if isinstance(raw, bytes) else bytes(raw)
        logger.info("Object downloaded", extra={"bucket": bucket, "key": key, "size_bytes": len(body)})
        return StoredObject(key=key, body=body, content_type=response.get("ContentType"))

    async def delete_object(self, bucket: str, key: str) -> None:
        """Delete a single object. S3 reports success for keys that do not exist."""
        client = self._ensure_client()
        async with self._translating(
            "delete", f"Failed to delete {key}", code="STORAGE_DELETE_ERROR", bucket=bucket, key=key
        ):
            await client.delete_object(Bucket=bucket, Key=key)

        logger.info("Object deleted", extra={"bucket": bucket, "key": key})

    async def list_objects_page(
        self,
        bucket: str,
        prefix: str | None = None,
        cursor: str | None = None,
    ) -> ObjectPage:
        """Fetch one ListObjectsV2 page.

        Args:
            bucket: Target bucket
            prefix: Only keys starting with this prefix
            cursor: Continuation token from the previous page

        Returns:
            ObjectPage with this page's keys and the next continuation token
        """
        client = self._ensure_client()
        request: dict[str, Any] = {"Bucket": bucket}
        if prefix:
            request["Prefix"] = prefix
        if cursor:
            request["ContinuationToken"] = cursor

        async with self._translating(
            "list",
            f"Failed to list objects in {bucket}",
            code="STORAGE_LIST_ERROR",
            bucket=bucket,
            prefix=prefix,
        ):
            response = await client.list_objects_v2(**request)

        page = ObjectPage(
            keys=[item["Key"] for item in response.get("Contents", [])],
            next_cursor=response.get("NextContinuationToken"),
        )
        logger.debug(
            "Listed object page",
            extra={
                "bucket": bucket,
                "prefix": prefix,
                "count": len(page.keys),
                "has_more": page.has_more,
            },
        )
        return page

    async def delete_objects(self, bucket: str, keys: list[str]) -> BatchDeleteStatus:
        """Submit one non-quiet DeleteObjects request for up to 1000 keys.

        Returns:
            BatchDeleteStatus carrying the HTTP status and per-key results
        """
        client = self._ensure_client()

        async with self._translating(
            "delete_objects",
            f"Failed to delete {len(keys)} objects from {bucket}",
            code="STORAGE_DELETE_ERROR",
            bucket=bucket,
            count=len(keys),
        ):
            response = await client.delete_objects(
                Bucket=bucket,
                Delete={"Objects": [{"Key": key} for key in keys], "Quiet": False},
            )

        status = BatchDeleteStatus(
            status_code=response.get("ResponseMetadata", {}).get("HTTPStatusCode", 200),
            deleted=[item["Key"] for item in response.get("Deleted", [])],
            errors=[
                {
                    "key": item.get("Key", ""),
                    "code": item.get("Code", ""),
                    "message": item.get("Message", ""),
                }
                for item in response.get("Errors", [])
            ],
        )
        logger.info(
            "Delete batch submitted",
            extra={
                "bucket": bucket,
                "requested": len(keys),
                "deleted": len(status.deleted),
                "errors": len(status.errors),
                "status_code": status.status_code,
            },
        )
        return status

    async def generate_presigned_url(self, bucket: str, key: str, expires_in: int) -> str:
        """Sign a GET URL for ``key`` valid for ``expires_in`` seconds.

        Signing is local; no request reaches the store.
        """
        client = self._ensure_client()
        async with self._translating(
            "generate_presigned_url",
            f"Failed to generate presigned URL for {key}",
            code="STORAGE_PRESIGNED_URL_ERROR",
            bucket=bucket,
            key=key,
        ):
            url = await client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        return cast("str", url)

    async def __aenter__(self) -> S3Backend:
        await self.startup()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.shutdown()
