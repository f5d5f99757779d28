"""Pytest configuration and shared fixtures.

Organization:
    - InMemoryBackend: an ObjectStoreBackend fake with paging and failure injection
    - Settings Fixtures: storage settings built without touching the environment
    - Service Fixtures: a started StorageGatewayService over the fake backend
    - Application Fixtures: FastAPI app and HTTP client wired to that service
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from storage_gateway.core.settings.storage import StorageSettings
from storage_gateway.infra.storage.backends.protocol import (
    BatchDeleteStatus,
    ObjectPage,
    StoredObject,
    UploadSource,
)
from storage_gateway.infra.storage.exceptions import (
    StorageBucketExistsError,
    StorageBucketNotFoundError,
    StorageError,
    StorageObjectNotFoundError,
    StorageUploadError,
)
from storage_gateway.infra.storage.service import StorageGatewayService

# Ensure tests run without external infrastructure
os.environ.setdefault("APP_ROOT_PATH", "")
os.environ.setdefault("STORAGE_ENABLED", "false")
os.environ.setdefault("LOG_FILE_ENABLED", "false")


# ============================================================================
# In-memory Backend
# ============================================================================


class InMemoryBackend:
    """Dict-backed object store.

    Listing is paged by ``page_size`` with the next start index as cursor.

    Failure injection:
        fail_keys: put_object raises StorageUploadError for these keys
        list_failure_after: list_objects_page raises after this many pages
        delete_status: HTTP status reported by delete_objects
        delete_errors: per-key errors reported by delete_objects
    """

    backend_name = "memory"

    def __init__(self, page_size: int = 1000, buckets: tuple[str, ...] = ("test-bucket",)) -> None:
        self.page_size = page_size
        self.objects: dict[str, dict[str, StoredObject]] = {name: {} for name in buckets}
        self.started = False

        self.fail_keys: set[str] = set()
        self.list_failure_after: int | None = None
        self.delete_status = 200
        self.delete_errors: list[dict[str, str]] = []

        self.put_calls: list[str] = []
        self.list_calls: list[str | None] = []
        self.delete_calls: list[list[str]] = []
        self._signed = 0

    @property
    def is_ready(self) -> bool:
        return self.started

    async def startup(self) -> None:
        self.started = True

    async def shutdown(self) -> None:
        self.started = False

    async def health_check(self) -> bool:
        return self.started

    def _bucket(self, bucket: str) -> dict[str, StoredObject]:
        if bucket not in self.objects:
            raise StorageBucketNotFoundError(f"Bucket {bucket} does not exist.")
        return self.objects[bucket]

    async def bucket_exists(self, bucket: str) -> bool:
        return bucket in self.objects

    async def create_bucket(self, bucket: str) -> None:
        if bucket in self.objects:
            raise StorageBucketExistsError(f"Bucket {bucket} already exists.")
        self.objects[bucket] = {}

    async def delete_bucket(self, bucket: str) -> None:
        self._bucket(bucket)
        del self.objects[bucket]

    async def list_buckets(self) -> list[str]:
        return sorted(self.objects)

    async def put_object(
        self,
        bucket: str,
        key: str,
        data: UploadSource,
        content_type: str | None = None,
    ) -> None:
        self.put_calls.append(key)
        if key in self.fail_keys:
            raise StorageUploadError(f"simulated failure for {key}")
        objects = self._bucket(bucket)
        if isinstance(data, str | os.PathLike):
            body = Path(data).read_bytes()
        else:
            body = data.read()
        objects[key] = StoredObject(key=key, body=body, content_type=content_type)

    async def get_object(self, bucket: str, key: str) -> StoredObject:
        objects = self._bucket(bucket)
        if key not in objects:
            raise StorageObjectNotFoundError(f"Object {key} not found")
        return objects[key]

    async def delete_object(self, bucket: str, key: str) -> None:
        self._bucket(bucket).pop(key, None)

    async def list_objects_page(
        self,
        bucket: str,
        prefix: str | None = None,
        cursor: str | None = None,
    ) -> ObjectPage:
        if self.list_failure_after is not None and len(self.list_calls) >= self.list_failure_after:
            raise StorageError("simulated listing failure", code="STORAGE_LIST_ERROR")
        self.list_calls.append(cursor)

        keys = sorted(key for key in self._bucket(bucket) if key.startswith(prefix or ""))
        start = int(cursor or 0)
        end = start + self.page_size
        next_cursor = str(end) if end < len(keys) else None
        return ObjectPage(keys=keys[start:end], next_cursor=next_cursor)

    async def delete_objects(self, bucket: str, keys: list[str]) -> BatchDeleteStatus:
        self.delete_calls.append(list(keys))
        objects = self._bucket(bucket)
        if not 200 <= self.delete_status < 300 or self.delete_errors:
            return BatchDeleteStatus(status_code=self.delete_status, errors=self.delete_errors)
        for key in keys:
            objects.pop(key, None)
        return BatchDeleteStatus(status_code=self.delete_status, deleted=list(keys))

    async def generate_presigned_url(self, bucket: str, key: str, expires_in: int) -> str:
        self._signed += 1
        return f"https://memory.test/{bucket}/{key}?X-Expires={expires_in}&X-Signature={self._signed}"

    def seed(self, bucket: str, *keys: str, body: bytes = b"data") -> None:
        for key in keys:
            self.objects.setdefault(bucket, {})[key] = StoredObject(key=key, body=body)


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def storage_settings() -> StorageSettings:
    """Enabled storage settings that never read the environment."""
    return StorageSettings(
        enabled=True,
        endpoint="http://localhost:9000",
        access_key="test-access",
        secret_key="test-secret",
        presigned_url_expiry_seconds=60,
        bulk_upload_max_concurrency=4,
    )


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def memory_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
async def storage_service(
    storage_settings: StorageSettings, memory_backend: InMemoryBackend
) -> AsyncGenerator[StorageGatewayService]:
    """A started service over the in-memory backend."""
    service = StorageGatewayService(storage_settings, backend=memory_backend)
    await service.startup()
    yield service
    await service.shutdown()


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(storage_service: StorageGatewayService):
    """FastAPI application with the storage dependency bound to ``storage_service``."""
    from storage_gateway.app.main import create_app
    from storage_gateway.infra.storage.dependencies import get_storage_service

    application = create_app()
    application.dependency_overrides[get_storage_service] = lambda: storage_service
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient]:
    """Async HTTP client for the application.

    The lifespan is not run, so the real storage singleton is never started.
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
