"""Unit tests for StorageGatewayService orchestration."""

from io import BytesIO

import pytest

from storage_gateway.core.settings.storage import StorageSettings
from storage_gateway.infra.storage.exceptions import (
    EmptyUploadError,
    NothingToDeleteError,
    StorageBucketExistsError,
    StorageBucketNotFoundError,
    StorageFolderNotFoundError,
    StorageNotConfiguredError,
    StorageObjectNotFoundError,
)
from storage_gateway.infra.storage.operations import UploadPayload
from storage_gateway.infra.storage.service import (
    StorageGatewayService,
    get_storage_service,
    reset_storage_service,
)
from tests.conftest import InMemoryBackend


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_disabled_storage_skips_startup(self):
        service = StorageGatewayService(StorageSettings(enabled=False))

        await service.startup()

        assert not service.is_ready
        assert await service.health_check() is False

    @pytest.mark.asyncio
    async def test_operations_require_startup(self, storage_settings):
        service = StorageGatewayService(storage_settings, backend=InMemoryBackend())

        with pytest.raises(StorageNotConfiguredError) as exc_info:
            await service.list_buckets()

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_startup_and_shutdown(self, storage_settings, memory_backend):
        service = StorageGatewayService(storage_settings, backend=memory_backend)

        await service.startup()
        assert service.is_ready
        assert await service.health_check() is True

        await service.shutdown()
        assert not service.is_ready
        assert not memory_backend.started

    def test_singleton(self):
        reset_storage_service()
        try:
            assert get_storage_service() is get_storage_service()
        finally:
            reset_storage_service()


class TestBuckets:
    @pytest.mark.asyncio
    async def test_create_and_list(self, storage_service):
        await storage_service.create_bucket("reports")

        assert await storage_service.list_buckets() == ["reports", "test-bucket"]

    @pytest.mark.asyncio
    async def test_create_existing_bucket(self, storage_service):
        with pytest.raises(StorageBucketExistsError) as exc_info:
            await storage_service.create_bucket("test-bucket")

        assert exc_info.value.detail == "Bucket test-bucket already exists."
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_bucket(self, storage_service, memory_backend):
        await storage_service.delete_bucket("test-bucket")

        assert "test-bucket" not in memory_backend.objects


class TestUploads:
    @pytest.mark.asyncio
    async def test_upload_file_returns_key(self, storage_service, memory_backend):
        payload = UploadPayload("dir/a.png", BytesIO(b"png"), "image/png")

        key = await storage_service.upload_file("test-bucket", payload, prefix="images/")

        assert key == "images/a.png"
        stored = memory_backend.objects["test-bucket"]["images/a.png"]
        assert stored.body == b"png"
        assert stored.content_type == "image/png"

    @pytest.mark.asyncio
    async def test_upload_to_missing_bucket(self, storage_service, memory_backend):
        payload = UploadPayload("a.png", BytesIO(b"png"))

        with pytest.raises(StorageBucketNotFoundError) as exc_info:
            await storage_service.upload_file("missing", payload)

        assert exc_info.value.detail == "Bucket missing does not exist."
        assert memory_backend.put_calls == []

    @pytest.mark.asyncio
    async def test_bulk_upload_reports_failures(self, storage_service, memory_backend):
        memory_backend.fail_keys = {"b.txt"}
        payloads = [UploadPayload(name, BytesIO(b"x")) for name in ("a.txt", "b.txt", "c.txt")]

        outcome = await storage_service.bulk_upload("test-bucket", payloads)

        assert outcome.succeeded == 2
        assert outcome.failed == 1

    @pytest.mark.asyncio
    async def test_bulk_upload_empty(self, storage_service):
        with pytest.raises(EmptyUploadError):
            await storage_service.bulk_upload("test-bucket", [])

    @pytest.mark.asyncio
    async def test_bulk_upload_missing_bucket(self, storage_service, memory_backend):
        payloads = [UploadPayload("a.txt", BytesIO(b"x"))]

        with pytest.raises(StorageBucketNotFoundError):
            await storage_service.bulk_upload("missing", payloads)

        assert memory_backend.put_calls == []

    @pytest.mark.asyncio
    async def test_folder_upload_is_not_recursive(self, storage_service, memory_backend, tmp_path):
        (tmp_path / "a.txt").write_text("a")
        (tmp_path / "b.csv").write_text("b")
        (tmp_path / "nested").mkdir()
        (tmp_path / "nested" / "c.txt").write_text("c")

        outcome = await storage_service.bulk_upload_folder("test-bucket", tmp_path, prefix="up/")

        assert outcome.success
        assert sorted(memory_backend.objects["test-bucket"]) == ["up/a.txt", "up/b.csv"]

    @pytest.mark.asyncio
    async def test_folder_missing(self, storage_service, tmp_path):
        with pytest.raises(StorageFolderNotFoundError) as exc_info:
            await storage_service.bulk_upload_folder("test-bucket", tmp_path / "nope")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_folder_empty(self, storage_service, tmp_path):
        with pytest.raises(EmptyUploadError) as exc_info:
            await storage_service.bulk_upload_folder("test-bucket", tmp_path)

        assert exc_info.value.detail == "No files found in the folder to upload."


class TestObjects:
    @pytest.mark.asyncio
    async def test_list_objects_signs_every_key(self, storage_service):
        backend = InMemoryBackend(page_size=2)
        backend.seed("test-bucket", "a", "b", "c")
        service = StorageGatewayService(storage_service.settings, backend=backend)
        await service.startup()

        links = await service.list_objects("test-bucket")

        assert [link.key for link in links] == ["a", "b", "c"]
        assert all(link.expires_in_seconds == 60 for link in links)

    @pytest.mark.asyncio
    async def test_list_objects_missing_bucket(self, storage_service):
        with pytest.raises(StorageBucketNotFoundError):
            await storage_service.list_objects("missing")

    @pytest.mark.asyncio
    async def test_get_object(self, storage_service, memory_backend):
        memory_backend.seed("test-bucket", "a.txt", body=b"hello")

        stored = await storage_service.get_object("test-bucket", "a.txt")

        assert stored.body == b"hello"

    @pytest.mark.asyncio
    async def test_get_missing_object(self, storage_service):
        with pytest.raises(StorageObjectNotFoundError):
            await storage_service.get_object("test-bucket", "nope")

    @pytest.mark.asyncio
    async def test_delete_object(self, storage_service, memory_backend):
        memory_backend.seed("test-bucket", "a.txt")

        await storage_service.delete_object("test-bucket", "a.txt")

        assert memory_backend.objects["test-bucket"] == {}

    @pytest.mark.asyncio
    async def test_bulk_delete_by_extension(self, storage_service, memory_backend):
        memory_backend.seed("test-bucket", "a.log", "b.txt", "c.LOG")

        result = await storage_service.bulk_delete("test-bucket", extension=".log")

        assert sorted(result.deleted) == ["a.log", "c.LOG"]

    @pytest.mark.asyncio
    async def test_bulk_delete_without_criteria(self, storage_service, memory_backend):
        memory_backend.seed("test-bucket", "a.log")

        with pytest.raises(NothingToDeleteError):
            await storage_service.bulk_delete("test-bucket")

        assert memory_backend.delete_calls == []
