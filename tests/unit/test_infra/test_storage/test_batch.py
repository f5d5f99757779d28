"""Unit tests for concurrent bulk upload."""

import asyncio
from io import BytesIO

import pytest

from storage_gateway.infra.storage.exceptions import EmptyUploadError
from storage_gateway.infra.storage.operations import (
    BulkOutcome,
    UploadOutcome,
    UploadPayload,
    bulk_upload,
    list_all_keys,
)
from tests.conftest import InMemoryBackend


class UnreadableStream(BytesIO):
    def read(self, *args) -> bytes:
        raise OSError("disk read error")


def _payloads(*names: str) -> list[UploadPayload]:
    return [UploadPayload(name, BytesIO(name.encode()), "text/plain") for name in names]


class TestBulkUpload:
    @pytest.mark.asyncio
    async def test_all_files_uploaded_under_prefix(self, memory_backend: InMemoryBackend):
        outcome = await bulk_upload(
            memory_backend, "test-bucket", _payloads("a.png", "b.png"), prefix="images/"
        )

        assert outcome.success
        assert outcome.total == 2
        assert outcome.succeeded == 2
        assert [item.key for item in outcome.outcomes] == ["images/a.png", "images/b.png"]
        assert await list_all_keys(memory_backend, "test-bucket") == [
            "images/a.png",
            "images/b.png",
        ]

    @pytest.mark.asyncio
    async def test_one_failure_does_not_stop_the_others(self, memory_backend: InMemoryBackend):
        memory_backend.fail_keys = {"f2.txt"}

        outcome = await bulk_upload(
            memory_backend, "test-bucket", _payloads("f1.txt", "f2.txt", "f3.txt")
        )

        assert not outcome.success
        assert outcome.succeeded == 2
        assert outcome.failed == 1
        assert len(outcome.error_messages) == 1
        assert outcome.error_messages[0].startswith("Error uploading file f2.txt:")
        assert sorted(memory_backend.put_calls) == ["f1.txt", "f2.txt", "f3.txt"]
        assert await list_all_keys(memory_backend, "test-bucket") == ["f1.txt", "f3.txt"]

    @pytest.mark.asyncio
    async def test_unreadable_stream_fails_only_its_file(self, memory_backend: InMemoryBackend):
        payloads = [
            UploadPayload("1.txt", BytesIO(b"one")),
            UploadPayload("2.txt", UnreadableStream()),
            UploadPayload("3.txt", BytesIO(b"three")),
        ]

        outcome = await bulk_upload(memory_backend, "test-bucket", payloads)

        assert outcome.failed == 1
        assert outcome.succeeded == 2
        assert "2.txt" in outcome.error_summary
        assert "disk read error" in outcome.error_summary
        assert await list_all_keys(memory_backend, "test-bucket") == ["1.txt", "3.txt"]

    @pytest.mark.asyncio
    async def test_outcomes_keep_payload_order(self, memory_backend: InMemoryBackend):
        names = [f"file-{i}.bin" for i in range(20)]

        outcome = await bulk_upload(memory_backend, "test-bucket", _payloads(*names), max_concurrency=3)

        assert [item.name for item in outcome.outcomes] == names

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        active = 0
        peak = 0

        class SlowBackend(InMemoryBackend):
            async def put_object(self, bucket, key, data, content_type=None):
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.01)
                active -= 1
                await super().put_object(bucket, key, data, content_type)

        backend = SlowBackend()
        names = [f"{i}.txt" for i in range(10)]

        outcome = await bulk_upload(backend, "test-bucket", _payloads(*names), max_concurrency=3)

        assert outcome.success
        assert 1 < peak <= 3

    @pytest.mark.asyncio
    async def test_empty_payloads_rejected_without_store_call(self, memory_backend: InMemoryBackend):
        with pytest.raises(EmptyUploadError) as exc_info:
            await bulk_upload(memory_backend, "test-bucket", [])

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "No files were provided for upload."
        assert memory_backend.put_calls == []

    @pytest.mark.asyncio
    async def test_path_sources_are_read_from_disk(self, memory_backend: InMemoryBackend, tmp_path):
        source = tmp_path / "report.csv"
        source.write_bytes(b"a,b\n1,2\n")

        outcome = await bulk_upload(
            memory_backend, "test-bucket", [UploadPayload("report.csv", source)], prefix="daily"
        )

        assert outcome.success
        assert memory_backend.objects["test-bucket"]["daily/report.csv"].body == b"a,b\n1,2\n"


class TestBulkOutcome:
    def test_error_summary_joins_failures_with_newlines(self):
        outcome = BulkOutcome(
            total=3,
            outcomes=[
                UploadOutcome("a", "a", success=False, error="Error uploading file a: boom"),
                UploadOutcome("b", "b", success=True),
                UploadOutcome("c", "c", success=False, error="Error uploading file c: bang"),
            ],
        )

        assert outcome.error_summary == (
            "Error uploading file a: boom\nError uploading file c: bang"
        )

    def test_to_dict_lists_successes_too(self):
        outcome = BulkOutcome(
            total=2,
            outcomes=[
                UploadOutcome("a", "p/a", success=True),
                UploadOutcome("b", "p/b", success=False, error="x"),
            ],
        )

        data = outcome.to_dict()

        assert data["succeeded"] == 1
        assert data["failed"] == 1
        assert [item["key"] for item in data["outcomes"]] == ["p/a", "p/b"]
