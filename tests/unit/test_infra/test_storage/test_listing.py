"""Unit tests for exhaustive cursor-driven listing."""

from unittest.mock import AsyncMock

import pytest

from storage_gateway.infra.storage.backends.protocol import ObjectPage
from storage_gateway.infra.storage.exceptions import (
    StorageBucketNotFoundError,
    StorageError,
    StorageListingError,
)
from storage_gateway.infra.storage.operations import list_all_keys
from tests.conftest import InMemoryBackend


class TestListAllKeys:
    @pytest.mark.asyncio
    async def test_follows_cursors_until_empty_cursor(self):
        backend = AsyncMock()
        backend.list_objects_page.side_effect = [
            ObjectPage(keys=["A", "B"], next_cursor="tok1"),
            ObjectPage(keys=["C"], next_cursor="tok2"),
            ObjectPage(keys=[], next_cursor=""),
        ]

        keys = await list_all_keys(backend, "bucket", prefix="p/")

        assert keys == ["A", "B", "C"]
        assert backend.list_objects_page.await_count == 3
        cursors = [call.kwargs["cursor"] for call in backend.list_objects_page.await_args_list]
        assert cursors == [None, "tok1", "tok2"]

    @pytest.mark.asyncio
    async def test_empty_page_with_cursor_keeps_going(self):
        backend = AsyncMock()
        backend.list_objects_page.side_effect = [
            ObjectPage(keys=["A"], next_cursor="t1"),
            ObjectPage(keys=[], next_cursor="t2"),
            ObjectPage(keys=["B"], next_cursor=None),
        ]

        keys = await list_all_keys(backend, "bucket")

        assert keys == ["A", "B"]
        assert backend.list_objects_page.await_count == 3

    @pytest.mark.asyncio
    async def test_single_page_without_cursor(self):
        backend = AsyncMock()
        backend.list_objects_page.return_value = ObjectPage(keys=["only"], next_cursor=None)

        assert await list_all_keys(backend, "bucket") == ["only"]
        backend.list_objects_page.assert_awaited_once_with("bucket", prefix=None, cursor=None)

    @pytest.mark.asyncio
    async def test_empty_bucket(self, memory_backend: InMemoryBackend):
        assert await list_all_keys(memory_backend, "test-bucket") == []

    @pytest.mark.asyncio
    async def test_pages_through_fake_store(self):
        backend = InMemoryBackend(page_size=2)
        backend.seed("test-bucket", "a", "b", "c", "d", "e")

        keys = await list_all_keys(backend, "test-bucket")

        assert keys == ["a", "b", "c", "d", "e"]
        assert backend.list_calls == [None, "2", "4"]

    @pytest.mark.asyncio
    async def test_page_failure_aborts_whole_listing(self):
        backend = InMemoryBackend(page_size=2)
        backend.seed("test-bucket", "a", "b", "c", "d", "e")
        backend.list_failure_after = 1

        with pytest.raises(StorageListingError) as exc_info:
            await list_all_keys(backend, "test-bucket")

        assert exc_info.value.status_code == 502
        assert exc_info.value.extra["pages_read"] == 1
        assert exc_info.value.extra["cause"] == "STORAGE_LIST_ERROR"
        assert isinstance(exc_info.value.__cause__, StorageError)

    @pytest.mark.asyncio
    async def test_missing_bucket_is_not_wrapped(self):
        backend = InMemoryBackend(buckets=())

        with pytest.raises(StorageBucketNotFoundError):
            await list_all_keys(backend, "missing")
