"""Unit tests for RFC 7807 exception handlers."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI, Query
from httpx import ASGITransport, AsyncClient

from storage_gateway.app.exception_handlers import configure_exception_handlers
from storage_gateway.app.middleware import configure_middleware
from storage_gateway.infra.storage.exceptions import (
    BulkUploadError,
    StorageObjectNotFoundError,
)


@pytest.fixture
async def handler_client() -> AsyncGenerator[AsyncClient]:
    app = FastAPI()
    configure_exception_handlers(app)
    configure_middleware(app)

    @app.get("/missing")
    async def missing() -> None:
        raise StorageObjectNotFoundError("Object a.txt not found", metadata={"key": "a.txt"})

    @app.get("/bulk")
    async def bulk() -> None:
        raise BulkUploadError(
            "Error uploading file a: boom\nError uploading file b: bang",
            metadata={"succeeded": 1, "outcomes": [{"name": "c", "success": True}]},
        )

    @app.get("/validated")
    async def validated(count: int = Query(...)) -> dict[str, int]:
        return {"count": count}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


class TestAppExceptionHandler:
    @pytest.mark.asyncio
    async def test_storage_error_as_problem_details(self, handler_client: AsyncClient):
        response = await handler_client.get("/missing", headers={"X-Request-ID": "req-123"})

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("application/problem+json")
        data = response.json()
        assert data["status"] == 404
        assert data["type"] == "storage-not-found"
        assert data["detail"] == "Object a.txt not found"
        assert data["instance"] == "/missing"
        assert data["key"] == "a.txt"
        assert data["request_id"] == "req-123"
        assert response.headers["x-request-id"] == "req-123"

    @pytest.mark.asyncio
    async def test_extra_members_are_merged(self, handler_client: AsyncClient):
        response = await handler_client.get("/bulk")

        assert response.status_code == 500
        data = response.json()
        assert data["detail"].split("\n") == [
            "Error uploading file a: boom",
            "Error uploading file b: bang",
        ]
        assert data["succeeded"] == 1
        assert data["outcomes"] == [{"name": "c", "success": True}]


class TestValidationHandler:
    @pytest.mark.asyncio
    async def test_field_errors_listed(self, handler_client: AsyncClient):
        response = await handler_client.get("/validated", params={"count": "many"})

        assert response.status_code == 422
        data = response.json()
        assert data["type"] == "validation-error"
        assert data["errors"][0]["field"] == "query.count"
        assert data["errors"][0]["value"] == "many"
