"""Unit tests for request ID and metrics middleware."""

import uuid
from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from storage_gateway.app.middleware import configure_middleware
from storage_gateway.infra.logging import get_log_context


@pytest.fixture
async def middleware_client() -> AsyncGenerator[AsyncClient]:
    app = FastAPI()
    configure_middleware(app)

    @app.get("/echo")
    async def echo(request: Request) -> dict[str, str | None]:
        return {
            "state": request.state.request_id,
            "log_context": get_log_context().get("request_id"),
        }

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


class TestRequestIDMiddleware:
    @pytest.mark.asyncio
    async def test_incoming_id_is_propagated(self, middleware_client: AsyncClient):
        response = await middleware_client.get("/echo", headers={"X-Request-ID": "abc-123"})

        assert response.headers["x-request-id"] == "abc-123"
        assert response.json() == {"state": "abc-123", "log_context": "abc-123"}

    @pytest.mark.asyncio
    async def test_id_generated_when_missing(self, middleware_client: AsyncClient):
        response = await middleware_client.get("/echo")

        request_id = response.headers["x-request-id"]
        uuid.UUID(request_id)
        assert response.json()["state"] == request_id


class TestMetricsMiddleware:
    @pytest.mark.asyncio
    async def test_process_time_header(self, middleware_client: AsyncClient):
        response = await middleware_client.get("/echo")

        assert float(response.headers["x-process-time"]) >= 0
