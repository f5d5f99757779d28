"""Unit tests for application lifespan."""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI

from storage_gateway.app import lifespan as lifespan_module
from storage_gateway.core.settings.storage import StorageSettings
from storage_gateway.infra.storage.exceptions import StorageError


@pytest.fixture
def failing_service(monkeypatch) -> AsyncMock:
    service = AsyncMock()
    service.startup.side_effect = StorageError("endpoint unreachable", code="STORAGE_INITIALIZATION_ERROR")
    monkeypatch.setattr(lifespan_module, "get_storage_service", lambda: service)
    monkeypatch.setattr(lifespan_module, "setup_logging", lambda **kwargs: None)
    return service


class TestLifespan:
    @pytest.mark.asyncio
    async def test_degraded_mode_when_storage_fails(self, monkeypatch, failing_service):
        monkeypatch.setattr(
            lifespan_module, "get_storage_settings", lambda: StorageSettings(enabled=True)
        )

        async with lifespan_module.lifespan(FastAPI()):
            failing_service.startup.assert_awaited_once()

        failing_service.shutdown.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_required_storage_fails_startup(self, monkeypatch, failing_service):
        monkeypatch.setattr(
            lifespan_module,
            "get_storage_settings",
            lambda: StorageSettings(enabled=True, startup_require_storage=True),
        )

        with pytest.raises(StorageError):
            async with lifespan_module.lifespan(FastAPI()):
                pass

    @pytest.mark.asyncio
    async def test_disabled_storage_is_not_started(self, monkeypatch, failing_service):
        monkeypatch.setattr(
            lifespan_module, "get_storage_settings", lambda: StorageSettings(enabled=False)
        )

        async with lifespan_module.lifespan(FastAPI()):
            pass

        failing_service.startup.assert_not_awaited()
