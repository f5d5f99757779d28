"""Modular Pydantic Settings v2 configuration.

One settings class per domain (app, logging, storage), each reading its own
environment prefix, frozen after validation and cached by its loader.

Configuration precedence (highest to lowest):
    1. init kwargs (testing/overrides)
    2. Environment variables (production)
    3. .env file (development only)
"""

from __future__ import annotations

from .app import AppSettings
from .loader import get_app_settings, get_logging_settings, get_storage_settings
from .logs import LoggingSettings
from .storage import StorageBackendType, StorageSettings

__all__ = [
    "AppSettings",
    "LoggingSettings",
    "StorageBackendType",
    "StorageSettings",
    "get_app_settings",
    "get_logging_settings",
    "get_storage_settings",
]
