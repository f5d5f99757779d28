"""HTTP application settings (``APP_`` environment variables)."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["development", "staging", "production", "test"]


class AppSettings(BaseSettings):
    """Identity, routing and server options for the gateway's FastAPI app.

    Example: APP_API_PREFIX=/storage-api APP_PORT=9000
    """

    service_name: str = Field(
        default="storage-gateway",
        pattern=r"^[a-z0-9]+(-[a-z0-9]+)*$",
        description="Name stamped on startup logs",
    )
    title: str = Field(default="Storage Gateway API", min_length=1)
    description: str = Field(
        default="Bucket, object and bulk transfer operations over an S3-compatible store",
    )
    version: str = Field(default="0.1.0", pattern=r"^\d+\.\d+\.\d+(-[a-zA-Z0-9]+)?$")
    environment: Environment = "development"
    api_prefix: str = Field(
        default="/api/v1",
        pattern=r"^/.*$",
        description="Prefix for the storage and health routers; /metrics stays at the root",
    )

    debug: bool = False
    docs_url: str | None = "/docs"
    openapi_url: str | None = "/openapi.json"
    root_path: str = Field(default="", description="Set when served behind a path-rewriting proxy")

    host: str = Field(default="0.0.0.0", min_length=1)
    port: int = Field(default=8000, ge=1, le=65535)

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        env_ignore_empty=True,
    )
