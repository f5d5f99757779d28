"""Object store settings (``STORAGE_`` environment variables).

Buckets are chosen per request, so nothing here names a bucket. The settings
say how to reach the store and how hard bulk operations may push it.

Example:
    STORAGE_ENABLED=true
    STORAGE_ENDPOINT=http://localhost:9000
    STORAGE_ACCESS_KEY=minioadmin
    STORAGE_SECRET_KEY=minioadmin
    STORAGE_PRESIGNED_URL_EXPIRY_SECONDS=60
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import Field, SecretStr, computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageBackendType(StrEnum):
    S3 = "s3"
    MINIO = "minio"


class StorageSettings(BaseSettings):
    """Connection, retry and bulk-operation limits for the object store."""

    enabled: bool = False
    backend: StorageBackendType = StorageBackendType.S3
    startup_require_storage: bool = Field(
        default=False,
        description="Abort startup when the store cannot be reached instead of serving 503s",
    )

    # Connection
    endpoint: str | None = Field(default=None, description="MinIO/LocalStack URL; unset for AWS")
    region: str = "us-east-1"
    access_key: SecretStr | None = None
    secret_key: SecretStr | None = None
    use_ssl: bool = True
    verify_ssl: bool = True

    # botocore client
    max_retries: int = Field(default=3, ge=0, le=10)
    retry_mode: Literal["standard", "adaptive", "legacy"] = "adaptive"
    timeout: int = Field(default=30, ge=1, le=300, description="Connect and read timeout in seconds")
    max_pool_connections: int = Field(default=10, ge=1, le=200)

    # Bulk operations
    presigned_url_expiry_seconds: int = Field(
        default=60,
        ge=1,
        le=7 * 24 * 3600,
        description="Lifetime of the download URLs returned by object listings",
    )
    bulk_upload_max_concurrency: int = Field(
        default=8,
        ge=1,
        le=256,
        description="Concurrent put-object workers per bulk upload",
    )
    delete_batch_size: int = Field(
        default=1000,
        ge=1,
        le=1000,
        description="Keys per delete-objects request; the store accepts at most 1000",
    )

    @model_validator(mode="after")
    def _check_credentials(self) -> StorageSettings:
        # Static credentials come as a pair; neither means the default provider chain
        if (self.access_key is None) != (self.secret_key is None):
            raise ValueError("access_key and secret_key must be set together or not at all")
        return self

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_configured(self) -> bool:
        return self.enabled

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_minio(self) -> bool:
        """True when a custom endpoint is set."""
        return self.endpoint is not None

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        env_ignore_empty=True,
    )
