"""Logging settings (``LOG_`` environment variables)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """How the gateway writes its logs.

    Console output is on by default; the rotating JSONL file is opt-in.
    Example: LOG_LEVEL=DEBUG LOG_JSON=false LOG_BOTO_LEVEL=INFO
    """

    service_name: str = Field(default="storage-gateway", description="Static `service` field on JSON records")
    level: LogLevel = "INFO"
    json_logs: bool = Field(default=True, alias="json")
    console_enabled: bool = True
    console_level: LogLevel | None = Field(default=None, description="Falls back to `level`")

    file_enabled: bool = False
    file_path: Path | None = Path("logs/storage-gateway.log.jsonl")
    file_level: LogLevel | None = Field(default=None, description="Falls back to `level`")
    file_max_bytes: int = Field(default=10 * 1024 * 1024, ge=1024, le=1024**3)
    file_backup_count: int = Field(default=5, ge=0, le=100)

    boto_level: LogLevel = Field(
        default="WARNING",
        description="Level for the botocore/aiobotocore/aioboto3 loggers, which log every request at DEBUG",
    )
    include_context: bool = Field(default=True, description="Inject request_id and other contextvars into records")
    capture_warnings: bool = True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def effective_file_path(self) -> Path | None:
        return self.file_path if self.file_enabled else None

    def to_logging_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``configure_logging``."""
        file_path = self.effective_file_path
        return {
            "service_name": self.service_name,
            "log_level": self.level,
            "json_logs": self.json_logs,
            "console_enabled": self.console_enabled,
            "console_level": self.console_level or self.level,
            "file_path": str(file_path) if file_path else None,
            "file_level": self.file_level or self.level,
            "file_max_bytes": self.file_max_bytes,
            "file_backup_count": self.file_backup_count,
            "boto_level": self.boto_level,
            "include_context": self.include_context,
            "capture_warnings": self.capture_warnings,
        }

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        env_ignore_empty=True,
    )
