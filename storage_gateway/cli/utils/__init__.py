"""CLI helpers."""

from storage_gateway.cli.utils.async_runner import coro
from storage_gateway.cli.utils.formatters import (
    error,
    info,
    object_line,
    outcome_line,
    success,
    warning,
)

__all__ = [
    "coro",
    "error",
    "info",
    "object_line",
    "outcome_line",
    "success",
    "warning",
]
