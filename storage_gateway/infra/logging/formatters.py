"""JSON Lines formatter with OpenTelemetry trace correlation."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from opentelemetry import trace

# Attributes every LogRecord carries; anything else came from ``extra=`` or the log context
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "taskName",
}


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Each record carries a millisecond UTC ``timestamp``, the ``trace_id`` and
    ``span_id`` of the active span, any static fields and every ``extra``
    attribute. Tracebacks are escaped so a record never spans lines.

    Example output:
        {"level": "INFO", "logger": "storage_gateway.infra.storage.operations.batch",
         "message": "Bulk upload finished", "timestamp": "2025-01-01T00:00:00.123Z",
         "service": "storage-gateway", "bucket": "reports", "succeeded": 3, "failed": 0}
    """

    def __init__(
        self,
        fmt_keys: dict[str, str] | None = None,
        static: dict[str, Any] | None = None,
    ) -> None:
        """Build the formatter.

        Args:
            fmt_keys: Output key to LogRecord attribute mapping.
            static: Fields added to every record, e.g. ``{"service": "storage-gateway"}``.
        """
        super().__init__()
        self.fmt_keys = fmt_keys or {"level": "levelname", "logger": "name", "message": "message"}
        self.static = static or {}

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        data: dict[str, Any] = {key: getattr(record, attr, None) for key, attr in self.fmt_keys.items()}
        data["timestamp"] = (
            datetime.fromtimestamp(record.created, tz=UTC)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z")
        )

        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            data["trace_id"] = format(span_context.trace_id, "032x")
            data["span_id"] = format(span_context.span_id, "016x")

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info).replace("\n", "\\n")
        if record.stack_info:
            data["stack_trace"] = record.stack_info.replace("\n", "\\n")

        data.update(self.static)
        for key, value in vars(record).items():
            if key not in _STANDARD_ATTRS and key not in data:
                data[key] = value

        return json.dumps(data, ensure_ascii=False, default=str)
