"""Logging infrastructure.

Structured JSONL logging with contextvars-based context injection and a
QueueHandler/QueueListener pair so request handlers never block on I/O.

Basic usage:
    from storage_gateway.infra.logging import set_log_context
    import logging

    logger = logging.getLogger(__name__)

    set_log_context(request_id="abc-123")
    logger.info("Processing request")  # includes request_id
"""

from storage_gateway.infra.logging.config import configure_logging, setup_logging, shutdown
from storage_gateway.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    set_log_context,
)
from storage_gateway.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
