"""CLI command groups."""

from storage_gateway.cli.commands import storage

__all__ = ["storage"]
