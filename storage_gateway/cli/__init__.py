"""Command-line interface for storage-gateway."""
