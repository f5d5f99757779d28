"""Infrastructure adapters: logging, metrics and object storage."""
