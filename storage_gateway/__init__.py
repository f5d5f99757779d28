"""Storage gateway: object-storage operations over HTTP, backed by S3."""

__version__ = "0.1.0"
