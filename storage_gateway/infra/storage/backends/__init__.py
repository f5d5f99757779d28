"""Object store backends.

Protocol-based abstraction over S3-compatible stores.
"""

from storage_gateway.core.settings.storage import StorageBackendType

from .factory import create_storage_backend
from .protocol import (
    BatchDeleteStatus,
    ObjectPage,
    ObjectStoreBackend,
    StoredObject,
    UploadSource,
)

__all__ = [
    "BatchDeleteStatus",
    "ObjectPage",
    "ObjectStoreBackend",
    "StorageBackendType",
    "StoredObject",
    "UploadSource",
    "create_storage_backend",
]
