"""Object storage integration for S3-compatible stores.

Layers, from the bottom up:
- ``backends``: the ObjectStoreBackend protocol and its aioboto3 implementation
- ``operations``: bulk upload, exhaustive listing, bulk delete, presigned links
- ``service``: StorageGatewayService, the singleton used by the API and CLI

Usage:
    from storage_gateway.infra.storage import get_storage_service

    service = get_storage_service()
    await service.startup()
    links = await service.list_objects("reports")
"""

from .exceptions import (
    BatchDeleteError,
    BulkUploadError,
    EmptyUploadError,
    NothingToDeleteError,
    StorageBucketExistsError,
    StorageBucketNotFoundError,
    StorageError,
    StorageFolderNotFoundError,
    StorageListingError,
    StorageNotConfiguredError,
    StorageObjectNotFoundError,
)
from .operations import BulkDeleteResult, BulkOutcome, ListedObject, UploadOutcome, UploadPayload
from .service import StorageGatewayService, get_storage_service, reset_storage_service

__all__ = [
    "BatchDeleteError",
    "BulkDeleteResult",
    "BulkOutcome",
    "BulkUploadError",
    "EmptyUploadError",
    "ListedObject",
    "NothingToDeleteError",
    "StorageBucketExistsError",
    "StorageBucketNotFoundError",
    "StorageError",
    "StorageFolderNotFoundError",
    "StorageGatewayService",
    "StorageListingError",
    "StorageNotConfiguredError",
    "StorageObjectNotFoundError",
    "UploadOutcome",
    "UploadPayload",
    "get_storage_service",
    "reset_storage_service",
]
