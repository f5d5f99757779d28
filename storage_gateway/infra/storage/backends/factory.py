"""Backend factory for creating object store backends from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from storage_gateway.core.settings.storage import StorageBackendType
from storage_gateway.infra.storage.exceptions import StorageNotConfiguredError

if TYPE_CHECKING:
    from storage_gateway.core.settings.storage import StorageSettings

    from .protocol import ObjectStoreBackend


def create_storage_backend(settings: StorageSettings) -> ObjectStoreBackend:
    """Create the backend selected by ``settings.backend``.

    Args:
        settings: Storage configuration settings

    Returns:
        Backend implementing ObjectStoreBackend (not yet started)

    Raises:
        StorageNotConfiguredError: If storage is disabled or the backend type
            is unsupported

    Example:
        backend = create_storage_backend(get_storage_settings())
        await backend.startup()
        page = await backend.list_objects_page("reports")
        await backend.shutdown()
    """
    if not settings.is_configured:
        msg = "Storage not configured. Set STORAGE_ENABLED=true."
        raise StorageNotConfiguredError(msg)

    backend_type = settings.backend

    match backend_type:
        case StorageBackendType.S3 | StorageBackendType.MINIO:
            # Both S3 and MinIO use the same S3-compatible backend
            from .s3.backend import S3Backend

            return S3Backend(settings)

        case _:
            msg = (
                f"Unsupported storage backend: {backend_type}. "
                f"Supported backends: {', '.join([t.value for t in StorageBackendType])}"
            )
            raise StorageNotConfiguredError(msg)
