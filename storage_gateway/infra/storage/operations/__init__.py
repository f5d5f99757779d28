"""Bulk storage operations built on the ObjectStoreBackend protocol."""

from .batch import BulkOutcome, UploadOutcome, UploadPayload, bulk_upload
from .deletion import BulkDeleteResult, bulk_delete, select_keys
from .listing import list_all_keys
from .presigned import ListedObject, issue_access_links

__all__ = [
    "BulkDeleteResult",
    "BulkOutcome",
    "ListedObject",
    "UploadOutcome",
    "UploadPayload",
    "bulk_delete",
    "bulk_upload",
    "issue_access_links",
    "list_all_keys",
    "select_keys",
]
