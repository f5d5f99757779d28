"""Storage exceptions for S3-compatible operations.

Every exception is an AppException, so the application exception handler
renders it as RFC 7807 problem details using the class's status code and a
``type`` derived from its error code (``STORAGE_BUCKET_NOT_FOUND`` becomes
``storage-bucket-not-found``). Metadata is merged into the response body.

Example:
    ```python
    from storage_gateway.infra.storage.exceptions import map_boto_error

    try:
        await client.put_object(Bucket=bucket, Key=key, Body=body)
    except ClientError as e:
        raise map_boto_error(e, operation="upload", key=key) from e
    ```
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from storage_gateway.core.exceptions import AppException

if TYPE_CHECKING:
    from botocore.exceptions import ClientError


class StorageError(AppException):
    """Base exception for all storage errors.

    Subclasses set ``default_code``, ``default_status_code`` and, where the
    message never varies, ``default_message``. Explicit arguments win.

    Attributes:
        code: Error code identifier for programmatic handling.
        message: Human-readable error message (also ``detail``).
        extra: Metadata merged into the problem details body.

    Example:
        ```python
        raise StorageError(
            "Failed to connect to storage backend",
            code="STORAGE_CONNECTION_ERROR",
            status_code=503,
            metadata={"endpoint": "http://localhost:9000"},
        )
        ```
    """

    default_code: ClassVar[str] = "STORAGE_ERROR"
    default_status_code: ClassVar[int] = 500
    default_message: ClassVar[str] = "Storage operation failed."

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        status_code: int | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self.code = code or self.default_code
        self.message = message or self.default_message
        super().__init__(
            status_code=status_code or self.default_status_code,
            detail=self.message,
            type=self.code.lower().replace("_", "-"),
            extra=metadata or {},
        )


# ============================================================================
# Lifecycle
# ============================================================================


class StorageNotConfiguredError(StorageError):
    """Storage is disabled or its client has not been started."""

    default_code = "STORAGE_NOT_CONFIGURED"
    default_status_code = 503
    default_message = "Storage is not configured or enabled"


# ============================================================================
# Not found / conflicts
# ============================================================================


class StorageBucketNotFoundError(StorageError):
    """The target bucket does not exist.

    Raised by the advisory existence check and when the store itself answers
    ``NoSuchBucket``.
    """

    default_code = "STORAGE_BUCKET_NOT_FOUND"
    default_status_code = 404


class StorageObjectNotFoundError(StorageError):
    default_code = "STORAGE_NOT_FOUND"
    default_status_code = 404


class StorageFolderNotFoundError(StorageError):
    """A server-side folder given for a bulk upload does not exist."""

    default_code = "STORAGE_FOLDER_NOT_FOUND"
    default_status_code = 404


class StorageBucketExistsError(StorageError):
    default_code = "STORAGE_BUCKET_EXISTS"
    default_status_code = 400


# ============================================================================
# Bad requests
# ============================================================================


class EmptyUploadError(StorageError):
    """A bulk upload was requested with nothing to upload."""

    default_code = "STORAGE_EMPTY_UPLOAD"
    default_status_code = 400
    default_message = "No files were provided for upload."


class NothingToDeleteError(StorageError):
    """A bulk delete selection matched no objects."""

    default_code = "STORAGE_NOTHING_TO_DELETE"
    default_status_code = 400
    default_message = "No files found to delete."


class StorageValidationError(StorageError):
    """The store rejected the request as malformed (bad bucket name, long key, non-empty bucket)."""

    default_code = "STORAGE_VALIDATION_ERROR"
    default_status_code = 400


# ============================================================================
# Store failures
# ============================================================================


class StorageUploadError(StorageError):
    default_code = "STORAGE_UPLOAD_ERROR"


class StorageDownloadError(StorageError):
    default_code = "STORAGE_DOWNLOAD_ERROR"


class StoragePermissionError(StorageError):
    default_code = "STORAGE_PERMISSION_DENIED"
    default_status_code = 403


class StorageQuotaExceededError(StorageError):
    default_code = "STORAGE_QUOTA_EXCEEDED"
    default_status_code = 507


class StorageTimeoutError(StorageError):
    default_code = "STORAGE_TIMEOUT"
    default_status_code = 504


# ============================================================================
# Bulk operations
# ============================================================================


class StorageListingError(StorageError):
    """A page of an exhaustive listing failed; no partial key set is returned."""

    default_code = "STORAGE_LISTING_ERROR"
    default_status_code = 502


class BatchDeleteError(StorageError):
    """A delete-objects batch raised, answered non-2xx, or reported per-key errors.

    ``metadata["errors"]`` carries the per-key failures when the store
    reported them.
    """

    default_code = "STORAGE_BATCH_DELETE_ERROR"


class BulkUploadError(StorageError):
    """One or more items of a bulk upload failed.

    The message is the newline-joined list of per-item errors and
    ``metadata["outcomes"]`` holds every item's outcome, successes included.
    """

    default_code = "STORAGE_BULK_UPLOAD_ERROR"


# botocore error codes per domain error; anything unlisted is a plain 500 StorageError
_BOTO_ERROR_CODES: tuple[tuple[frozenset[str], type[StorageError]], ...] = (
    (frozenset({"NoSuchBucket"}), StorageBucketNotFoundError),
    (frozenset({"NoSuchKey", "404", "NotFound"}), StorageObjectNotFoundError),
    (frozenset({"BucketAlreadyExists", "BucketAlreadyOwnedByYou"}), StorageBucketExistsError),
    (
        frozenset(
            {
                "AccessDenied",
                "ExpiredToken",
                "InvalidAccessKeyId",
                "SignatureDoesNotMatch",
                "InvalidToken",
                "TokenRefreshRequired",
            }
        ),
        StoragePermissionError,
    ),
    (frozenset({"RequestTimeout", "RequestTimeTooSkewed", "SlowDown"}), StorageTimeoutError),
    (frozenset({"QuotaExceeded", "TooManyBuckets", "AccountProblem"}), StorageQuotaExceededError),
    (
        frozenset(
            {
                "InvalidRequest",
                "InvalidArgument",
                "MalformedXML",
                "InvalidBucketName",
                "InvalidObjectState",
                "KeyTooLongError",
                "MetadataTooLarge",
                "BucketNotEmpty",
            }
        ),
        StorageValidationError,
    ),
)


def map_boto_error(
    error: ClientError,
    operation: str,
    key: str | None = None,
    bucket: str | None = None,
) -> StorageError:
    """Translate a botocore ClientError into the matching StorageError.

    The S3 error code picks the class (``NoSuchBucket`` is a 404 bucket
    error, ``BucketNotEmpty`` a 400 validation error, ``AccessDenied`` a
    403, and so on). The message reads ``"<Operation> failed: <S3 message>"``
    and the metadata carries the S3 code, message and request id.
    """
    details = error.response.get("Error", {})
    error_code = details.get("Code", "Unknown")
    error_message = details.get("Message", str(error))

    metadata: dict[str, Any] = {
        "operation": operation,
        "aws_error_code": error_code,
        "aws_error_message": error_message,
        "request_id": error.response.get("ResponseMetadata", {}).get("RequestId"),
    }
    if key:
        metadata["key"] = key
    bucket = bucket or details.get("BucketName")  # type: ignore[assignment]
    if bucket:
        metadata["bucket"] = bucket

    error_type: type[StorageError] = StorageError
    for codes, candidate in _BOTO_ERROR_CODES:
        if error_code in codes:
            error_type = candidate
            break

    verb = "timed out" if error_type is StorageTimeoutError else "failed"
    return error_type(f"{operation.capitalize()} {verb}: {error_message}", metadata=metadata)
