"""Storage gateway API endpoints.

Storage errors are not caught here; they propagate to the application
exception handlers and are rendered as RFC 7807 problem details with the
status code carried by the exception.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, File, Path, Query, Response, UploadFile, status

from storage_gateway.infra.storage.dependencies import Storage  # noqa: TC001
from storage_gateway.infra.storage.exceptions import BulkUploadError
from storage_gateway.infra.storage.operations import BulkOutcome, UploadPayload

from .schemas import (
    BucketListResponse,
    BulkUploadResponse,
    ListedObjectResponse,
    MessageResponse,
    ObjectListResponse,
    ObjectUploadResponse,
    UploadOutcomeResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/storage", tags=["storage"])

BucketName = Annotated[str, Path(description="Target bucket", min_length=1)]
Prefix = Annotated[
    str | None,
    Query(description="Folder-like key prefix, e.g. images/; empty means no prefix"),
]


def _payload_from_upload(file: UploadFile) -> UploadPayload:
    return UploadPayload(
        name=file.filename or "upload",
        source=file.file,
        content_type=file.content_type,
    )


def _bulk_response(bucket: str, outcome: BulkOutcome) -> BulkUploadResponse:
    """Build the success body, or raise with every outcome if any file failed."""
    outcomes = [outcome_item.to_dict() for outcome_item in outcome.outcomes]
    if not outcome.success:
        raise BulkUploadError(
            outcome.error_summary,
            metadata={
                "bucket": bucket,
                "total": outcome.total,
                "succeeded": outcome.succeeded,
                "failed": outcome.failed,
                "outcomes": outcomes,
            },
        )
    return BulkUploadResponse(
        message=f"{outcome.total} file(s) uploaded to S3 successfully!",
        total=outcome.total,
        succeeded=outcome.succeeded,
        failed=0,
        outcomes=[UploadOutcomeResponse(**item) for item in outcomes],
    )


# ============================================================================
# Bucket Management Endpoints
# ============================================================================


@router.post(
    "/buckets",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a bucket",
    responses={400: {"description": "Bucket already exists"}},
)
async def create_bucket(
    storage: Storage,
    bucket_name: Annotated[str, Query(description="Name of the bucket to create", min_length=1)],
) -> MessageResponse:
    await storage.create_bucket(bucket_name)
    return MessageResponse(message=f"Bucket {bucket_name} created.")


@router.get("/buckets", response_model=BucketListResponse, summary="List all buckets")
async def list_buckets(storage: Storage) -> BucketListResponse:
    buckets = await storage.list_buckets()
    return BucketListResponse(buckets=buckets, total=len(buckets))


@router.delete(
    "/buckets/{bucket_name}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a bucket",
)
async def delete_bucket(bucket_name: BucketName, storage: Storage) -> Response:
    """Delete an (empty) bucket."""
    await storage.delete_bucket(bucket_name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Upload Endpoints
# ============================================================================


@router.post(
    "/buckets/{bucket_name}/objects",
    response_model=ObjectUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload one file",
    responses={404: {"description": "Bucket does not exist"}},
)
async def upload_file(
    bucket_name: BucketName,
    storage: Storage,
    file: Annotated[UploadFile, File(description="File to upload")],
    prefix: Prefix = None,
) -> ObjectUploadResponse:
    """Upload a single file under ``prefix`` + the file's base name."""
    key = await storage.upload_file(bucket_name, _payload_from_upload(file), prefix=prefix)
    return ObjectUploadResponse(
        bucket=bucket_name,
        key=key,
        message=f"File {key} uploaded to S3 successfully!",
    )


@router.post(
    "/buckets/{bucket_name}/objects/bulk",
    response_model=BulkUploadResponse,
    summary="Upload many files",
    responses={
        400: {"description": "No files were submitted"},
        404: {"description": "Bucket does not exist"},
        500: {"description": "One or more files failed; body lists every outcome"},
    },
)
async def bulk_upload(
    bucket_name: BucketName,
    storage: Storage,
    files: Annotated[list[UploadFile] | None, File(description="Files to upload")] = None,
    prefix: Prefix = None,
) -> BulkUploadResponse:
    """Upload every submitted file concurrently.

    One failing file does not stop the others. If any file fails the
    response is a 500 whose ``detail`` lists one error per line and whose
    ``outcomes`` lists every file, including those that were stored.
    """
    payloads = [_payload_from_upload(file) for file in files or []]
    outcome = await storage.bulk_upload(bucket_name, payloads, prefix=prefix)
    return _bulk_response(bucket_name, outcome)


@router.post(
    "/buckets/{bucket_name}/objects/bulk-from-folder",
    response_model=BulkUploadResponse,
    summary="Upload the files of a server-side folder",
    responses={
        400: {"description": "The folder holds no files"},
        404: {"description": "Bucket or folder does not exist"},
        500: {"description": "One or more files failed; body lists every outcome"},
    },
)
async def bulk_upload_from_folder(
    bucket_name: BucketName,
    storage: Storage,
    folder_path: Annotated[str, Query(description="Folder on the gateway host", min_length=1)],
    prefix: Prefix = None,
) -> BulkUploadResponse:
    """Upload the files directly inside ``folder_path`` (not recursive)."""
    outcome = await storage.bulk_upload_folder(bucket_name, folder_path, prefix=prefix)
    return _bulk_response(bucket_name, outcome)


# ============================================================================
# Object Endpoints
# ============================================================================


@router.get(
    "/buckets/{bucket_name}/objects",
    response_model=ObjectListResponse,
    summary="List objects with presigned download URLs",
    responses={404: {"description": "Bucket does not exist"}},
)
async def list_objects(
    bucket_name: BucketName,
    storage: Storage,
    prefix: Prefix = None,
) -> ObjectListResponse:
    """List every object under ``prefix``, following all result pages.

    Each URL is signed for this response only.
    """
    links = await storage.list_objects(bucket_name, prefix=prefix)
    return ObjectListResponse(
        bucket=bucket_name,
        prefix=prefix or None,
        objects=[ListedObjectResponse(**link.to_dict()) for link in links],
        total=len(links),
    )


@router.post(
    "/buckets/{bucket_name}/objects/bulk-delete",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete objects by extension, or all of them",
    responses={
        400: {"description": "Nothing matched the selection"},
        404: {"description": "Bucket does not exist"},
        500: {"description": "The store failed to delete the selection"},
    },
)
async def bulk_delete(
    bucket_name: BucketName,
    storage: Storage,
    extension: Annotated[
        str | None,
        Query(description="Delete keys ending with this suffix (case-insensitive)", min_length=1),
    ] = None,
    delete_all: Annotated[bool, Query(description="Delete every object")] = False,
    prefix: Prefix = None,
) -> Response:
    """Delete the selected objects.

    ``delete_all`` takes precedence over ``extension``; with neither, nothing
    is selected and the request fails with 400.
    """
    await storage.bulk_delete(
        bucket_name,
        extension=extension,
        delete_all=delete_all,
        prefix=prefix,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/buckets/{bucket_name}/objects/{key:path}",
    summary="Download an object",
    response_class=Response,
    responses={
        200: {"description": "Object content with its stored content type"},
        404: {"description": "Bucket or object does not exist"},
    },
)
async def get_object(bucket_name: BucketName, key: str, storage: Storage) -> Response:
    stored = await storage.get_object(bucket_name, key)
    return Response(
        content=stored.body,
        media_type=stored.content_type or "application/octet-stream",
    )


@router.delete(
    "/buckets/{bucket_name}/objects/{key:path}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an object",
    responses={404: {"description": "Bucket does not exist"}},
)
async def delete_object(bucket_name: BucketName, key: str, storage: Storage) -> Response:
    await storage.delete_object(bucket_name, key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
