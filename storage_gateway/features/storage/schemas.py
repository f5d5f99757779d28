"""Pydantic schemas for the storage API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# ============================================================================
# Generic Schemas
# ============================================================================


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str = Field(..., description="Human-readable result")


# ============================================================================
# Bucket Schemas
# ============================================================================


class BucketListResponse(BaseModel):
    """Response schema for listing buckets."""

    buckets: list[str] = Field(..., description="Bucket names")
    total: int = Field(..., description="Total number of buckets")

    model_config = {
        "json_schema_extra": {
            "examples": [{"buckets": ["reports", "media"], "total": 2}],
        }
    }


# ============================================================================
# Upload Schemas
# ============================================================================


class ObjectUploadResponse(BaseModel):
    """Response schema for a single-file upload."""

    bucket: str = Field(..., description="Target bucket")
    key: str = Field(..., description="Object key the file was stored under")
    message: str = Field(..., description="Human-readable result")


class UploadOutcomeResponse(BaseModel):
    """Result for one file of a bulk upload."""

    name: str = Field(..., description="Submitted file name")
    key: str = Field(..., description="Object key derived from prefix and file name")
    success: bool = Field(..., description="Whether the file was stored")
    error: str | None = Field(None, description="Failure message, if any")


class BulkUploadResponse(BaseModel):
    """Response schema for a fully successful bulk upload."""

    message: str = Field(..., description="Human-readable result")
    total: int = Field(..., description="Number of files submitted")
    succeeded: int = Field(..., description="Number of files stored")
    failed: int = Field(0, description="Number of files that failed")
    outcomes: list[UploadOutcomeResponse] = Field(
        default_factory=list, description="Per-file outcomes in submission order"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "message": "2 file(s) uploaded to S3 successfully!",
                    "total": 2,
                    "succeeded": 2,
                    "failed": 0,
                    "outcomes": [
                        {"name": "a.png", "key": "images/a.png", "success": True, "error": None},
                        {"name": "b.png", "key": "images/b.png", "success": True, "error": None},
                    ],
                }
            ]
        }
    }


# ============================================================================
# Listing Schemas
# ============================================================================


class ListedObjectResponse(BaseModel):
    """A listed object with a time-limited download URL."""

    key: str = Field(..., description="Object key")
    url: str = Field(..., description="Presigned GET URL")
    expires_at: datetime = Field(..., description="When the URL stops working (UTC)")
    expires_in_seconds: int = Field(..., description="URL lifetime at issuance")


class ObjectListResponse(BaseModel):
    """Response schema for listing a bucket."""

    bucket: str = Field(..., description="Listed bucket")
    prefix: str | None = Field(None, description="Prefix filter, if any")
    objects: list[ListedObjectResponse] = Field(..., description="Every object under the prefix")
    total: int = Field(..., description="Number of objects")
