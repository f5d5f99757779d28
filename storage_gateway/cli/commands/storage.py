"""Storage commands for S3-compatible object storage.

Each command starts its own StorageGatewayService, runs the same operation
the HTTP API runs, and exits with status 1 on any storage error.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import sys
from typing import TYPE_CHECKING

import click

from storage_gateway.cli.utils import (
    coro,
    error,
    info,
    object_line,
    outcome_line,
    success,
    warning,
)
from storage_gateway.core.settings import get_storage_settings
from storage_gateway.infra.storage import StorageError, StorageGatewayService

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from storage_gateway.infra.storage.operations import BulkOutcome


@asynccontextmanager
async def _storage_session() -> AsyncIterator[StorageGatewayService]:
    settings = get_storage_settings()
    if not settings.is_configured:
        error("Storage is not configured. Set STORAGE_ENABLED=true and the STORAGE_* credentials.")
        sys.exit(1)

    service = StorageGatewayService(settings)
    await service.startup()
    try:
        yield service
    finally:
        await service.shutdown()


def _report_bulk(outcome: BulkOutcome) -> None:
    for item in outcome.outcomes:
        click.echo(outcome_line(item))
    if outcome.success:
        success(f"{outcome.total} file(s) uploaded to S3 successfully!")
        return
    warning(f"{outcome.succeeded}/{outcome.total} file(s) uploaded")
    sys.exit(1)


@click.group(name="storage")
def storage() -> None:
    """Bucket and object operations against the configured object store."""


@storage.command(name="buckets")
@coro
async def list_buckets() -> None:
    """List all buckets."""
    try:
        async with _storage_session() as service:
            names = await service.list_buckets()
    except StorageError as e:
        error(f"Failed to list buckets: {e.detail}")
        sys.exit(1)

    if not names:
        warning("No buckets found")
        return
    for name in names:
        click.echo(name)
    info(f"{len(names)} bucket(s)")


@storage.command(name="ls")
@click.argument("bucket")
@click.option("--prefix", default=None, help="Only list keys under this prefix")
@click.option(
    "--urls/--no-urls",
    default=False,
    help="Print a presigned download URL next to each key",
)
@coro
async def list_objects(bucket: str, prefix: str | None, urls: bool) -> None:
    """List every object in BUCKET.

    Examples:
        storage-gateway storage ls reports
        storage-gateway storage ls reports --prefix daily/ --urls
    """
    try:
        async with _storage_session() as service:
            links = await service.list_objects(bucket, prefix=prefix)
    except StorageError as e:
        error(e.detail)
        sys.exit(1)

    for link in links:
        click.echo(object_line(link.key, link.url if urls else None))
    info(f"{len(links)} object(s) in {bucket}")


@storage.command(name="upload-folder")
@click.argument("folder", type=click.Path(file_okay=False))
@click.argument("bucket")
@click.option("--prefix", default=None, help="Key prefix, e.g. images/")
@coro
async def upload_folder(folder: str, bucket: str, prefix: str | None) -> None:
    """Upload the files directly inside FOLDER to BUCKET."""
    info(f"Uploading {folder} to {bucket} (prefix: '{prefix or ''}')...")
    try:
        async with _storage_session() as service:
            outcome = await service.bulk_upload_folder(bucket, folder, prefix=prefix)
    except StorageError as e:
        error(e.detail)
        sys.exit(1)

    _report_bulk(outcome)


@storage.command(name="purge")
@click.argument("bucket")
@click.option("--extension", default=None, help="Delete keys ending with this suffix")
@click.option("--all", "delete_all", is_flag=True, help="Delete every object")
@click.option("--prefix", default=None, help="Only consider keys under this prefix")
@click.confirmation_option(prompt="Delete the selected objects?")
@coro
async def purge(bucket: str, extension: str | None, delete_all: bool, prefix: str | None) -> None:
    """Delete objects from BUCKET by extension, or all of them."""
    if not extension and not delete_all:
        raise click.UsageError("Pass --extension EXT or --all")

    try:
        async with _storage_session() as service:
            result = await service.bulk_delete(
                bucket,
                extension=extension,
                delete_all=delete_all,
                prefix=prefix,
            )
    except StorageError as e:
        error(e.detail)
        sys.exit(1)

    success(f"Deleted {len(result.deleted)} object(s) in {result.batches} batch(es)")
