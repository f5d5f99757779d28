"""Console output for storage commands.

Status lines go through ``click.secho``; errors go to stderr so object
listings on stdout stay pipeable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from storage_gateway.infra.storage.operations import UploadOutcome

_STYLES = {
    "success": ("✓", "green"),
    "error": ("✗", "red"),
    "warning": ("⚠", "yellow"),
    "info": ("ℹ", "blue"),
}


def _status(kind: str, message: str, *, err: bool = False) -> None:
    mark, colour = _STYLES[kind]
    click.secho(f"{mark} {message}", fg=colour, err=err)


def success(message: str) -> None:
    _status("success", message)


def error(message: str) -> None:
    _status("error", message, err=True)


def warning(message: str) -> None:
    _status("warning", message)


def info(message: str) -> None:
    _status("info", message)


def object_line(key: str, url: str | None = None) -> str:
    """Tab-separated ``key`` and presigned URL, or just the key."""
    return f"{key}\t{url}" if url else key


def outcome_line(outcome: UploadOutcome) -> str:
    """One line per bulk upload item: stored key or failure reason."""
    if outcome.success:
        return f"  {outcome.key}"
    return f"  {outcome.name} -> {outcome.error or 'failed'}"
