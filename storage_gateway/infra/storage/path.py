"""Object key construction for uploads."""

from __future__ import annotations

from pathlib import PurePosixPath, PureWindowsPath


def build_upload_key(filename: str, prefix: str | None = None) -> str:
    """Build the object key for an uploaded file.

    Only the file's base name is kept, so ``dir/sub/a.png`` and
    ``/tmp/x/a.png`` both become ``a.png``. A prefix is joined with exactly
    one ``/`` after its trailing slashes are trimmed; a prefix that is empty
    once trimmed counts as no prefix.

    Args:
        filename: Client-supplied file name or local file path
        prefix: Optional folder-like prefix (e.g. ``"images/"``)

    Returns:
        The object key.

    Example:
        >>> build_upload_key("a.png", "images/")
        'images/a.png'
        >>> build_upload_key("a.png")
        'a.png'
    """
    # Browsers on Windows may send backslash-separated client paths
    name = PureWindowsPath(PurePosixPath(filename).name).name

    folder = (prefix or "").rstrip("/")
    if not folder:
        return name
    return f"{folder}/{name}"
