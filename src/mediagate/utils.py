# SPDX-License-Identifier: MIT
"""Small helpers shared by tools and background tasks."""

import posixpath
import uuid
from urllib.parse import urlparse

IMAGE_MIME_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


def is_valid_http_url(value: str) -> bool:
    """Return True for absolute ``http``/``https`` URLs with a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def generate_filename(stem: str, suffix: str, *, unique: bool = False) -> str:
    """Build an output filename.

    Args:
        stem: Base name (prefix or task id)
        suffix: Extension without the leading dot
        unique: Append a random UUID (``<stem>_<uuid>.<suffix>``)
    """
    if unique:
        return f"{stem}_{uuid.uuid4()}.{suffix}"
    return f"{stem}.{suffix}"


def extension_from_url(url: str, default: str) -> str:
    """Return the extension of a URL's path including the dot, or *default*."""
    ext = posixpath.splitext(urlparse(url).path)[1]
    return ext.lower() if ext else default


def image_mime_type(filename: str) -> str:
    ext = posixpath.splitext(filename)[1].lower()
    return IMAGE_MIME_TYPES.get(ext, "image/png")
