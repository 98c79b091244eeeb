# SPDX-License-Identifier: MIT
"""Artifact storage for mediagate.

Generated media is always written to the local output tree; an optional remote
mirror republishes it under a durable public URL.

Usage::

    from mediagate.storage import get_mirror, get_storage

    storage = get_storage(settings)
    stored = await storage.write("images", "cat.png", png_bytes)
    if (mirror := get_mirror(settings)) is not None:
        url = await mirror.upload(png_bytes, stored.name)
"""

from .factory import get_mirror, get_storage, get_webdav
from .protocol import RemoteMirror, StorageBackend, StoredFile

__all__ = ["RemoteMirror", "StorageBackend", "StoredFile", "get_mirror", "get_storage", "get_webdav"]
