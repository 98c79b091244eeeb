# SPDX-License-Identifier: MIT
"""Shared httpx plumbing: client construction and streamed downloads."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from ..config import PathType

if TYPE_CHECKING:
    from ..storage.protocol import StorageBackend, StoredFile

logger = logging.getLogger("mediagate")

DEFAULT_TIMEOUT = 60.0


def get_http_client(timeout: float = DEFAULT_TIMEOUT) -> httpx.AsyncClient:
    """Return a fresh :class:`httpx.AsyncClient`.

    Callers own the client and close it with ``async with``.
    """
    return httpx.AsyncClient(timeout=timeout, follow_redirects=True)


async def download_file(
    url: str,
    storage: StorageBackend,
    path_type: PathType,
    filename: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> StoredFile:
    """Stream *url* into storage.

    Raises:
        httpx.HTTPError: On transport errors or a non-2xx response
        ValueError: If the number of bytes written differs from Content-Length
    """
    async with get_http_client(timeout) as client:
        async with client.stream("GET", url) as response:
            response.raise_for_status()
            expected = response.headers.get("Content-Length")
            encoded = response.headers.get("Content-Encoding", "identity") != "identity"
            stored = await storage.write_stream(path_type, filename, response.aiter_bytes())

    if expected is not None and not encoded and int(expected) != stored.size_bytes:
        raise ValueError(f"Incomplete download from {url}: expected {expected} bytes, got {stored.size_bytes}")

    logger.info("Downloaded %s -> %s", url, stored.path)
    return stored
