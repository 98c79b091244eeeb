# SPDX-License-Identifier: MIT
"""WebDAV mirror for synthesized speech files."""

from __future__ import annotations

import logging
from typing import Literal

import httpx

from ..infrastructure.http import get_http_client

logger = logging.getLogger("mediagate")

WebDAVStatus = Literal["success", "failed", "skipped"]


class WebDAVMirror:
    def __init__(self, base_url: str, username: str, password: str, timeout: float = 300.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth = httpx.BasicAuth(username, password)
        self._timeout = timeout

    async def put(self, data: bytes, filename: str, content_type: str = "audio/mpeg") -> WebDAVStatus:
        """PUT *data* as ``<base_url>/<filename>``; never raises."""
        url = f"{self._base_url}/{filename}"
        logger.info("Attempting WebDAV upload to %s", url)
        try:
            async with get_http_client(self._timeout) as client:
                response = await client.put(
                    url, content=data, headers={"Content-Type": content_type}, auth=self._auth
                )
        except httpx.HTTPError as e:
            logger.error("WebDAV upload error to %s: %s", url, e)
            return "failed"

        if response.status_code in (200, 201, 204):
            logger.info("WebDAV upload successful to %s", url)
            return "success"
        logger.error("WebDAV upload failed with status %d to %s", response.status_code, url)
        return "failed"
