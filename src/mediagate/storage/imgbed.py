# SPDX-License-Identifier: MIT
"""Cloudflare ImgBed remote mirror.

Uploads artifact bytes to a single multipart endpoint. The endpoint answers
with a JSON array whose first element carries a relative ``src`` path; the
public URL is that path resolved against the upload endpoint's origin.
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin

import httpx

from ..infrastructure.http import get_http_client

logger = logging.getLogger("mediagate")


class ImgBedMirror:
    """Best-effort uploader. Every failure is logged and reported as ``None``."""

    def __init__(self, upload_url: str, api_key: str, timeout: float = 300.0) -> None:
        self._upload_url = upload_url
        self._api_key = api_key
        self._timeout = timeout

    @property
    def origin(self) -> str:
        url = httpx.URL(self._upload_url)
        return f"{url.scheme}://{url.netloc.decode('ascii')}"

    async def upload(self, data: bytes, filename: str) -> str | None:
        target = httpx.URL(self._upload_url).copy_merge_params({"authCode": self._api_key})
        logger.info("Uploading %s to image bed %s", filename, self.origin)
        try:
            async with get_http_client(self._timeout) as client:
                response = await client.post(target, files={"file": (filename, data)})
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Image bed upload of %s failed: %s", filename, e)
            return None

        if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict) or not payload[0].get("src"):
            logger.error("Image bed upload of %s returned an unexpected payload: %r", filename, payload)
            return None

        url = urljoin(self.origin, payload[0]["src"])
        logger.info("Image bed upload successful: %s", url)
        return url
