# SPDX-License-Identifier: MIT
"""SiliconFlow video generation API.

Submission returns a ``requestId``; status checks return one of
``Succeed``, ``InQueue``, ``InProgress``, ``Failed`` plus an optional result
block with the video URL, timing, and seed.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from ..config import Settings
from ..infrastructure.http import get_http_client

logger = logging.getLogger("mediagate")

SUPPORTED_VIDEO_MODELS: tuple[str, ...] = (
    "Wan-AI/Wan2.1-T2V-14B",
    "Wan-AI/Wan2.1-T2V-14B-Turbo",
    "Wan-AI/Wan2.1-I2V-14B-720P",
    "Wan-AI/Wan2.1-I2V-14B-720P-Turbo",
)
VIDEO_IMAGE_SIZES: tuple[str, ...] = ("1280x720", "720x1280", "960x960")

SUCCEED = "Succeed"
IN_QUEUE = "InQueue"
IN_PROGRESS = "InProgress"
FAILED = "Failed"


def is_image_to_video(model: str) -> bool:
    return "I2V" in model


class VideoStatusResult(BaseModel):
    """One status check. Unknown status strings are kept verbatim."""

    status: str
    reason: str | None = None
    video_url: str | None = None
    inference_time: float | None = None
    seed: int | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> VideoStatusResult:
        results = payload.get("results") or {}
        videos = results.get("videos") or []
        timings = results.get("timings") or {}
        return cls(
            status=str(payload.get("status", "")),
            reason=payload.get("reason") or None,
            video_url=videos[0].get("url") if videos and isinstance(videos[0], dict) else None,
            inference_time=timings.get("inference"),
            seed=results.get("seed"),
        )

    @classmethod
    def failed(cls, reason: str) -> VideoStatusResult:
        return cls(status=FAILED, reason=reason)


def _headers(api_key: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


async def submit_video(settings: Settings, api_key: str, body: dict[str, Any]) -> str:
    """Submit a generation job and return its request id.

    Raises:
        httpx.HTTPStatusError: On a non-2xx response
        ValueError: If the response carries no request id
    """
    url = f"{settings.siliconflow_base_url.rstrip('/')}/v1/video/submit"
    async with get_http_client(settings.request_timeout) as client:
        response = await client.post(url, json=body, headers=_headers(api_key))
    response.raise_for_status()
    request_id = response.json().get("requestId")
    if not request_id or not isinstance(request_id, str):
        logger.error("SiliconFlow submit response missing requestId: %s", response.text)
        raise ValueError("Failed to submit video generation job: Invalid response from SiliconFlow API.")
    return request_id


async def get_video_status(settings: Settings, api_key: str, request_id: str) -> VideoStatusResult:
    """Fetch the current status of a job.

    Raises:
        httpx.HTTPError: On transport errors or a non-2xx response
    """
    url = f"{settings.siliconflow_base_url.rstrip('/')}/v1/video/status"
    async with get_http_client(settings.request_timeout) as client:
        response = await client.post(url, json={"requestId": request_id}, headers=_headers(api_key))
    response.raise_for_status()
    return VideoStatusResult.from_payload(response.json())
