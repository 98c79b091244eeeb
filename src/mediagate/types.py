# SPDX-License-Identifier: MIT
"""Result payloads returned by the tools (serialized to JSON text)."""

from typing import Literal, TypedDict


class BackgroundAck(TypedDict):
    """Returned when a job continues in the background."""

    status: Literal["processing_in_background"]
    message: str


class VideoSubmitResult(TypedDict):
    status: Literal["submitted"]
    message: str
    requestId: str


class SpeechResult(TypedDict):
    path: str
    webdav_upload_status: Literal["success", "failed", "skipped"]


class TranscriptionResult(TypedDict):
    text: str
