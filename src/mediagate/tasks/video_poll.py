# SPDX-License-Identifier: MIT
"""Poll loop for submitted video generation jobs.

Each submitted job gets one detached loop that checks the provider every
``POLL_INTERVAL`` seconds. The loop ends on the first terminal state:

    Submitted -> Polling -> Succeeded | Failed | TimedOut

Every terminal state sends exactly one notification fan-out; nothing is polled
afterwards. A successful job may additionally send one upload notification
when a remote mirror is configured.
"""

from __future__ import annotations

import enum
import re
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import anyio
import httpx

from ..config import Settings, logger
from ..image_ops import mirror_artifact
from ..infrastructure.http import download_file
from ..notify import (
    Notifier,
    build_notifier,
    upload_message,
    video_failure_message,
    video_success_message,
    video_timeout_message,
    video_unknown_status_message,
)
from ..providers.siliconflow import (
    FAILED,
    IN_PROGRESS,
    IN_QUEUE,
    SUCCEED,
    VideoStatusResult,
    get_video_status,
)
from ..storage import RemoteMirror, StorageBackend, get_mirror, get_storage
from ..utils import generate_filename

POLL_INTERVAL = 10.0
POLL_TIMEOUT = 24 * 60 * 60.0
DOWNLOAD_TIMEOUT = 600.0

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")


@dataclass(frozen=True)
class TaskSubmission:
    """A submitted job. Held in memory by its poll loop only."""

    request_id: str
    prompt: str
    model: str
    api_key: str
    start_time: float


class TaskOutcome(str, enum.Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


async def check_status(submission: TaskSubmission, settings: Settings) -> VideoStatusResult:
    """Check the job once. Any error becomes a synthetic ``Failed`` result."""
    try:
        return await get_video_status(settings, submission.api_key, submission.request_id)
    except Exception as e:
        logger.error("Status check for %s failed: %s", submission.request_id, e)
        return VideoStatusResult.failed(f"Error checking status: {e}")


async def poll_video_task(
    submission: TaskSubmission,
    settings: Settings,
    *,
    notifier: Notifier | None = None,
    storage: StorageBackend | None = None,
    mirror: RemoteMirror | None = None,
    interval: float = POLL_INTERVAL,
    timeout: float = POLL_TIMEOUT,
    sleep: Callable[[float], Awaitable[object]] = anyio.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> TaskOutcome:
    """Poll *submission* until it succeeds, fails, or exceeds *timeout*.

    Args:
        submission: The job to track; ``start_time`` must come from *clock*
        settings: Process settings
        notifier: Defaults to the configured channels
        storage: Defaults to the local output tree
        mirror: Defaults to the configured remote mirror (may be None)
        interval: Seconds between status checks
        timeout: Wall-clock ceiling in seconds
        sleep: Awaitable sleep, injectable for tests
        clock: Monotonic clock, injectable for tests

    Returns:
        The terminal outcome
    """
    notifier = notifier or build_notifier(settings)
    storage = storage or get_storage(settings)
    if mirror is None:
        mirror = get_mirror(settings)

    checks = 0
    while True:
        elapsed = clock() - submission.start_time
        if elapsed > timeout:
            logger.warning("Video job %s timed out after %.0fs", submission.request_id, elapsed)
            await notifier.send(
                video_timeout_message(
                    request_id=submission.request_id,
                    model=submission.model,
                    prompt=submission.prompt,
                    elapsed_seconds=elapsed,
                )
            )
            return TaskOutcome.TIMED_OUT

        result = await check_status(submission, settings)
        checks += 1

        if result.status in (IN_QUEUE, IN_PROGRESS):
            logger.info("Video job %s is %s (check %d)", submission.request_id, result.status, checks)
            await sleep(interval)
            continue

        if result.status == SUCCEED:
            if not result.video_url:
                logger.error("Video job %s succeeded without a video URL", submission.request_id)
                await _notify_failure(notifier, submission, "Task succeeded but no video URL was returned")
                return TaskOutcome.FAILED
            return await _complete(submission, result, result.video_url, notifier, storage, mirror)

        if result.status == FAILED:
            reason = result.reason or "unknown error"
            logger.error("Video job %s failed: %s", submission.request_id, reason)
            await _notify_failure(notifier, submission, reason)
            return TaskOutcome.FAILED

        # Unrecognized status: one diagnostic notification, then stop
        logger.error("Video job %s returned unknown status %r", submission.request_id, result.status)
        await notifier.send(
            video_unknown_status_message(
                request_id=submission.request_id, model=submission.model, status=result.status or "<empty>"
            )
        )
        return TaskOutcome.FAILED


async def _notify_failure(notifier: Notifier, submission: TaskSubmission, reason: str) -> None:
    await notifier.send(
        video_failure_message(
            request_id=submission.request_id, model=submission.model, prompt=submission.prompt, reason=reason
        )
    )


async def _complete(
    submission: TaskSubmission,
    result: VideoStatusResult,
    video_url: str,
    notifier: Notifier,
    storage: StorageBackend,
    mirror: RemoteMirror | None,
) -> TaskOutcome:
    filename = generate_filename(f"video_{_UNSAFE_CHARS.sub('_', submission.request_id)}", "mp4")

    try:
        stored = await download_file(video_url, storage, "video", filename, timeout=DOWNLOAD_TIMEOUT)
    except (httpx.HTTPError, OSError, ValueError) as e:
        logger.error("Downloading video for %s failed: %s", submission.request_id, e)
        await _notify_failure(notifier, submission, f"Video finished but download failed: {e}")
        return TaskOutcome.FAILED

    remote_url: str | None = None
    if mirror is not None:
        remote_url = await mirror_artifact(stored, storage, mirror, "video")
        await notifier.send(
            upload_message(
                kind="Video",
                filename=stored.name,
                prompt=submission.prompt,
                local_path=str(stored.path),
                remote_url=remote_url,
            )
        )

    await notifier.send(
        video_success_message(
            filename=stored.name,
            local_path=str(stored.path),
            model=submission.model,
            prompt=submission.prompt,
            source_url=video_url,
            inference_time=result.inference_time,
            seed=result.seed,
            remote_url=remote_url,
        )
    )
    logger.info("Video job %s complete: %s", submission.request_id, stored.path)
    return TaskOutcome.SUCCEEDED
