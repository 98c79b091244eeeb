# SPDX-License-Identifier: MIT
"""Detached background tasks.

A tool handler calls :func:`spawn_background` and returns without awaiting.
Tasks live only in this process; a restart silently drops them.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger("mediagate")

# Strong references so the event loop does not garbage-collect running tasks.
_running: set[asyncio.Task[Any]] = set()


def spawn_background(coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
    """Schedule *coro* on the running loop and return immediately.

    The only thing attached to the task is a terminal error log.
    """
    task = asyncio.get_running_loop().create_task(coro, name=name)
    _running.add(task)
    task.add_done_callback(_on_done)
    logger.debug("Spawned background task %s", name)
    return task


def _on_done(task: asyncio.Task[Any]) -> None:
    _running.discard(task)
    if task.cancelled():
        logger.warning("Background task %s was cancelled", task.get_name())
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Critical unhandled error in background task %s", task.get_name(), exc_info=exc)


def running_tasks() -> int:
    """Number of background tasks still in flight."""
    return len(_running)
