# SPDX-License-Identifier: MIT
"""Background image generation and editing.

Used for models whose calls routinely outlive an MCP request. The tool returns
an acknowledgement; results arrive through the notification channels:
- A provider error or empty response sends one failure notification
- Each returned image is processed independently; a bad item sends its own
  failure notification and the next item is still processed
- Each stored image sends exactly one result notification (remote URL or local only)
"""

from __future__ import annotations

from typing import Any

from ..config import Settings, get_client, logger
from ..image_ops import (
    ITEM_ERRORS,
    build_edit_kwargs,
    build_generation_kwargs,
    load_input_image,
    mirror_artifact,
    persist_image_item,
)
from ..notify import Notifier, build_notifier, image_failure_message, upload_message
from ..storage import RemoteMirror, StorageBackend, get_mirror, get_storage


async def process_image_generation_in_background(
    args: dict[str, Any],
    settings: Settings,
    *,
    notifier: Notifier | None = None,
    storage: StorageBackend | None = None,
    mirror: RemoteMirror | None = None,
) -> None:
    notifier = notifier or build_notifier(settings)
    storage = storage or get_storage(settings)
    if mirror is None:
        mirror = get_mirror(settings)

    model = args.get("model") or settings.default_image_model
    prompt = args["prompt"]
    client = get_client(settings, timeout=settings.image_processing_timeout)

    logger.info("Background image generation started with %s", model)
    try:
        response = await client.images.generate(**build_generation_kwargs(args, settings, model))
    except Exception as e:
        logger.error("Background image generation failed: %s", e)
        await notifier.send(image_failure_message(operation="generation", prompt=prompt, reason=str(e)))
        return

    await _deliver_items(response, "generation", "generated_image", prompt, notifier, storage, mirror)


async def process_image_edit_in_background(
    args: dict[str, Any],
    settings: Settings,
    *,
    notifier: Notifier | None = None,
    storage: StorageBackend | None = None,
    mirror: RemoteMirror | None = None,
) -> None:
    notifier = notifier or build_notifier(settings)
    storage = storage or get_storage(settings)
    if mirror is None:
        mirror = get_mirror(settings)

    model = args.get("model") or settings.default_edit_image_model
    prompt = args["prompt"]
    client = get_client(settings, timeout=settings.image_processing_timeout)

    logger.info("Background image edit started with %s", model)
    try:
        async with load_input_image(args["image"], storage) as image:
            response = await client.images.edit(**build_edit_kwargs(args, model, image))
    except Exception as e:
        logger.error("Background image edit failed: %s", e)
        await notifier.send(image_failure_message(operation="edit", prompt=prompt, reason=str(e)))
        return

    await _deliver_items(response, "edit", "edited_image", prompt, notifier, storage, mirror)


async def _deliver_items(
    response: Any,
    operation: str,
    prefix: str,
    prompt: str,
    notifier: Notifier,
    storage: StorageBackend,
    mirror: RemoteMirror | None,
) -> None:
    items = getattr(response, "data", None)
    if not items:
        logger.error("Background image %s returned no image data", operation)
        await notifier.send(
            image_failure_message(operation=operation, prompt=prompt, reason="API response did not contain image data")
        )
        return

    for index, item in enumerate(items):
        try:
            stored = await persist_image_item(item, storage, prefix)
        except ITEM_ERRORS as e:
            logger.error("Background image %s item %d failed: %s", operation, index + 1, e)
            await notifier.send(image_failure_message(operation=operation, prompt=prompt, reason=str(e), index=index))
            continue

        remote_url = await mirror_artifact(stored, storage, mirror)
        await notifier.send(
            upload_message(
                kind="Image",
                filename=stored.name,
                prompt=prompt,
                local_path=str(stored.path),
                remote_url=remote_url,
            )
        )
    logger.info("Background image %s finished (%d item(s))", operation, len(items))
