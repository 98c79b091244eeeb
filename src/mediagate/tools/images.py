# SPDX-License-Identifier: MIT
"""Image generation and editing tools.

Models in the ``dall-e-3`` / ``gpt-image-1`` family run as background jobs and
report through notifications. Every other model is handled inline: one
provider call, each returned item persisted (and mirrored) independently, and
a per-item result list returned to the caller.
"""

from typing import Any

from ..config import Settings, get_client, logger
from ..exceptions import internal_error, invalid_params
from ..image_ops import (
    ImageItemResult,
    build_edit_kwargs,
    build_generation_kwargs,
    load_input_image,
    process_items,
    runs_in_background,
)
from ..notify import build_notifier
from ..storage import get_mirror, get_storage
from ..tasks.image_jobs import process_image_edit_in_background, process_image_generation_in_background
from ..tasks.runner import spawn_background
from ..types import BackgroundAck


def _require_str(args: dict[str, Any], *names: str) -> None:
    for name in names:
        if not isinstance(args.get(name), str) or not args[name]:
            quoted = " and ".join(f'"{n}" (string)' for n in names)
            raise invalid_params(f"Parameters {quoted} are required")


async def generate_image(args: dict[str, Any], settings: Settings) -> BackgroundAck | list[ImageItemResult]:
    """Generate images from a prompt.

    Raises:
        McpError: INVALID_PARAMS without a prompt, INTERNAL_ERROR on an empty response
    """
    _require_str(args, "prompt")
    model = args.get("model") or settings.default_image_model

    if runs_in_background(model):
        logger.info("Model %s runs in background; scheduling generate_image", model)
        spawn_background(process_image_generation_in_background(args, settings), name=f"generate_image:{model}")
        return {
            "status": "processing_in_background",
            "message": "Image generation task submitted. You will be notified upon completion.",
        }

    logger.info("Processing generate_image synchronously with %s", model)
    client = get_client(settings)
    response = await client.images.generate(**build_generation_kwargs(args, settings, model))
    if not response.data:
        raise internal_error("API response did not contain image data.")

    return await process_items(
        list(response.data),
        get_storage(settings),
        get_mirror(settings),
        "generated_image_sync",
        notifier=build_notifier(settings),
        prompt=args["prompt"],
    )


async def edit_image(args: dict[str, Any], settings: Settings) -> BackgroundAck | list[ImageItemResult]:
    """Edit an image (local path or URL) according to a prompt.

    Raises:
        McpError: INVALID_PARAMS for missing arguments or an unreadable local file,
            INTERNAL_ERROR when a URL input cannot be downloaded or the response is empty
    """
    _require_str(args, "image", "prompt")
    model = args.get("model") or settings.default_edit_image_model

    if runs_in_background(model):
        logger.info("Model %s runs in background; scheduling edit_image", model)
        spawn_background(process_image_edit_in_background(args, settings), name=f"edit_image:{model}")
        return {
            "status": "processing_in_background",
            "message": "Image editing task submitted. You will be notified upon completion.",
        }

    logger.info("Processing edit_image synchronously with %s", model)
    storage = get_storage(settings)
    client = get_client(settings)
    async with load_input_image(args["image"], storage) as image:
        response = await client.images.edit(**build_edit_kwargs(args, model, image))
    if not response.data:
        raise internal_error("API response for image edit did not contain image data.")

    return await process_items(
        list(response.data),
        storage,
        get_mirror(settings),
        "edited_image_sync",
        notifier=build_notifier(settings),
        prompt=args["prompt"],
    )
