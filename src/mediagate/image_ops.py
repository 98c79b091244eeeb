# SPDX-License-Identifier: MIT
"""Image request shaping and result persistence.

Shared by the synchronous image tools and the background image jobs:
- Choosing which optional fields to forward per model family
- Loading an edit input from a local path or URL (temp copies are always removed)
- Persisting one returned image item (embedded base64 or URL)
"""

from __future__ import annotations

import base64
import binascii
import io
import pathlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Protocol, TypedDict

import aiofiles
import anyio
import httpx
from PIL import Image

from .config import PathType, Settings, logger
from .exceptions import internal_error, invalid_params
from .infrastructure.http import download_file
from .notify import Notifier, upload_message
from .storage import RemoteMirror, StorageBackend, StoredFile
from .utils import extension_from_url, generate_filename, image_mime_type, is_valid_http_url

# Models whose calls are slow enough to run as background jobs (substring match)
BACKGROUND_IMAGE_MODELS: tuple[str, ...] = ("dall-e-3", "gpt-image-1")

# Forwarded only to background-family models
BACKGROUND_ONLY_PARAMS: tuple[str, ...] = ("quality", "size", "background", "moderation")

# Errors a single returned item may raise while being persisted
ITEM_ERRORS: tuple[type[Exception], ...] = (ValueError, OSError, httpx.HTTPError)


class ImageItem(Protocol):
    b64_json: str | None
    url: str | None


class ImageItemResult(TypedDict):
    """Outcome for one returned image."""

    local_path: str | None
    remote_url: str | None
    remote_upload_success: bool
    error: str | None


def runs_in_background(model: str) -> bool:
    return any(name in model for name in BACKGROUND_IMAGE_MODELS)


def build_generation_kwargs(args: dict[str, Any], settings: Settings, model: str) -> dict[str, Any]:
    """Build ``images.generate`` keyword arguments for *model*.

    Background-family models take ``n``/``quality``/``size``/``background``/``moderation``.
    Other models take explicit ``width``/``height``/``steps`` (sent as extra body
    fields) with configured defaults, and are asked for URLs.
    """
    kwargs: dict[str, Any] = {"prompt": args["prompt"], "model": model}

    if runs_in_background(model):
        if args.get("n"):
            kwargs["n"] = int(args["n"])
        for key in BACKGROUND_ONLY_PARAMS:
            if args.get(key):
                kwargs[key] = args[key]
        return kwargs

    defaults = settings.image_defaults
    kwargs["n"] = int(args.get("n") or defaults.n)
    kwargs["response_format"] = "url"
    kwargs["extra_body"] = {
        "width": int(args.get("width") or defaults.width),
        "height": int(args.get("height") or defaults.height),
        "steps": int(args.get("steps") or defaults.steps),
    }
    return kwargs


def build_edit_kwargs(args: dict[str, Any], model: str, image: tuple[str, bytes, str]) -> dict[str, Any]:
    """Build ``images.edit`` keyword arguments, omitting unset values."""
    kwargs: dict[str, Any] = {"image": image, "prompt": args["prompt"], "model": model}
    if args.get("n"):
        kwargs["n"] = int(args["n"])
    if args.get("size"):
        kwargs["size"] = args["size"]
    if not runs_in_background(model):
        kwargs["response_format"] = "b64_json"
    return kwargs


@asynccontextmanager
async def load_input_image(source: str, storage: StorageBackend) -> AsyncIterator[tuple[str, bytes, str]]:
    """Yield an edit input as ``(filename, bytes, mime_type)``.

    URLs are downloaded into ``temp/`` and the copy is deleted on exit,
    whether or not the body succeeded.

    Raises:
        McpError: INTERNAL_ERROR if a URL cannot be downloaded,
            INVALID_PARAMS if a local file cannot be read
    """
    if is_valid_http_url(source):
        temp_name = generate_filename("edit_input", extension_from_url(source, ".png").lstrip("."), unique=True)
        try:
            try:
                stored = await download_file(source, storage, "temp", temp_name)
            except ITEM_ERRORS as e:
                raise internal_error(f"Failed to download image for editing: {e}") from e
            data = await storage.read("temp", stored.name)
            yield stored.name, data, image_mime_type(stored.name)
        finally:
            await storage.delete("temp", temp_name)
        return

    path = pathlib.Path(source).expanduser()
    try:
        async with aiofiles.open(path, "rb") as f:
            data = await f.read()
    except OSError as e:
        raise invalid_params(f"Cannot access local image file for editing: {source}") from e
    yield path.name, data, image_mime_type(path.name)


def _detect_suffix(data: bytes) -> str:
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = (img.format or "png").lower()
    except OSError:
        return "png"
    return "jpg" if fmt == "jpeg" else fmt


async def persist_image_item(item: ImageItem, storage: StorageBackend, prefix: str) -> StoredFile:
    """Save one returned image under ``images/``.

    Raises:
        ValueError: If the item has neither ``b64_json`` nor a valid ``url``,
            or the payload cannot be decoded
        httpx.HTTPError: If the URL download fails
    """
    if item.url and is_valid_http_url(item.url):
        filename = generate_filename(prefix, extension_from_url(item.url, ".png").lstrip("."), unique=True)
        return await download_file(item.url, storage, "images", filename)

    if item.b64_json:
        try:
            # Decode in thread pool (CPU-bound)
            data = await anyio.to_thread.run_sync(lambda: base64.b64decode(item.b64_json, validate=True))
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 image data: {e}") from e
        suffix = await anyio.to_thread.run_sync(_detect_suffix, data)
        return await storage.write("images", generate_filename(prefix, suffix, unique=True), data)

    raise ValueError("Missing image data (url or b64_json) in API response")


async def mirror_artifact(
    stored: StoredFile, storage: StorageBackend, mirror: RemoteMirror | None, path_type: PathType = "images"
) -> str | None:
    """Upload a stored artifact to the remote mirror; ``None`` if disabled or failed."""
    if mirror is None:
        return None
    try:
        data = await storage.read(path_type, stored.name)
    except OSError as e:
        logger.error("Cannot read %s for remote upload: %s", stored.path, e)
        return None
    return await mirror.upload(data, stored.name)


async def process_items(
    items: list[ImageItem],
    storage: StorageBackend,
    mirror: RemoteMirror | None,
    prefix: str,
    *,
    notifier: Notifier,
    prompt: str,
) -> list[ImageItemResult]:
    """Persist and mirror every item; failures are isolated per item.

    Each successful remote upload is also announced through *notifier*.
    """
    results: list[ImageItemResult] = []
    for index, item in enumerate(items):
        try:
            stored = await persist_image_item(item, storage, prefix)
        except ITEM_ERRORS as e:
            logger.error("Error processing image %d: %s", index + 1, e)
            results.append({"local_path": None, "remote_url": None, "remote_upload_success": False, "error": str(e)})
            continue
        remote_url = await mirror_artifact(stored, storage, mirror)
        if remote_url is not None:
            await notifier.send(
                upload_message(
                    kind="Image", filename=stored.name, prompt=prompt, local_path=str(stored.path), remote_url=remote_url
                )
            )
        results.append(
            {
                "local_path": str(stored.path),
                "remote_url": remote_url,
                "remote_upload_success": remote_url is not None,
                "error": None,
            }
        )
    return results
