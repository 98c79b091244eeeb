# SPDX-License-Identifier: MIT
"""Speech-to-text tool."""

import pathlib
from typing import Any

import aiofiles
import httpx

from ..config import Settings, get_client, logger
from ..exceptions import internal_error, invalid_params
from ..infrastructure.http import download_file
from ..storage import get_storage
from ..types import TranscriptionResult
from ..utils import extension_from_url, generate_filename, is_valid_http_url


async def transcribe_audio(args: dict[str, Any], settings: Settings) -> list[TranscriptionResult]:
    """Transcribe a local audio file or an audio URL.

    URL inputs are downloaded to ``temp/`` and removed afterwards.

    Raises:
        McpError: INVALID_PARAMS for bad arguments or an unreadable local file,
            INTERNAL_ERROR when the download fails or no text comes back
    """
    source = args.get("file")
    if not isinstance(source, str) or not source:
        raise invalid_params('Parameter "file" (string) is required')
    if args.get("model") is not None and not isinstance(args["model"], str):
        raise invalid_params('Parameter "model" must be a string')

    model = args.get("model") or settings.default_transcription_model
    storage = get_storage(settings)
    temp_name: str | None = None

    try:
        if is_valid_http_url(source):
            temp_name = generate_filename("download", extension_from_url(source, ".audio").lstrip("."), unique=True)
            logger.info("Downloading audio from %s", source)
            try:
                stored = await download_file(source, storage, "temp", temp_name)
            except (httpx.HTTPError, OSError, ValueError) as e:
                raise internal_error(f"Failed to download audio file from URL: {source}") from e
            filename, data = stored.name, await storage.read("temp", stored.name)
        else:
            path = pathlib.Path(source).expanduser()
            try:
                async with aiofiles.open(path, "rb") as f:
                    data = await f.read()
            except OSError as e:
                raise invalid_params(f"Cannot access local audio file: {source}") from e
            filename = path.name
            logger.info("Using local file: %s", path)

        client = get_client(settings)
        transcription = await client.audio.transcriptions.create(file=(filename, data), model=model)
    finally:
        if temp_name is not None:
            await storage.delete("temp", temp_name)

    text = getattr(transcription, "text", None)
    if not isinstance(text, str):
        logger.error("API response did not contain valid text: %r", transcription)
        raise internal_error("API response did not contain valid transcription text.")
    return [{"text": text}]
