# SPDX-License-Identifier: MIT
"""Text-to-speech tool."""

from typing import Any

from ..config import Settings, get_client, logger
from ..exceptions import invalid_params
from ..storage import get_storage, get_webdav
from ..types import SpeechResult
from ..utils import generate_filename

MAX_INPUT_LENGTH = 4096
MIN_SPEED = 0.25
MAX_SPEED = 4.0


def _validate(args: dict[str, Any]) -> float | None:
    """Validate arguments and return the parsed speed (None when unset)."""
    text = args.get("input")
    if not isinstance(text, str) or not text or len(text) > MAX_INPUT_LENGTH:
        raise invalid_params(f'Parameter "input" must be a non-empty string of at most {MAX_INPUT_LENGTH} characters')
    for name in ("model", "voice"):
        if args.get(name) is not None and not isinstance(args[name], str):
            raise invalid_params(f'Parameter "{name}" must be a string')

    if args.get("speed") is None:
        return None
    try:
        speed = float(args["speed"])
    except (TypeError, ValueError) as e:
        raise invalid_params('Parameter "speed" must be a number') from e
    if not MIN_SPEED <= speed <= MAX_SPEED:
        raise invalid_params(f'Parameter "speed" must be between {MIN_SPEED} and {MAX_SPEED}')
    return speed


async def generate_speech(args: dict[str, Any], settings: Settings) -> list[SpeechResult]:
    """Synthesize speech to ``audio/speech_<uuid>.mp3``, optionally mirrored to WebDAV.

    Raises:
        McpError: INVALID_PARAMS for bad arguments
    """
    speed = _validate(args)
    model = args.get("model") or settings.default_speech_model
    voice = args.get("voice") or settings.default_speech_voice

    storage = get_storage(settings)
    client = get_client(settings)
    filename = generate_filename("speech", "mp3", unique=True)

    logger.info("Generating speech with %s (voice=%s)", model, voice)
    async with client.audio.speech.with_streaming_response.create(
        input=args["input"],
        model=model,
        voice=voice,
        speed=settings.default_speech_speed if speed is None else speed,
        response_format="mp3",
    ) as response:
        stored = await storage.write_stream("audio", filename, response.iter_bytes())

    webdav = get_webdav(settings)
    if webdav is None:
        status = "skipped"
    else:
        status = await webdav.put(await storage.read("audio", stored.name), stored.name)

    return [{"path": str(stored.path), "webdav_upload_status": status}]
