# SPDX-License-Identifier: MIT
"""Configuration management for the mediagate MCP server.

This module handles:
- Logging setup
- Settings loading from CLI ``-e KEY VALUE`` overrides and environment variables
- OpenAI-compatible client initialization
- Output path configuration with security checks
"""

import logging
import os
import pathlib
import sys
from collections.abc import Mapping, Sequence
from functools import lru_cache
from typing import Literal

from openai import AsyncOpenAI
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# ---------- Logging configuration ----------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,  # Log to stderr to avoid interfering with stdio MCP transport
)
logger = logging.getLogger("mediagate")

PathType = Literal["images", "audio", "video", "temp"]
"""Subdirectory of the output root a file operation targets."""


class ImageDefaults(BaseModel):
    """Request defaults for image models that take explicit dimensions."""

    model_config = ConfigDict(frozen=True)

    width: int = 1024
    height: int = 768
    steps: int = 1
    n: int = 1


class Settings(BaseModel):
    """Process-wide configuration. Built once at startup, never mutated."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1)
    api_url: str = "https://api.openai.com"
    request_timeout: float = 180.0
    image_processing_timeout: float = 120.0

    default_image_model: str = "dall-e-3"
    default_edit_image_model: str = "gpt-image-1"
    default_speech_model: str = "tts-1"
    default_speech_voice: str = "alloy"
    default_speech_speed: float = 1.0
    default_transcription_model: str = "gpt-4o-transcribe"
    image_defaults: ImageDefaults = ImageDefaults()

    output_dir: pathlib.Path = pathlib.Path("output").resolve()

    webdav_url: str | None = None
    webdav_username: str | None = None
    webdav_password: str | None = None

    cf_imgbed_upload_url: str | None = None
    cf_imgbed_api_key: str | None = None

    siliconflow_api_key: str | None = None
    siliconflow_video_model: str = "Wan-AI/Wan2.1-T2V-14B"
    siliconflow_base_url: str = "https://api.siliconflow.cn"

    onebot_http_url: str | None = None
    onebot_access_token: str | None = None
    onebot_message_type: Literal["private", "group"] | None = None
    onebot_target_id: str | None = None

    telegram_bot_token: str | None = None
    telegram_chat_id: str | None = None

    @property
    def temp_dir(self) -> pathlib.Path:
        return self.output_dir / "temp"

    @property
    def onebot_configured(self) -> bool:
        return bool(self.onebot_http_url and self.onebot_message_type and self.onebot_target_id)

    @property
    def telegram_configured(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    @property
    def mirror_configured(self) -> bool:
        return bool(self.cf_imgbed_upload_url and self.cf_imgbed_api_key)

    @property
    def webdav_configured(self) -> bool:
        return bool(self.webdav_url and self.webdav_username and self.webdav_password)


# Mapping from environment key to Settings field. Timeouts are given in milliseconds.
_ENV_FIELDS: dict[str, str] = {
    "API_KEY": "api_key",
    "API_URL": "api_url",
    "DEFAULT_IMAGE_MODEL": "default_image_model",
    "DEFAULT_EDIT_IMAGE_MODEL": "default_edit_image_model",
    "DEFAULT_SPEECH_MODEL": "default_speech_model",
    "DEFAULT_SPEECH_VOICE": "default_speech_voice",
    "DEFAULT_SPEECH_SPEED": "default_speech_speed",
    "DEFAULT_TRANSCRIPTION_MODEL": "default_transcription_model",
    "WEBDAV_URL": "webdav_url",
    "WEBDAV_USERNAME": "webdav_username",
    "WEBDAV_PASSWORD": "webdav_password",
    "CF_IMGBED_UPLOAD_URL": "cf_imgbed_upload_url",
    "CF_IMGBED_API_KEY": "cf_imgbed_api_key",
    "SILICONFLOW_API_KEY": "siliconflow_api_key",
    "SILICONFLOW_VIDEO_MODEL": "siliconflow_video_model",
    "SILICONFLOW_BASE_URL": "siliconflow_base_url",
    "ONEBOT_HTTP_URL": "onebot_http_url",
    "ONEBOT_ACCESS_TOKEN": "onebot_access_token",
    "ONEBOT_MESSAGE_TYPE": "onebot_message_type",
    "ONEBOT_TARGET_ID": "onebot_target_id",
    "TELEGRAM_BOT_TOKEN": "telegram_bot_token",
    "TELEGRAM_CHAT_ID": "telegram_chat_id",
}

_MS_FIELDS: dict[str, str] = {
    "REQUEST_TIMEOUT": "request_timeout",
    "IMAGE_PROCESSING_TIMEOUT": "image_processing_timeout",
}


def parse_cli_overrides(argv: Sequence[str]) -> dict[str, str]:
    """Collect ``-e KEY VALUE`` triples from the command line.

    Anything else on the command line is ignored.

    Examples::

        >>> parse_cli_overrides(["-e", "API_KEY", "sk-1", "--verbose"])
        {'API_KEY': 'sk-1'}
    """
    parsed: dict[str, str] = {}
    i = 0
    while i < len(argv):
        if argv[i] == "-e" and i + 2 < len(argv):
            parsed[argv[i + 1]] = argv[i + 2]
            i += 3
            continue
        i += 1
    return parsed


def load_settings(argv: Sequence[str] = (), environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from CLI overrides and the environment.

    Priority: ``-e KEY VALUE`` > environment variable > default.

    Args:
        argv: Command line arguments (without the program name)
        environ: Environment mapping, defaults to ``os.environ``

    Returns:
        Validated, immutable settings

    Raises:
        RuntimeError: If API_KEY is missing or a value is malformed
    """
    env = os.environ if environ is None else environ
    overrides = parse_cli_overrides(argv)

    def lookup(key: str) -> str | None:
        value = overrides.get(key) or env.get(key)
        if value is None or not value.strip():
            return None
        return value.strip()

    if lookup("API_KEY") is None:
        raise RuntimeError("API_KEY environment variable or -e API_KEY <value> argument is required")

    values: dict[str, object] = {}
    for key, field in _ENV_FIELDS.items():
        value = lookup(key)
        if value is not None:
            values[field] = value
    for key, field in _MS_FIELDS.items():
        value = lookup(key)
        if value is not None:
            try:
                values[field] = int(value) / 1000.0
            except ValueError as e:
                raise RuntimeError(f"{key} must be an integer number of milliseconds, got {value!r}") from e

    output = lookup("DEFAULT_OUTPUT_PATH") or "./output"
    values["output_dir"] = _resolve_output_dir(output)

    try:
        return Settings(**values)  # type: ignore[arg-type]
    except ValidationError as e:
        raise RuntimeError(f"Invalid configuration: {e}") from e


def _resolve_output_dir(path_str: str) -> pathlib.Path:
    """Resolve the output root, rejecting symlinks.

    Security: the configured root comes from the environment, so a symlink there
    could redirect every artifact write outside the intended tree.
    """
    original_path = pathlib.Path(path_str)
    try:
        if original_path.is_symlink():
            raise RuntimeError(f"Output directory cannot be a symbolic link: {path_str}")
        return original_path.resolve()
    except (ValueError, OSError) as e:
        raise RuntimeError(f"Invalid output directory '{path_str}': {e}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings built from ``sys.argv`` and ``os.environ``."""
    return load_settings(sys.argv[1:])


def get_path(settings: Settings, path_type: PathType) -> pathlib.Path:
    """Get an output subdirectory, creating it when missing.

    Raises:
        RuntimeError: If the directory cannot be created or is not a directory
    """
    path = settings.output_dir / path_type
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RuntimeError(f"Failed to create output directory {path}: {e}") from e
    if not path.is_dir():
        raise RuntimeError(f"Output path is not a directory: {path}")
    return path


# ---------- OpenAI-compatible client (stateless) ----------
def get_client(settings: Settings, timeout: float | None = None) -> AsyncOpenAI:
    """Get an async client for the configured OpenAI-compatible API.

    Args:
        settings: Process settings
        timeout: Per-client request timeout in seconds, defaults to REQUEST_TIMEOUT

    Returns:
        Configured AsyncOpenAI client
    """
    return AsyncOpenAI(
        api_key=settings.api_key,
        base_url=f"{settings.api_url.rstrip('/')}/v1",
        timeout=settings.request_timeout if timeout is None else timeout,
        max_retries=0,
    )
