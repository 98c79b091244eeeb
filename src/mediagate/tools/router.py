# SPDX-License-Identifier: MIT
"""Tool router: maps a tool name and a loosely-typed argument bag to a handler.

Handlers validate their own arguments. Whatever they return is serialized to
JSON text; whatever they raise leaves here as an :class:`McpError`.
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any

from ..config import Settings, logger
from ..exceptions import McpError, invalid_params, method_not_found, to_tool_error
from .images import edit_image, generate_image
from .speech import generate_speech
from .transcription import transcribe_audio
from .video import generate_video

Handler = Callable[[dict[str, Any], Settings], Awaitable[Any]]

TOOL_HANDLERS: dict[str, Handler] = {
    "generate_image": generate_image,
    "edit_image": edit_image,
    "generate_speech": generate_speech,
    "transcribe_audio": transcribe_audio,
    "generate_video": generate_video,
}


async def dispatch(name: str, args: dict[str, Any] | None, settings: Settings) -> str:
    """Run tool *name* and return its result as JSON text.

    Raises:
        McpError: METHOD_NOT_FOUND for unknown tools; otherwise the handler's
            error, or a provider/internal error converted by :func:`to_tool_error`
    """
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        raise method_not_found(f"Unknown tool: {name}")
    if args is None:
        args = {}
    if not isinstance(args, dict):
        raise invalid_params(f"Arguments for {name} must be an object")

    try:
        result = await handler(args, settings)
    except McpError as e:
        logger.error("Error calling tool %s: %s", name, e.error.message)
        raise
    except Exception as e:
        logger.exception("Error calling tool %s", name)
        raise to_tool_error(e) from e

    return json.dumps(result)
