# SPDX-License-Identifier: MIT
"""mediagate MCP Server - FastMCP server for media generation tools.

This module initializes the FastMCP server and registers all tools.
Business logic is organized into submodules under tools/; every tool forwards
its arguments to the router.
"""

import sys
from typing import Any, Literal

from dotenv import load_dotenv
from mcp import types
from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from .config import get_path, get_settings, logger
from .descriptions import EDIT_IMAGE, GENERATE_IMAGE, GENERATE_SPEECH, GENERATE_VIDEO, TRANSCRIBE_AUDIO
from .exceptions import invalid_params, method_not_found
from .features import log_features
from .tools.router import dispatch

# Initialize FastMCP server
mcp = FastMCP("mediagate")


def _args(**kwargs: Any) -> dict[str, Any]:
    """Drop unset arguments so handlers apply their configured defaults."""
    return {key: value for key, value in kwargs.items() if value is not None}


# ==================== IMAGE TOOLS ====================
@mcp.tool(description=GENERATE_IMAGE, structured_output=False)
async def generate_image(
    prompt: str,
    model: str | None = None,
    width: int | None = None,
    height: int | None = None,
    steps: int | None = None,
    n: int | None = None,
    background: Literal["transparent", "opaque", "auto"] | None = None,
    moderation: Literal["low", "auto"] | None = None,
    size: Literal["1024x1024", "1536x1024", "1024x1536", "auto"] | None = None,
    quality: Literal["auto", "high", "medium", "low"] | None = None,
) -> str:
    args = _args(
        prompt=prompt,
        model=model,
        width=width,
        height=height,
        steps=steps,
        n=n,
        background=background,
        moderation=moderation,
        size=size,
        quality=quality,
    )
    return await dispatch("generate_image", args, get_settings())


@mcp.tool(description=EDIT_IMAGE, structured_output=False)
async def edit_image(
    image: str,
    prompt: str,
    model: str | None = None,
    n: int | None = None,
    size: Literal["1024x1024", "1536x1024", "1024x1536", "auto"] | None = None,
) -> str:
    return await dispatch("edit_image", _args(image=image, prompt=prompt, model=model, n=n, size=size), get_settings())


# ==================== AUDIO TOOLS ====================
@mcp.tool(description=GENERATE_SPEECH, structured_output=False)
async def generate_speech(
    input: str,
    voice: str | None = None,
    model: str | None = None,
    speed: float | None = None,
) -> str:
    return await dispatch(
        "generate_speech", _args(input=input, voice=voice, model=model, speed=speed), get_settings()
    )


@mcp.tool(description=TRANSCRIBE_AUDIO, structured_output=False)
async def transcribe_audio(file: str, model: str | None = None) -> str:
    return await dispatch("transcribe_audio", _args(file=file, model=model), get_settings())


# ==================== VIDEO TOOLS ====================
@mcp.tool(description=GENERATE_VIDEO, structured_output=False)
async def generate_video(
    prompt: str,
    image_size: Literal["1280x720", "720x1280", "960x960"],
    model: (
        Literal[
            "Wan-AI/Wan2.1-T2V-14B",
            "Wan-AI/Wan2.1-T2V-14B-Turbo",
            "Wan-AI/Wan2.1-I2V-14B-720P",
            "Wan-AI/Wan2.1-I2V-14B-720P-Turbo",
        ]
        | None
    ) = None,
    negative_prompt: str | None = None,
    image: str | None = None,
    seed: int | None = None,
) -> str:
    args = _args(
        prompt=prompt,
        image_size=image_size,
        model=model,
        negative_prompt=negative_prompt,
        image=image,
        seed=seed,
    )
    return await dispatch("generate_video", args, get_settings())


# ==================== TOOL CALL HANDLER ====================
async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
    """Run a registered tool, letting McpError reach the client as a JSON-RPC error.

    FastMCP's default handler reports every exception as an ``isError`` text
    result, which drops the error code.
    """
    name = req.params.name
    tool = mcp._tool_manager.get_tool(name)
    if tool is None:
        raise method_not_found(f"Unknown tool: {name}")
    try:
        text = await tool.fn_metadata.call_fn_with_arg_validation(
            tool.fn, tool.is_async, req.params.arguments or {}, None
        )
    except ValidationError as e:
        raise invalid_params(f"Invalid arguments for {name}: {e}") from e
    return types.ServerResult(types.CallToolResult(content=[types.TextContent(type="text", text=text)]))


mcp._mcp_server.request_handlers[types.CallToolRequest] = call_tool


# ==================== SERVER ENTRYPOINT ====================
def main():
    """Run the MCP server over stdio.

    Settings come from ``-e KEY VALUE`` arguments, the environment, and a
    ``.env`` file. A missing API_KEY is fatal.
    """
    load_dotenv()  # Load environment variables at runtime
    try:
        settings = get_settings()
        for path_type in ("images", "audio", "video", "temp"):
            get_path(settings, path_type)
    except RuntimeError as e:
        logger.error("Failed to initialize server: %s", e)
        sys.exit(1)

    logger.info("Starting mediagate MCP server over stdio")
    logger.info("Using API URL: %s", settings.api_url)
    logger.info("Default image model: %s (edit: %s)", settings.default_image_model, settings.default_edit_image_model)
    logger.info("Default speech model: %s (voice: %s)", settings.default_speech_model, settings.default_speech_voice)
    logger.info("Default transcription model: %s", settings.default_transcription_model)
    logger.info("Output directory: %s", settings.output_dir)
    logger.info("Request timeout: %.0fs", settings.request_timeout)
    log_features(settings)
    mcp.run()


if __name__ == "__main__":
    main()
