# SPDX-License-Identifier: MIT
"""Tool error helpers.

Every error surfaced to an MCP caller is an :class:`McpError` carrying a
JSON-RPC error code. Provider failures are folded into the same shape by
:func:`to_tool_error`.
"""

import httpx
import openai
from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND, ErrorData

__all__ = [
    "McpError",
    "internal_error",
    "invalid_params",
    "invalid_request",
    "method_not_found",
    "provider_message",
    "to_tool_error",
]


def _error(code: int, message: str) -> McpError:
    return McpError(ErrorData(code=code, message=message))


def invalid_params(message: str) -> McpError:
    return _error(INVALID_PARAMS, message)


def invalid_request(message: str) -> McpError:
    return _error(INVALID_REQUEST, message)


def method_not_found(message: str) -> McpError:
    return _error(METHOD_NOT_FOUND, message)


def internal_error(message: str) -> McpError:
    return _error(INTERNAL_ERROR, message)


def provider_message(response: httpx.Response) -> str:
    """Pull a human-readable error message out of a provider error response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if payload.get("message"):
            return str(payload["message"])
    return response.text or f"HTTP {response.status_code}"


def to_tool_error(exc: Exception) -> McpError:
    """Convert any exception raised by a handler into an :class:`McpError`.

    4xx provider responses become INVALID_PARAMS, everything else INTERNAL_ERROR.
    """
    if isinstance(exc, McpError):
        return exc

    if isinstance(exc, openai.APIStatusError):
        code = INVALID_PARAMS if 400 <= exc.status_code < 500 else INTERNAL_ERROR
        return _error(code, f"API Error: {exc.message}")

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        code = INVALID_PARAMS if 400 <= status < 500 else INTERNAL_ERROR
        return _error(code, f"API Error: {provider_message(exc.response)}")

    if isinstance(exc, (openai.APIError, httpx.HTTPError)):
        return internal_error(f"API Error: {exc}")

    return internal_error(str(exc) or type(exc).__name__)
