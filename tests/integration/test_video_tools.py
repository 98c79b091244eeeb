# SPDX-License-Identifier: MIT
"""Integration tests for video submission against a mocked SiliconFlow API."""

import json

import httpx
import pytest
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST

from mediagate.exceptions import McpError
from mediagate.tools.video import generate_video

SUBMIT = "https://api.siliconflow.cn/v1/video/submit"


@pytest.fixture
def spawn(mocker):
    spawn = mocker.patch("mediagate.tools.video.spawn_background")
    yield spawn
    for call in spawn.call_args_list:
        call.args[0].close()


@pytest.mark.integration
async def test_rejected_without_notification_channel(mock_http, make_settings, spawn):
    settings = make_settings(siliconflow_api_key="sf-key")

    with pytest.raises(McpError) as exc_info:
        await generate_video({"prompt": "a cat", "image_size": "1280x720"}, settings)

    assert exc_info.value.error.code == INVALID_REQUEST
    assert "notification" in exc_info.value.error.message
    assert mock_http.requests == []
    spawn.assert_not_called()


@pytest.mark.integration
async def test_submit_starts_poller(mock_http, notify_settings, spawn):
    mock_http.add("POST", SUBMIT, httpx.Response(200, json={"requestId": "req-9"}))

    result = await generate_video({"prompt": "a cat", "image_size": "960x960", "seed": 3}, notify_settings)

    assert result["status"] == "submitted"
    assert result["requestId"] == "req-9"
    assert "req-9" in result["message"]

    (request,) = mock_http.requests
    assert request.headers["Authorization"] == "Bearer sf-key"
    assert json.loads(request.content) == {
        "model": "Wan-AI/Wan2.1-T2V-14B",
        "prompt": "a cat",
        "image_size": "960x960",
        "seed": 3,
    }

    spawn.assert_called_once()
    assert spawn.call_args.kwargs["name"] == "generate_video:req-9"


@pytest.mark.integration
async def test_text_to_video_ignores_image(mock_http, notify_settings, spawn):
    mock_http.add("POST", SUBMIT, httpx.Response(200, json={"requestId": "r"}))

    await generate_video(
        {"prompt": "p", "image_size": "1280x720", "image": "https://x/y.png", "negative_prompt": "blur"},
        notify_settings,
    )

    body = json.loads(mock_http.requests[0].content)
    assert "image" not in body
    assert body["negative_prompt"] == "blur"


@pytest.mark.integration
async def test_image_to_video_forwards_image(mock_http, notify_settings, spawn):
    mock_http.add("POST", SUBMIT, httpx.Response(200, json={"requestId": "r"}))

    await generate_video(
        {
            "prompt": "p",
            "image_size": "720x1280",
            "model": "Wan-AI/Wan2.1-I2V-14B-720P",
            "image": "data:image/png;base64,AAAA",
        },
        notify_settings,
    )

    assert json.loads(mock_http.requests[0].content)["image"] == "data:image/png;base64,AAAA"


@pytest.mark.integration
@pytest.mark.parametrize(
    "args",
    [
        {"prompt": "p"},
        {"image_size": "1280x720"},
        {"prompt": "p", "image_size": "1920x1080"},
        {"prompt": "p", "image_size": "1280x720", "model": "Wan-AI/Wan2.2-T2V"},
        {"prompt": "p", "image_size": "1280x720", "model": "Wan-AI/Wan2.1-I2V-14B-720P-Turbo"},
    ],
)
async def test_invalid_arguments(mock_http, notify_settings, spawn, args):
    with pytest.raises(McpError) as exc_info:
        await generate_video(args, notify_settings)

    assert exc_info.value.error.code == INVALID_PARAMS
    assert mock_http.requests == []


@pytest.mark.integration
async def test_missing_api_key(mock_http, make_settings, spawn):
    settings = make_settings(telegram_bot_token="t", telegram_chat_id="1")

    with pytest.raises(McpError) as exc_info:
        await generate_video({"prompt": "p", "image_size": "1280x720"}, settings)

    assert exc_info.value.error.code == INVALID_REQUEST
    assert "SILICONFLOW_API_KEY" in exc_info.value.error.message
    assert mock_http.requests == []


@pytest.mark.integration
@pytest.mark.parametrize(
    ("status", "code"),
    [(401, INVALID_REQUEST), (400, INVALID_PARAMS), (503, INTERNAL_ERROR)],
)
async def test_submit_http_errors(mock_http, notify_settings, spawn, status, code):
    mock_http.add("POST", SUBMIT, httpx.Response(status, json={"message": "nope"}))

    with pytest.raises(McpError) as exc_info:
        await generate_video({"prompt": "p", "image_size": "1280x720"}, notify_settings)

    assert exc_info.value.error.code == code
    assert exc_info.value.error.message == "SiliconFlow API Error: nope"
    spawn.assert_not_called()


@pytest.mark.integration
async def test_submit_without_request_id(mock_http, notify_settings, spawn):
    mock_http.add("POST", SUBMIT, httpx.Response(200, json={"status": "ok"}))

    with pytest.raises(McpError) as exc_info:
        await generate_video({"prompt": "p", "image_size": "1280x720"}, notify_settings)

    assert exc_info.value.error.code == INTERNAL_ERROR
    spawn.assert_not_called()


@pytest.mark.integration
async def test_submit_unreachable(mock_http, notify_settings, spawn):
    mock_http.add("POST", SUBMIT, httpx.ConnectError("dns failure"))

    with pytest.raises(McpError) as exc_info:
        await generate_video({"prompt": "p", "image_size": "1280x720"}, notify_settings)

    assert exc_info.value.error.code == INTERNAL_ERROR
