# SPDX-License-Identifier: MIT
"""Best-effort notification fan-out.

Background tasks report their outcome through zero or more channels:
- OneBot: a chat-relay HTTP endpoint taking an action name and a recipient id
- Telegram: the Bot API ``sendMessage`` method with Markdown text

Channels are independent. A failing channel is logged and never affects the
others or the caller; there are no retries.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
import re
from typing import Literal, Protocol

import httpx

from .config import Settings
from .infrastructure.http import get_http_client

logger = logging.getLogger("mediagate")

TELEGRAM_API_URL = "https://api.telegram.org"
NOTIFY_TIMEOUT = 15.0


class NotificationChannel(Protocol):
    name: str

    async def send(self, client: httpx.AsyncClient, message: str) -> None:
        """Deliver *message*. Raises on failure; the notifier logs it."""
        ...


class OneBotChannel:
    name = "onebot"

    def __init__(
        self,
        base_url: str,
        message_type: Literal["private", "group"],
        target_id: str,
        access_token: str | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._message_type = message_type
        self._target_id = target_id
        self._access_token = access_token

    def build_request(self, message: str) -> tuple[str, dict[str, object]]:
        """Return the action name and JSON body for *message*."""
        if self._message_type == "group":
            return "send_group_msg", {"group_id": self._target_id, "message": message}
        return "send_private_msg", {"user_id": self._target_id, "message": message}

    async def send(self, client: httpx.AsyncClient, message: str) -> None:
        action, body = self.build_request(message)
        headers = {"Authorization": f"Bearer {self._access_token}"} if self._access_token else {}
        response = await client.post(f"{self._base_url}/{action}", json=body, headers=headers)
        response.raise_for_status()


class TelegramChannel:
    name = "telegram"

    def __init__(self, bot_token: str, chat_id: str, api_url: str = TELEGRAM_API_URL) -> None:
        self._endpoint = f"{api_url.rstrip('/')}/bot{bot_token}/sendMessage"
        self._chat_id = chat_id

    async def send(self, client: httpx.AsyncClient, message: str) -> None:
        response = await client.post(
            self._endpoint,
            json={"chat_id": self._chat_id, "text": message, "parse_mode": "Markdown"},
        )
        response.raise_for_status()


class Notifier:
    """Fans a message out to every configured channel."""

    def __init__(self, channels: list[NotificationChannel]) -> None:
        self.channels = channels

    async def send(self, message: str) -> None:
        if not self.channels:
            logger.warning("No notification channel configured, dropping message: %s", message.splitlines()[0])
            return
        async with get_http_client(NOTIFY_TIMEOUT) as client:
            await asyncio.gather(*(self._deliver(client, channel, message) for channel in self.channels))

    async def _deliver(self, client: httpx.AsyncClient, channel: NotificationChannel, message: str) -> None:
        try:
            await channel.send(client, message)
        except Exception as e:
            logger.error("Failed to send %s notification: %s", channel.name, e)
            return
        logger.info("Sent %s notification", channel.name)


def any_channel_configured(settings: Settings) -> bool:
    return settings.onebot_configured or settings.telegram_configured


def build_notifier(settings: Settings) -> Notifier:
    channels: list[NotificationChannel] = []
    url, kind, target = settings.onebot_http_url, settings.onebot_message_type, settings.onebot_target_id
    if url and kind and target:
        channels.append(OneBotChannel(url, kind, target, settings.onebot_access_token))
    token, chat_id = settings.telegram_bot_token, settings.telegram_chat_id
    if token and chat_id:
        channels.append(TelegramChannel(token, chat_id))
    return Notifier(channels)


# ---------- Message builders ----------
#
# Messages are Telegram legacy Markdown. Interpolated values go through _md or
# _code so a stray "_" or "*" in a prompt cannot break entity parsing.

_MD_SPECIAL = re.compile(r"([_*`\[])")


def _md(value: object) -> str:
    return _MD_SPECIAL.sub(r"\\\1", str(value))


def _code(value: object) -> str:
    # Nothing can be escaped inside a code span; backticks would close it
    return "`" + str(value).replace("`", "'") + "`"


def _now() -> str:
    return datetime.datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")


def _prompt_preview(prompt: str, limit: int = 200) -> str:
    return _md(prompt if len(prompt) <= limit else prompt[:limit] + "...")


def video_success_message(
    *,
    filename: str,
    local_path: str,
    model: str,
    prompt: str,
    source_url: str,
    inference_time: float | None,
    seed: int | None,
    remote_url: str | None,
) -> str:
    lines = [
        "✅ *Video generation complete*",
        f"*File:* {_code(filename)}",
        f"*Local path:* {_code(local_path)}",
        f"*Model:* {_md(model)}",
        f"*Prompt:* {_prompt_preview(prompt)}",
        f"*Source URL:* {_md(source_url)}",
        f"*Inference time:* {inference_time if inference_time is not None else 'N/A'}s",
        f"*Seed:* {seed if seed is not None else 'N/A'}",
        f"*Completed at:* {_now()}",
    ]
    if remote_url:
        lines.append(f"*Remote URL:* {_md(remote_url)}")
    return "\n".join(lines)


def video_failure_message(*, request_id: str, model: str, prompt: str, reason: str) -> str:
    return "\n".join(
        [
            "❌ *Video generation failed*",
            f"*Request ID:* {_code(request_id)}",
            f"*Model:* {_md(model)}",
            f"*Prompt:* {_prompt_preview(prompt)}",
            f"*Reason:* {_md(reason)}",
        ]
    )


def video_timeout_message(*, request_id: str, model: str, prompt: str, elapsed_seconds: float) -> str:
    return "\n".join(
        [
            "⏰ *Video generation timed out*",
            f"*Request ID:* {_code(request_id)}",
            f"*Model:* {_md(model)}",
            f"*Prompt:* {_prompt_preview(prompt)}",
            f"Stopped checking after {elapsed_seconds / 3600:.1f} hours without a final status.",
        ]
    )


def video_unknown_status_message(*, request_id: str, model: str, status: str) -> str:
    return "\n".join(
        [
            "⚠️ *Video generation returned an unknown status*",
            f"*Request ID:* {_code(request_id)}",
            f"*Model:* {_md(model)}",
            f"*Status:* {_md(status)}",
            "Polling has stopped; check the provider console for the final result.",
        ]
    )


def upload_message(*, kind: str, filename: str, prompt: str, local_path: str | None, remote_url: str | None) -> str:
    """Result of persisting one artifact: remote URL, local only, or neither."""
    if remote_url:
        head = f"☁️ *{kind} uploaded*"
    elif local_path:
        head = f"💾 *{kind} saved locally* (remote upload unavailable)"
    else:
        head = f"❌ *{kind} could not be stored*"
    lines = [head, f"*File:* {_code(filename)}", f"*Prompt:* {_prompt_preview(prompt)}"]
    if local_path:
        lines.append(f"*Local path:* {_code(local_path)}")
    if remote_url:
        lines.append(f"*Remote URL:* {_md(remote_url)}")
    return "\n".join(lines)


def image_failure_message(*, operation: str, prompt: str, reason: str, index: int | None = None) -> str:
    head = f"❌ *Image {operation} failed*"
    if index is not None:
        head += f" (image {index + 1})"
    return "\n".join([head, f"*Prompt:* {_prompt_preview(prompt)}", f"*Reason:* {_md(reason)}"])
