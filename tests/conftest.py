# SPDX-License-Identifier: MIT
"""Shared pytest fixtures for mediagate tests."""

import pathlib
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from mediagate.config import Settings
from mediagate.storage.local import LocalStorageBackend

# Every module that opens an httpx client through get_http_client
HTTP_CLIENT_MODULES = (
    "mediagate.infrastructure.http",
    "mediagate.notify",
    "mediagate.providers.siliconflow",
    "mediagate.storage.imgbed",
    "mediagate.storage.webdav",
)

Responder = httpx.Response | Exception | Callable[[httpx.Request], httpx.Response]


class HttpRoutes:
    """In-process HTTP endpoint table served through :class:`httpx.MockTransport`.

    Routes match on method and URL prefix; the first match wins. Unmatched
    requests get a 404. Every request is recorded in ``requests``.
    """

    def __init__(self) -> None:
        self.routes: list[tuple[str, str, Responder]] = []
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url_prefix: str, responder: Responder) -> None:
        self.routes.append((method.upper(), url_prefix, responder))

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, prefix, responder in self.routes:
            if request.method == method and str(request.url).startswith(prefix):
                if isinstance(responder, Exception):
                    raise responder
                if callable(responder):
                    return responder(request)
                # Fresh copy so one route can answer repeatedly
                return httpx.Response(responder.status_code, headers=responder.headers, content=responder.content)
        return httpx.Response(404, json={"message": "no route"})

    def calls_to(self, url_prefix: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url).startswith(url_prefix)]


@pytest.fixture
def mock_http(mocker) -> HttpRoutes:
    """Route every outbound httpx request through an :class:`HttpRoutes` table."""
    routes = HttpRoutes()

    def factory(timeout: float = 60.0) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(routes.handle), follow_redirects=True)

    for module in HTTP_CLIENT_MODULES:
        mocker.patch(f"{module}.get_http_client", side_effect=factory)
    return routes


@pytest.fixture
def tmp_output_path(tmp_path: pathlib.Path) -> pathlib.Path:
    """Create a temporary output root."""
    output = tmp_path / "output"
    output.mkdir()
    return output


@pytest.fixture
def make_settings(tmp_output_path: pathlib.Path) -> Callable[..., Settings]:
    """Build Settings rooted in the temporary output directory."""

    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {"api_key": "sk-test", "output_dir": tmp_output_path}
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    """Settings with no optional features configured."""
    return make_settings()


@pytest.fixture
def notify_settings(make_settings) -> Settings:
    """Settings with both notification channels and the SiliconFlow key configured."""
    return make_settings(
        siliconflow_api_key="sf-key",
        onebot_http_url="http://onebot.local",
        onebot_message_type="group",
        onebot_target_id="12345",
        telegram_bot_token="tg-token",
        telegram_chat_id="999",
    )


@pytest.fixture
def storage(settings: Settings) -> LocalStorageBackend:
    return LocalStorageBackend(settings)


class RecordingNotifier:
    """Stand-in for :class:`mediagate.notify.Notifier` that records messages."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    async def send(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


class FakeMirror:
    """Remote mirror stub returning a fixed URL (or None to simulate failure)."""

    def __init__(self, url: str | None = "https://img.example.com/file/abc.png") -> None:
        self.url = url
        self.uploads: list[tuple[str, int]] = []

    async def upload(self, data: bytes, filename: str) -> str | None:
        self.uploads.append((filename, len(data)))
        return self.url


@pytest.fixture
def fake_mirror() -> FakeMirror:
    return FakeMirror()
