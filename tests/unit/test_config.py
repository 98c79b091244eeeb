# SPDX-License-Identifier: MIT
"""Unit tests for settings loading."""

import pydantic
import pytest

from mediagate.config import Settings, get_client, get_path, load_settings, parse_cli_overrides


@pytest.mark.unit
def test_parse_cli_overrides_collects_triples():
    argv = ["--verbose", "-e", "API_KEY", "sk-1", "-e", "API_URL", "http://x", "-e", "DANGLING"]
    assert parse_cli_overrides(argv) == {"API_KEY": "sk-1", "API_URL": "http://x"}


@pytest.mark.unit
def test_missing_api_key_is_fatal(tmp_path):
    with pytest.raises(RuntimeError, match="API_KEY"):
        load_settings([], {"DEFAULT_OUTPUT_PATH": str(tmp_path)})


@pytest.mark.unit
def test_blank_api_key_is_fatal(tmp_path):
    with pytest.raises(RuntimeError, match="API_KEY"):
        load_settings([], {"API_KEY": "   ", "DEFAULT_OUTPUT_PATH": str(tmp_path)})


@pytest.mark.unit
def test_cli_overrides_environment(tmp_path):
    env = {"API_KEY": "env-key", "API_URL": "http://env", "DEFAULT_OUTPUT_PATH": str(tmp_path)}
    settings = load_settings(["-e", "API_KEY", "cli-key"], env)

    assert settings.api_key == "cli-key"
    assert settings.api_url == "http://env"


@pytest.mark.unit
def test_defaults(tmp_path):
    settings = load_settings([], {"API_KEY": "k", "DEFAULT_OUTPUT_PATH": str(tmp_path)})

    assert settings.api_url == "https://api.openai.com"
    assert settings.request_timeout == 180.0
    assert settings.image_processing_timeout == 120.0
    assert settings.siliconflow_video_model == "Wan-AI/Wan2.1-T2V-14B"
    assert settings.siliconflow_base_url == "https://api.siliconflow.cn"
    assert settings.output_dir == tmp_path.resolve()
    assert settings.image_defaults.width == 1024
    assert settings.image_defaults.height == 768


@pytest.mark.unit
def test_timeouts_are_milliseconds(tmp_path):
    env = {
        "API_KEY": "k",
        "DEFAULT_OUTPUT_PATH": str(tmp_path),
        "REQUEST_TIMEOUT": "5000",
        "IMAGE_PROCESSING_TIMEOUT": "2500",
    }
    settings = load_settings([], env)

    assert settings.request_timeout == 5.0
    assert settings.image_processing_timeout == 2.5


@pytest.mark.unit
def test_non_numeric_timeout_rejected(tmp_path):
    env = {"API_KEY": "k", "DEFAULT_OUTPUT_PATH": str(tmp_path), "REQUEST_TIMEOUT": "soon"}
    with pytest.raises(RuntimeError, match="REQUEST_TIMEOUT"):
        load_settings([], env)


@pytest.mark.unit
def test_invalid_onebot_message_type_rejected(tmp_path):
    env = {"API_KEY": "k", "DEFAULT_OUTPUT_PATH": str(tmp_path), "ONEBOT_MESSAGE_TYPE": "channel"}
    with pytest.raises(RuntimeError, match="Invalid configuration"):
        load_settings([], env)


@pytest.mark.unit
def test_output_dir_symlink_rejected(tmp_path):
    target = tmp_path / "real"
    target.mkdir()
    link = tmp_path / "link"
    link.symlink_to(target)

    with pytest.raises(RuntimeError, match="symbolic link"):
        load_settings([], {"API_KEY": "k", "DEFAULT_OUTPUT_PATH": str(link)})


@pytest.mark.unit
def test_settings_are_frozen(settings):
    with pytest.raises(pydantic.ValidationError):
        settings.api_key = "other"


@pytest.mark.unit
def test_configured_flags(make_settings):
    settings = make_settings(
        onebot_http_url="http://bot",
        onebot_message_type="private",
        telegram_bot_token="t",
        cf_imgbed_upload_url="https://img.example.com/upload",
    )

    assert settings.onebot_configured is False  # no target id
    assert settings.telegram_configured is False  # no chat id
    assert settings.mirror_configured is False  # no api key
    assert settings.webdav_configured is False

    complete = make_settings(
        onebot_http_url="http://bot",
        onebot_message_type="private",
        onebot_target_id="1",
        webdav_url="https://dav",
        webdav_username="u",
        webdav_password="p",
    )
    assert complete.onebot_configured is True
    assert complete.webdav_configured is True


@pytest.mark.unit
def test_get_path_creates_subdirectory(settings):
    path = get_path(settings, "video")
    assert path == settings.output_dir / "video"
    assert path.is_dir()


@pytest.mark.unit
def test_get_client_targets_v1(make_settings):
    settings = make_settings(api_url="http://gateway.local/", request_timeout=7.0)
    client = get_client(settings)

    assert str(client.base_url).rstrip("/") == "http://gateway.local/v1"
    assert client.timeout == 7.0
    assert client.max_retries == 0
    assert get_client(settings, timeout=99.0).timeout == 99.0


@pytest.mark.unit
def test_settings_require_api_key(tmp_path):
    with pytest.raises(pydantic.ValidationError):
        Settings(api_key="", output_dir=tmp_path)
