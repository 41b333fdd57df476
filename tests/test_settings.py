import os

import pytest

from voice_relay.config.constants import DEFAULT_PORT, DEFAULT_REALTIME_MODEL, DEFAULT_VOICE
from voice_relay.config.settings import (
    ConfigurationError,
    Settings,
    TeardownPolicy,
    load_dotenv_file,
    load_settings,
)


def test_missing_api_key():
    with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
        load_settings(environ={})


def test_empty_api_key_counts_as_missing():
    with pytest.raises(ConfigurationError):
        load_settings(environ={"OPENAI_API_KEY": ""})


def test_defaults():
    settings = load_settings(environ={"OPENAI_API_KEY": "sk-test"})

    assert settings.openai_api_key == "sk-test"
    assert settings.port == DEFAULT_PORT
    assert settings.voice == DEFAULT_VOICE
    assert settings.realtime_model == DEFAULT_REALTIME_MODEL
    assert settings.audio_format == "g711_ulaw"
    assert settings.temperature == 0.8
    assert settings.teardown_policy is TeardownPolicy.ASYMMETRIC
    assert settings.log_level == "INFO"


def test_environment_values_are_parsed():
    settings = load_settings(
        environ={
            "OPENAI_API_KEY": "sk-test",
            "PORT": "8080",
            "OPENAI_VOICE": "shimmer",
            "OPENAI_TEMPERATURE": "1.0",
            "SESSION_SETTLE_DELAY": "0",
            "TEARDOWN_POLICY": "symmetric",
            "LOG_LEVEL": "debug",
            "SYSTEM_MESSAGE": "Be brief.",
        }
    )

    assert settings.port == 8080
    assert settings.voice == "shimmer"
    assert settings.temperature == 1.0
    assert settings.session_settle_delay == 0
    assert settings.teardown_policy is TeardownPolicy.SYMMETRIC
    assert settings.log_level == "DEBUG"
    assert settings.instructions == "Be brief."


def test_overrides_take_precedence_and_none_is_ignored():
    settings = load_settings(
        environ={"OPENAI_API_KEY": "sk-test", "PORT": "8080", "HOST": "127.0.0.1"},
        port=9090,
        host=None,
    )

    assert settings.port == 9090
    assert settings.host == "127.0.0.1"


@pytest.mark.parametrize(
    "name,value",
    [
        ("PORT", "not-a-port"),
        ("PORT", "70000"),
        ("OPENAI_TEMPERATURE", "2.0"),
        ("OPENAI_AUDIO_FORMAT", "mp3"),
        ("TEARDOWN_POLICY", "sometimes"),
        ("LOG_LEVEL", "chatty"),
        ("OPENAI_VOICE", "   "),
    ],
)
def test_invalid_values(name, value):
    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        load_settings(environ={"OPENAI_API_KEY": "sk-test", name: value})


def test_settings_are_immutable():
    settings = Settings(openai_api_key="sk-test")

    with pytest.raises(Exception):
        settings.port = 1


def test_realtime_endpoint():
    settings = Settings(openai_api_key="sk-test", realtime_model="m", realtime_url="wss://host/v1/realtime")

    assert settings.realtime_endpoint == "wss://host/v1/realtime?model=m"


def test_load_dotenv_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("VOICE_RELAY_TEST_VALUE=from-dotenv\n")
    monkeypatch.delenv("VOICE_RELAY_TEST_VALUE", raising=False)

    assert load_dotenv_file(env_file) is True
    assert os.environ["VOICE_RELAY_TEST_VALUE"] == "from-dotenv"
    monkeypatch.delenv("VOICE_RELAY_TEST_VALUE")


def test_load_dotenv_file_missing(tmp_path):
    assert load_dotenv_file(tmp_path / "missing.env") is False
