"""
Process configuration for the voice relay.

Settings are read once from the process environment (optionally seeded from a
``.env`` file) into an immutable pydantic model, which is then handed to the
application factory, the connection acceptor and every relay engine. Nothing
below this module reads the environment directly.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

import dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from voice_relay.config.constants import (
    AUDIO_FORMAT_G711_ULAW,
    DEFAULT_CALL_GREETING,
    DEFAULT_CALL_READY_PROMPT,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_REALTIME_MODEL,
    DEFAULT_REALTIME_URL,
    DEFAULT_SESSION_SETTLE_DELAY,
    DEFAULT_SYSTEM_MESSAGE,
    DEFAULT_TEMPERATURE,
    DEFAULT_VOICE,
    SUPPORTED_AUDIO_FORMATS,
)


class ConfigurationError(Exception):
    """Raised when the process configuration is missing or invalid."""


class TeardownPolicy(str, Enum):
    """What happens to the telephony socket when the AI side ends first."""

    # Telephony close ends the session; AI close only stops relaying to the AI.
    ASYMMETRIC = "asymmetric"
    # Either side closing ends the whole session.
    SYMMETRIC = "symmetric"


class Settings(BaseModel):
    """Validated configuration for one relay process."""

    model_config = ConfigDict(frozen=True)

    openai_api_key: str = Field(..., description="OpenAI API key used as bearer credential")
    host: str = Field(DEFAULT_HOST, description="Interface the HTTP listener binds to")
    port: int = Field(DEFAULT_PORT, ge=1, le=65535)
    log_level: str = Field("INFO")
    realtime_model: str = Field(DEFAULT_REALTIME_MODEL)
    realtime_url: str = Field(DEFAULT_REALTIME_URL)
    voice: str = Field(DEFAULT_VOICE)
    instructions: str = Field(DEFAULT_SYSTEM_MESSAGE)
    audio_format: str = Field(AUDIO_FORMAT_G711_ULAW)
    temperature: float = Field(DEFAULT_TEMPERATURE, ge=0.6, le=1.2)
    session_settle_delay: float = Field(DEFAULT_SESSION_SETTLE_DELAY, ge=0.0)
    teardown_policy: TeardownPolicy = Field(TeardownPolicy.ASYMMETRIC)
    call_greeting: Optional[str] = Field(DEFAULT_CALL_GREETING)
    call_ready_prompt: Optional[str] = Field(DEFAULT_CALL_READY_PROMPT)

    @field_validator("openai_api_key", "voice", "instructions")
    def validate_not_blank(cls, v):
        """Reject empty or whitespace-only values."""
        if not v or not v.strip():
            raise ValueError("value cannot be empty")
        return v

    @field_validator("log_level")
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("audio_format")
    def validate_audio_format(cls, v):
        if v not in SUPPORTED_AUDIO_FORMATS:
            raise ValueError(f"Unsupported audio format: {v}")
        return v

    @property
    def realtime_endpoint(self) -> str:
        """Full WebSocket URL of the realtime endpoint, model included."""
        return f"{self.realtime_url}?model={self.realtime_model}"


# Environment variable name -> Settings field
ENV_FIELDS = {
    "OPENAI_API_KEY": "openai_api_key",
    "HOST": "host",
    "PORT": "port",
    "LOG_LEVEL": "log_level",
    "OPENAI_REALTIME_MODEL": "realtime_model",
    "OPENAI_REALTIME_URL": "realtime_url",
    "OPENAI_VOICE": "voice",
    "SYSTEM_MESSAGE": "instructions",
    "OPENAI_AUDIO_FORMAT": "audio_format",
    "OPENAI_TEMPERATURE": "temperature",
    "SESSION_SETTLE_DELAY": "session_settle_delay",
    "TEARDOWN_POLICY": "teardown_policy",
    "CALL_GREETING": "call_greeting",
    "CALL_READY_PROMPT": "call_ready_prompt",
}


def load_dotenv_file(path: Path = Path(".") / ".env") -> bool:
    """Load variables from a .env file if it exists, without overriding the environment."""
    if path.exists():
        return dotenv.load_dotenv(path)
    return False


def load_settings(environ: Optional[Mapping[str, str]] = None, **overrides) -> Settings:
    """
    Build Settings from the process environment.

    Args:
        environ: Mapping to read instead of os.environ
        **overrides: Field values that take precedence over the environment
            (e.g. command-line arguments); None values are ignored

    Returns:
        Settings: The validated configuration

    Raises:
        ConfigurationError: If OPENAI_API_KEY is missing or a value is invalid
    """
    environ = os.environ if environ is None else environ

    values = {
        field: environ[name]
        for name, field in ENV_FIELDS.items()
        if environ.get(name) not in (None, "")
    }
    values.update({k: v for k, v in overrides.items() if v is not None})

    if not values.get("openai_api_key"):
        raise ConfigurationError(
            "Missing OpenAI API key. Set OPENAI_API_KEY in the environment or the .env file."
        )

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
