"""
Configuration module for the voice relay.

This module provides centralized configuration management for the entire application,
including constants, logging setup, and environment-based settings.

Key components:
- constants: Defines application-wide constants used across modules, including
  Twilio and OpenAI event names, audio formats, and default session values.
- logging_config: Provides a consistent logging infrastructure with support for
  console and file-based logging with rotation capabilities.
- settings: Loads the process environment into an explicit Settings value that is
  passed to the app factory and to every relay engine.

Usage examples:
```python
from voice_relay.config.logging_config import configure_logging
from voice_relay.config.settings import load_settings

logger = configure_logging()
settings = load_settings()  # raises ConfigurationError without OPENAI_API_KEY
logger.info(f"Relaying to {settings.realtime_endpoint}")
```
"""
