"""
Structured event emission for the relay core.

The relay engine and call session report what happens on a call through an
``EventEmitter`` instead of writing to a logger directly. The default
implementation forwards every event to the application logger with a level
chosen per event kind; tests substitute a recording emitter.
"""

import logging
from typing import Any, Dict, Protocol

from voice_relay.config.constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

# Event kinds that signal a failure on one of the connections
ERROR_EVENTS = frozenset(
    [
        "ai.connect_failed",
        "ai.transport_error",
        "ai.send_failed",
        "ai.error_event",
        "telephony.transport_error",
        "telephony.send_failed",
        "session.close_failed",
        "session.error",
    ]
)

# Expected but noteworthy conditions
WARNING_EVENTS = frozenset(
    [
        "ai.decode_error",
        "ai.audio_dropped",
        "telephony.decode_error",
    ]
)

# High-volume per-frame events
DEBUG_EVENTS = frozenset(
    [
        "telephony.media_dropped",
    ]
)


class EventEmitter(Protocol):
    """Sink for structured relay events."""

    def emit(self, kind: str, **fields: Any) -> None:
        ...


def level_for(kind: str) -> int:
    """Return the logging level used for an event kind."""
    if kind in ERROR_EVENTS:
        return logging.ERROR
    if kind in WARNING_EVENTS:
        return logging.WARNING
    if kind in DEBUG_EVENTS:
        return logging.DEBUG
    return logging.INFO


def format_event(kind: str, fields: Dict[str, Any]) -> str:
    """Render an event as ``kind key=value ...`` with keys in insertion order."""
    if not fields:
        return kind
    rendered = " ".join(f"{key}={value!r}" for key, value in fields.items())
    return f"{kind} {rendered}"


class LoggingEventEmitter:
    """EventEmitter that writes each event to the application logger."""

    def __init__(self, target: logging.Logger = logger):
        self.logger = target

    def emit(self, kind: str, **fields: Any) -> None:
        level = level_for(kind)
        if self.logger.isEnabledFor(level):
            self.logger.log(level, format_event(kind, fields))
