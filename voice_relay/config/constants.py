"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for protocol names, defaults and diagnostic sets so
that the Twilio and OpenAI sides of the relay agree on them.
"""

# Logger name used throughout the application
LOGGER_NAME = "voice_relay"

# OpenAI Realtime API
DEFAULT_REALTIME_MODEL = "gpt-4o-realtime-preview-2024-10-01"
DEFAULT_REALTIME_URL = "wss://api.openai.com/v1/realtime"
REALTIME_BETA_HEADER = "realtime=v1"

# Session defaults
DEFAULT_PORT = 5050
DEFAULT_HOST = "0.0.0.0"
DEFAULT_VOICE = "alloy"
DEFAULT_TEMPERATURE = 0.8
DEFAULT_SESSION_SETTLE_DELAY = 0.25  # seconds
DEFAULT_SYSTEM_MESSAGE = (
    "You are a helpful and bubbly AI assistant who loves to chat about anything "
    "the user is interested in. Keep your answers short and conversational."
)
DEFAULT_CALL_GREETING = (
    "Please wait while we connect your call to the AI voice assistant, "
    "powered by Twilio and the OpenAI Realtime API"
)
DEFAULT_CALL_READY_PROMPT = "O.K. you can start talking!"

# Audio format constants (Twilio Media Streams carry 8 kHz G.711 mu-law)
AUDIO_FORMAT_G711_ULAW = "g711_ulaw"
AUDIO_FORMAT_G711_ALAW = "g711_alaw"
AUDIO_FORMAT_PCM16 = "pcm16"
SUPPORTED_AUDIO_FORMATS = [AUDIO_FORMAT_G711_ULAW, AUDIO_FORMAT_G711_ALAW, AUDIO_FORMAT_PCM16]

# Twilio Media Streams event names
TWILIO_EVENT_CONNECTED = "connected"
TWILIO_EVENT_START = "start"
TWILIO_EVENT_MEDIA = "media"
TWILIO_EVENT_STOP = "stop"
TWILIO_EVENT_MARK = "mark"

# OpenAI Realtime event types
REALTIME_SESSION_UPDATE = "session.update"
REALTIME_SESSION_UPDATED = "session.updated"
REALTIME_INPUT_AUDIO_APPEND = "input_audio_buffer.append"
REALTIME_AUDIO_DELTA = "response.audio.delta"
REALTIME_ERROR = "error"

# Realtime event types reported for diagnostics (session.updated is handled separately)
LOG_EVENT_TYPES = frozenset(
    [
        "response.content.done",
        "rate_limits.updated",
        "response.done",
        "input_audio_buffer.committed",
        "input_audio_buffer.speech_stopped",
        "input_audio_buffer.speech_started",
        "session.created",
    ]
)

# Paths served by the application
MEDIA_STREAM_PATH = "/media-stream"
INCOMING_CALL_PATH = "/incoming-call"
