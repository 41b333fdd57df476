"""
Envelope codec between Twilio Media Streams and the OpenAI Realtime API.

Pure functions, no I/O: each ``decode_*`` turns one raw WebSocket message into a
typed event (or raises ``DecodeError``), each ``encode_*`` builds one outgoing
envelope model ready for ``model_dump_json()``. Audio payloads are base64 strings
and are passed through untouched in both directions; Twilio's 8 kHz mu-law is
also the Realtime API's ``g711_ulaw`` format, so no transcoding happens here.
"""

import json
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from voice_relay.config.constants import (
    AUDIO_FORMAT_G711_ULAW,
    DEFAULT_TEMPERATURE,
    TWILIO_EVENT_MEDIA,
    TWILIO_EVENT_START,
)
from voice_relay.models.openai_schemas import (
    InputAudioBufferAppendMessage,
    RealtimeEvent,
    SessionConfig,
    SessionUpdateMessage,
)
from voice_relay.models.twilio_schemas import (
    MediaFrameMessage,
    OutboundMedia,
    TelephonyEvent,
    TwilioMediaEvent,
    TwilioOtherEvent,
    TwilioStartEvent,
)

RawMessage = Union[str, bytes]


class DecodeError(ValueError):
    """A message from either peer could not be decoded."""

    def __init__(self, message: str, raw: Optional[RawMessage] = None):
        super().__init__(message)
        self.raw = raw


def _load_object(raw: RawMessage, source: str) -> Dict[str, Any]:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"{source} message is not valid JSON: {e}", raw) from e
    if not isinstance(data, dict):
        raise DecodeError(f"{source} message is not a JSON object", raw)
    return data


def encode_session_config(
    voice: str,
    instructions: str,
    audio_format: str = AUDIO_FORMAT_G711_ULAW,
    temperature: float = DEFAULT_TEMPERATURE,
) -> SessionUpdateMessage:
    """
    Build the session.update message configuring the realtime session.

    Args:
        voice: Voice used for synthesized audio
        instructions: System instructions for the model
        audio_format: Input and output audio format (Twilio's native mu-law by default)
        temperature: Sampling temperature

    Returns:
        SessionUpdateMessage: server VAD turn detection, text and audio modalities

    Raises:
        ValueError: If voice or instructions is empty
    """
    if not voice or not voice.strip():
        raise ValueError("voice cannot be empty")
    if not instructions or not instructions.strip():
        raise ValueError("instructions cannot be empty")

    return SessionUpdateMessage(
        session=SessionConfig(
            input_audio_format=audio_format,
            output_audio_format=audio_format,
            voice=voice,
            instructions=instructions,
            temperature=temperature,
        )
    )


def decode_ai_event(raw: RawMessage) -> RealtimeEvent:
    """
    Parse a server event from the Realtime API.

    Raises:
        DecodeError: If the message is not a JSON object with a string ``type``
    """
    data = _load_object(raw, "Realtime")
    event_type = data.get("type")
    if not isinstance(event_type, str) or not event_type:
        raise DecodeError("Realtime message has no type", raw)

    delta = data.get("delta")
    return RealtimeEvent(
        type=event_type,
        delta=delta if isinstance(delta, str) else None,
        raw=data,
    )


def encode_media_frame(stream_sid: Optional[str], payload: str) -> MediaFrameMessage:
    """
    Wrap a base64 audio payload into a Twilio media message.

    Raises:
        ValueError: If no stream has been assigned yet
    """
    if not stream_sid:
        raise ValueError("stream_sid must be assigned before sending media")
    return MediaFrameMessage(streamSid=stream_sid, media=OutboundMedia(payload=payload))


def decode_telephony_event(raw: RawMessage) -> TelephonyEvent:
    """
    Parse a Twilio Media Streams message into a media, start or other event.

    Unknown event names are not errors; they decode to ``TwilioOtherEvent``.

    Raises:
        DecodeError: If the message is not a JSON object with a string ``event``,
            or a media/start event lacks its payload or stream identifier
    """
    data = _load_object(raw, "Telephony")
    event = data.get("event")
    if not isinstance(event, str) or not event:
        raise DecodeError("Telephony message has no event", raw)

    try:
        if event == TWILIO_EVENT_MEDIA:
            return TwilioMediaEvent.model_validate(data)
        if event == TWILIO_EVENT_START:
            return TwilioStartEvent.model_validate(data)
    except ValidationError as e:
        raise DecodeError(f"Malformed {event} event: {e}", raw) from e

    return TwilioOtherEvent(event=event, raw=data)


def encode_audio_append(payload: str) -> InputAudioBufferAppendMessage:
    """Wrap caller audio into an input_audio_buffer.append message."""
    return InputAudioBufferAppendMessage(audio=payload)
