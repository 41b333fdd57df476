"""
Models module for data structures and per-call state in the voice relay.

This module provides structured data models and state classes for the application,
defining the wire schemas of both Twilio Media Streams and the OpenAI Realtime API.

Key components:
- twilio_schemas: Pydantic models for the events Twilio sends over a media stream
  and the media frames sent back for playback.
- openai_schemas: Pydantic models for the session configuration and audio messages
  sent to the Realtime API and the generic server event received from it.
- call_session: State for one active call, pairing the Twilio WebSocket with its
  Realtime API connection.

Usage examples:
```python
from voice_relay.models import CallSession, MediaFrameMessage, OutboundMedia

session = CallSession(telephony_ws=websocket, ai_connection=connection)
session.assign_stream("MZ18ad3ab5a668481ce02b83e7395059f0")

frame = MediaFrameMessage(streamSid=session.stream_sid, media=OutboundMedia(payload="AAAA"))
await websocket.send_text(frame.model_dump_json())
```
"""

from voice_relay.models.call_session import CallSession
from voice_relay.models.openai_schemas import (
    InputAudioBufferAppendMessage,
    RealtimeEvent,
    SessionConfig,
    SessionUpdateMessage,
    TurnDetection,
)
from voice_relay.models.twilio_schemas import (
    MediaFrameMessage,
    MediaPayload,
    OutboundMedia,
    StartMetadata,
    TelephonyEvent,
    TwilioMediaEvent,
    TwilioOtherEvent,
    TwilioStartEvent,
)
