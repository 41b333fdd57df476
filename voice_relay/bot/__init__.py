"""
Bot module relaying Twilio Media Streams audio to and from the OpenAI Realtime API.

Key components:
- codec: Stateless translation between Twilio media-stream envelopes and Realtime API
  envelopes, with a single DecodeError for malformed messages from either peer.
- RealtimeConnection: Authenticated WebSocket connection to the Realtime API for one call.
- RelayEngine: Per-call state machine performing the Realtime handshake and pumping
  audio in both directions until the call ends.

Usage examples:
```python
from voice_relay.bot import RealtimeConnection, RelayEngine
from voice_relay.config.settings import load_settings
from voice_relay.models import CallSession

settings = load_settings()

async def relay_call(websocket):
    session = CallSession(websocket, RealtimeConnection.from_settings(settings))
    await RelayEngine(session, settings).run()
```
"""

from voice_relay.bot.codec import (
    DecodeError,
    decode_ai_event,
    decode_telephony_event,
    encode_audio_append,
    encode_media_frame,
    encode_session_config,
)
from voice_relay.bot.realtime_api import RealtimeConnection, RealtimeConnectionError
from voice_relay.bot.twilio_realtime_bridge import RelayEngine, RelayState

__all__ = [
    "DecodeError",
    "RealtimeConnection",
    "RealtimeConnectionError",
    "RelayEngine",
    "RelayState",
    "decode_ai_event",
    "decode_telephony_event",
    "encode_audio_append",
    "encode_media_frame",
    "encode_session_config",
]
