"""
Handlers module for the HTTP side of the voice relay.

Key components:
- call_handlers: Answers Twilio's incoming-call webhook with the TwiML document that
  connects the call to the media-stream WebSocket.

Usage examples:
```python
from voice_relay.handlers.call_handlers import build_media_stream_twiml

twiml = build_media_stream_twiml("example.ngrok.app", greeting="Connecting you now")
```
"""

# Handlers module initialization
