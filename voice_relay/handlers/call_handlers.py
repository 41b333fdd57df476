"""
Handles Twilio voice webhooks for incoming calls.

When a call arrives, Twilio requests the voice webhook and executes the TwiML
returned: an optional spoken greeting, a short pause, and a ``<Connect><Stream>``
that opens a bidirectional media stream back to this server's media-stream
WebSocket endpoint.
"""

import logging
from typing import Optional
from xml.sax.saxutils import escape, quoteattr

from fastapi import Request, Response

from voice_relay.config.constants import LOGGER_NAME, MEDIA_STREAM_PATH
from voice_relay.config.settings import Settings

logger = logging.getLogger(LOGGER_NAME)

TWIML_MEDIA_TYPE = "text/xml"


def build_media_stream_twiml(
    host: str,
    greeting: Optional[str] = None,
    ready_prompt: Optional[str] = None,
    pause_seconds: int = 1,
    stream_path: str = MEDIA_STREAM_PATH,
) -> str:
    """
    Build the TwiML document connecting a call to the media-stream endpoint.

    Args:
        host: Public host (and port) Twilio should connect back to
        greeting: Text spoken before connecting; omitted when empty
        ready_prompt: Text spoken right before the stream opens; omitted when empty
        pause_seconds: Pause between greeting and ready prompt
        stream_path: Path of the media-stream WebSocket endpoint

    Returns:
        The TwiML document as a string
    """
    stream_url = f"wss://{host}{stream_path}"
    parts = ['<?xml version="1.0" encoding="UTF-8"?>', "<Response>"]
    if greeting:
        parts.append(f"<Say>{escape(greeting)}</Say>")
        parts.append(f'<Pause length="{max(1, int(pause_seconds))}"/>')
    if ready_prompt:
        parts.append(f"<Say>{escape(ready_prompt)}</Say>")
    parts.append("<Connect>")
    parts.append(f"<Stream url={quoteattr(stream_url)} />")
    parts.append("</Connect>")
    parts.append("</Response>")
    return "".join(parts)


async def handle_incoming_call(request: Request, settings: Settings) -> Response:
    """
    Answer Twilio's voice webhook with TwiML that opens a media stream.

    The stream URL is derived from the Host header of the webhook request, so the
    same deployment works behind any public hostname or tunnel.

    Args:
        request: The incoming webhook request (GET or POST)
        settings: Process settings supplying the spoken prompts

    Returns:
        A text/xml response containing the TwiML document
    """
    host = request.headers.get("host") or request.url.netloc
    logger.info(f"Incoming call, connecting media stream to wss://{host}{MEDIA_STREAM_PATH}")
    twiml = build_media_stream_twiml(
        host,
        greeting=settings.call_greeting,
        ready_prompt=settings.call_ready_prompt,
    )
    return Response(content=twiml, media_type=TWIML_MEDIA_TYPE)
