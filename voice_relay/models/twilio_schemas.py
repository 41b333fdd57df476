"""
Pydantic models for Twilio Media Streams message schemas.

This module defines structured data models for the messages exchanged with Twilio over
the bidirectional ``<Connect><Stream>`` WebSocket: the events Twilio sends us and the
media frames we send back.
"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


# Incoming Messages
class MediaPayload(BaseModel):
    """Audio carried by a media event."""

    payload: str = Field(..., description="Base64-encoded 8 kHz mu-law audio")
    track: Optional[str] = Field(None, description="inbound or outbound")
    chunk: Optional[str] = Field(None, description="Chunk sequence within the track")
    timestamp: Optional[str] = Field(None, description="Milliseconds since stream start")


class TwilioMediaEvent(BaseModel):
    """Model for the media event from Twilio."""

    event: Literal["media"]
    media: MediaPayload
    streamSid: Optional[str] = Field(None, description="Stream identifier")
    sequenceNumber: Optional[str] = None


class StartMetadata(BaseModel):
    """Metadata describing the stream, sent once in the start event."""

    streamSid: str = Field(..., min_length=1, description="Stream identifier")
    callSid: Optional[str] = Field(None, description="Call identifier")
    accountSid: Optional[str] = None
    tracks: List[str] = Field(default_factory=list)
    mediaFormat: Optional[Dict[str, Any]] = None
    customParameters: Dict[str, Any] = Field(default_factory=dict)


class TwilioStartEvent(BaseModel):
    """Model for the start event from Twilio."""

    event: Literal["start"]
    start: StartMetadata
    streamSid: Optional[str] = None
    sequenceNumber: Optional[str] = None


class TwilioOtherEvent(BaseModel):
    """Any other event from Twilio (connected, stop, mark, dtmf, ...)."""

    event: str
    raw: Dict[str, Any] = Field(default_factory=dict, description="The decoded message")


# Union type for all decoded telephony events
TelephonyEvent = Union[TwilioMediaEvent, TwilioStartEvent, TwilioOtherEvent]


# Outgoing Messages
class OutboundMedia(BaseModel):
    """Audio sent back to Twilio for playback."""

    payload: str = Field(..., description="Base64-encoded mu-law audio")


class MediaFrameMessage(BaseModel):
    """Model for the media message sent to Twilio."""

    event: Literal["media"] = "media"
    streamSid: str = Field(..., description="Stream identifier assigned at start")
    media: OutboundMedia
