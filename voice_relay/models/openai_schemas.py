"""
Pydantic models for OpenAI Realtime API message structures.

This module provides type-safe models for the messages exchanged with the OpenAI Realtime API,
including the session configuration and audio messages we send and the generic event
envelope we receive.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class TurnDetection(BaseModel):
    """Turn detection settings; the server decides when the caller stopped talking."""
    type: Literal["server_vad"] = "server_vad"


class SessionConfig(BaseModel):
    """Session configuration sent once per connection."""
    turn_detection: TurnDetection = Field(default_factory=TurnDetection)
    input_audio_format: str
    output_audio_format: str
    voice: str
    instructions: str
    modalities: List[str] = Field(default_factory=lambda: ["text", "audio"])
    temperature: float


class SessionUpdateMessage(BaseModel):
    """session.update message to OpenAI Realtime API."""
    type: Literal["session.update"] = "session.update"
    session: SessionConfig


class InputAudioBufferAppendMessage(BaseModel):
    """input_audio_buffer.append message carrying caller audio."""
    type: Literal["input_audio_buffer.append"] = "input_audio_buffer.append"
    audio: str


class RealtimeEvent(BaseModel):
    """Any server event from OpenAI Realtime API."""
    type: str
    delta: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)
