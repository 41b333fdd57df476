"""
Relay engine connecting a Twilio media stream with the OpenAI Realtime API.

One RelayEngine drives one CallSession through CONNECTING -> ACTIVE -> CLOSED:

- CONNECTING: the Realtime connection is being opened. Twilio messages are already
  being read; caller audio is dropped until the connection is open.
- ACTIVE: the session.update configuration has been sent and audio flows both ways.
- CLOSED: both connections are closed and nothing else is sent.

Each direction runs in its own task so messages are forwarded in arrival order
within a direction. Sends are fire-and-forget: a frame that cannot be delivered is
lost, and nothing is queued or retried.
"""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import WebSocketDisconnect

from voice_relay.bot.codec import (
    DecodeError,
    RawMessage,
    decode_ai_event,
    decode_telephony_event,
    encode_audio_append,
    encode_media_frame,
    encode_session_config,
)
from voice_relay.bot.realtime_api import RealtimeConnectionError
from voice_relay.config.constants import (
    LOG_EVENT_TYPES,
    REALTIME_AUDIO_DELTA,
    REALTIME_ERROR,
    REALTIME_SESSION_UPDATED,
    TWILIO_EVENT_MEDIA,
    TWILIO_EVENT_START,
)
from voice_relay.config.settings import Settings, TeardownPolicy
from voice_relay.events import EventEmitter
from voice_relay.models.call_session import CallSession
from voice_relay.models.openai_schemas import RealtimeEvent
from voice_relay.models.twilio_schemas import (
    TelephonyEvent,
    TwilioMediaEvent,
    TwilioStartEvent,
)

# Longest raw message excerpt attached to decode error events
RAW_EXCERPT_LENGTH = 200


class RelayState(str, Enum):
    CONNECTING = "connecting"
    ACTIVE = "active"
    CLOSED = "closed"


def _excerpt(raw: Optional[RawMessage]) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return raw[:RAW_EXCERPT_LENGTH]


class RelayEngine:
    """
    Bidirectional relay for one call.

    Handles:
    - Opening and configuring the Realtime API session
    - Forwarding caller audio (Twilio media events) as input_audio_buffer.append
    - Forwarding synthesized audio (response.audio.delta) as Twilio media frames
    - Tearing both connections down according to the configured policy
    """

    def __init__(self, session: CallSession, settings: Settings,
                 emitter: Optional[EventEmitter] = None):
        self.session = session
        self.settings = settings
        self.emitter = emitter or session.emitter
        self.teardown_policy = settings.teardown_policy
        self.state = RelayState.CONNECTING

        self._telephony_handlers: Dict[str, Callable[[Any], Awaitable[None]]] = {
            TWILIO_EVENT_MEDIA: self._handle_media,
            TWILIO_EVENT_START: self._handle_start,
        }
        self._ai_handlers: Dict[str, Callable[[RealtimeEvent], Awaitable[None]]] = {
            REALTIME_AUDIO_DELTA: self._handle_audio_delta,
            REALTIME_SESSION_UPDATED: self._handle_session_updated,
            REALTIME_ERROR: self._handle_ai_error,
        }

    def _emit(self, kind: str, **fields: Any) -> None:
        self.emitter.emit(kind, session_id=self.session.session_id, **fields)

    async def run(self) -> None:
        """
        Relay the call until it ends.

        Returns once both connections are closed; the engine is then CLOSED. An
        unexpected exception in either direction is reported as session.error and
        ends the call under either teardown policy.
        """
        self.state = RelayState.CONNECTING
        self._emit("session.started")

        telephony_task = asyncio.create_task(self._pump_telephony())
        ai_task = asyncio.create_task(self._run_ai_side())
        reported = set()
        try:
            done, _ = await asyncio.wait({telephony_task, ai_task}, return_when=asyncio.FIRST_COMPLETED)
            failed = self._report_failures(done)
            reported.update(failed)
            if not failed and not telephony_task.done():
                # The AI side ended first
                await self.session.close_ai()
                if self.teardown_policy is TeardownPolicy.SYMMETRIC:
                    self._emit("session.teardown", reason="ai_closed")
                    telephony_task.cancel()
                await asyncio.wait({telephony_task})
        finally:
            for task in (telephony_task, ai_task):
                task.cancel()
            results = await asyncio.gather(telephony_task, ai_task, return_exceptions=True)
            for task, result in zip((telephony_task, ai_task), results):
                if isinstance(result, Exception) and task not in reported:
                    self._emit("session.error", error=repr(result))
            await self.session.close_both()
            self.state = RelayState.CLOSED
            self._emit("session.closed")

    def _report_failures(self, tasks) -> set:
        """Emit session.error for each finished task that raised; return those tasks."""
        failed = set()
        for task in tasks:
            if task.cancelled() or task.exception() is None:
                continue
            failed.add(task)
            self._emit("session.error", error=repr(task.exception()))
        return failed

    # Telephony -> AI

    async def _pump_telephony(self) -> None:
        websocket = self.session.telephony_ws
        try:
            while True:
                raw = await websocket.receive_text()
                await self.handle_telephony_message(raw)
        except WebSocketDisconnect as e:
            self.session.mark_telephony_closed()
            self._emit("telephony.disconnected", code=e.code)
        except RuntimeError as e:
            # Starlette raises RuntimeError when receiving on a socket that is gone
            self.session.mark_telephony_closed()
            self._emit("telephony.transport_error", error=str(e))

    async def handle_telephony_message(self, raw: RawMessage) -> None:
        """Decode one Twilio message and act on it; decode failures are reported and skipped."""
        try:
            event = decode_telephony_event(raw)
        except DecodeError as e:
            self._emit("telephony.decode_error", error=str(e), raw=_excerpt(e.raw))
            return

        handler = self._telephony_handlers.get(event.event, self._handle_other)
        await handler(event)

    async def _handle_media(self, event: TwilioMediaEvent) -> None:
        if not self.session.is_ai_ready():
            self._emit("telephony.media_dropped", reason="ai_not_ready")
            return

        message = encode_audio_append(event.media.payload)
        if not await self.session.ai_connection.send(message.model_dump_json()):
            self._emit("ai.send_failed", message_type=message.type)

    async def _handle_start(self, event: TwilioStartEvent) -> None:
        self.session.assign_stream(event.start.streamSid)
        self._emit("telephony.stream_started", stream_sid=event.start.streamSid,
                   call_sid=event.start.callSid)

    async def _handle_other(self, event: TelephonyEvent) -> None:
        self._emit("telephony.event", event=event.event)

    # AI -> Telephony

    async def _run_ai_side(self) -> None:
        connection = self.session.ai_connection
        try:
            await connection.connect()
        except RealtimeConnectionError as e:
            self._emit("ai.connect_failed", error=str(e))
            return

        self.session.mark_ai_ready()
        self._emit("ai.connected", model=self.settings.realtime_model)

        await asyncio.sleep(self.settings.session_settle_delay)
        await self.send_session_update()
        self.state = RelayState.ACTIVE

        try:
            async for raw in connection.iter_messages():
                await self.handle_ai_message(raw)
        except RealtimeConnectionError as e:
            self._emit("ai.transport_error", error=str(e))
        self._emit("ai.disconnected")

    async def send_session_update(self) -> None:
        """Send the one-time session.update configuring voice, format and behaviour."""
        message = encode_session_config(
            voice=self.settings.voice,
            instructions=self.settings.instructions,
            audio_format=self.settings.audio_format,
            temperature=self.settings.temperature,
        )
        payload = message.model_dump_json()
        self._emit("ai.session_update", voice=self.settings.voice)
        if not await self.session.ai_connection.send(payload):
            self._emit("ai.send_failed", message_type=message.type)

    async def handle_ai_message(self, raw: RawMessage) -> None:
        """Decode one Realtime API event and act on it; decode failures are reported and skipped."""
        try:
            event = decode_ai_event(raw)
        except DecodeError as e:
            self._emit("ai.decode_error", error=str(e), raw=_excerpt(e.raw))
            return

        handler = self._ai_handlers.get(event.type)
        if handler:
            await handler(event)
        elif event.type in LOG_EVENT_TYPES:
            self._emit("ai.event", type=event.type)

    async def _handle_audio_delta(self, event: RealtimeEvent) -> None:
        if not event.delta:
            return
        if not self.session.stream_sid:
            self._emit("ai.audio_dropped", reason="no_stream_sid")
            return

        frame = encode_media_frame(self.session.stream_sid, event.delta)
        try:
            await self.session.telephony_ws.send_text(frame.model_dump_json())
        except (WebSocketDisconnect, RuntimeError) as e:
            self._emit("telephony.send_failed", error=repr(e))

    async def _handle_session_updated(self, event: RealtimeEvent) -> None:
        session = event.raw.get("session")
        self._emit("ai.session_updated", session=session.get("id") if isinstance(session, dict) else None)

    async def _handle_ai_error(self, event: RealtimeEvent) -> None:
        error = event.raw.get("error")
        if isinstance(error, dict):
            self._emit("ai.error_event", code=error.get("code"), message=error.get("message"))
        else:
            self._emit("ai.error_event", error=error)
