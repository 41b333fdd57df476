"""
Per-call state for the Twilio to OpenAI Realtime relay.

A CallSession pairs the Twilio media-stream WebSocket accepted by the server with the
outbound Realtime API connection opened for that call, and holds the little mutable
state the relay needs: the Twilio stream identifier and whether the AI side is ready
to receive audio. Each session is owned by exactly one RelayEngine and is never
shared between calls.
"""

import uuid
from typing import Any, Optional

from voice_relay.events import EventEmitter, LoggingEventEmitter


class CallSession:
    """
    State and connections belonging to one phone call.

    Both connections are closed at most once, from ``close_both``; a side that the
    peer already closed is recorded with ``mark_*_closed`` and skipped.
    """

    def __init__(
        self,
        telephony_ws: Any,
        ai_connection: Any,
        emitter: Optional[EventEmitter] = None,
        session_id: Optional[str] = None,
    ):
        """
        Args:
            telephony_ws: The accepted Twilio WebSocket (FastAPI WebSocket)
            ai_connection: The Realtime API connection (RealtimeConnection)
            emitter: Sink for close failures
            session_id: Identifier for this call; generated when omitted
        """
        self.session_id = session_id or uuid.uuid4().hex
        self.telephony_ws = telephony_ws
        self.ai_connection = ai_connection
        self.emitter = emitter or LoggingEventEmitter()
        self.stream_sid: Optional[str] = None
        self._ai_ready = False
        self._ai_closed = False
        self._telephony_closed = False

    def assign_stream(self, stream_sid: str) -> None:
        """Record the Twilio stream identifier; a later start event replaces it."""
        self.stream_sid = stream_sid

    def mark_ai_ready(self) -> None:
        """Flag the AI connection as open; caller audio may now be forwarded."""
        if not self._ai_closed:
            self._ai_ready = True

    def is_ai_ready(self) -> bool:
        return self._ai_ready

    def mark_telephony_closed(self) -> None:
        """Record that Twilio disconnected."""
        self._telephony_closed = True

    @property
    def ai_closed(self) -> bool:
        return self._ai_closed

    @property
    def telephony_closed(self) -> bool:
        return self._telephony_closed

    async def close_ai(self) -> None:
        """Stop relaying to the AI side and close its connection if still open."""
        self._ai_ready = False
        if self._ai_closed:
            return
        self._ai_closed = True
        try:
            await self.ai_connection.close()
        except Exception as e:
            self.emitter.emit(
                "session.close_failed", session_id=self.session_id, side="ai", error=repr(e)
            )

    async def close_both(self) -> None:
        """
        Close the AI connection, then the Twilio WebSocket, skipping any side
        already closed. Safe to call repeatedly and from either failure path.
        """
        await self.close_ai()

        if not self._telephony_closed:
            self._telephony_closed = True
            try:
                await self.telephony_ws.close()
            except Exception as e:
                self.emitter.emit(
                    "session.close_failed", session_id=self.session_id, side="telephony", error=repr(e)
                )
