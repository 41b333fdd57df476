"""
WebSocket connection manager for Twilio Media Streams.

This module implements the server-side acceptance of Twilio media-stream connections,
providing the infrastructure to:
- Accept each WebSocket connection on the media-stream endpoint
- Pair it with a fresh OpenAI Realtime connection in a new CallSession
- Run one RelayEngine per call for the lifetime of the connection
- Track active calls and discard them when the call ends

The WebSocketManager is the only component shared between calls; everything it
creates for a connection is owned by that connection's RelayEngine.
"""

import logging
import socket
from typing import Callable, Dict, Optional

from fastapi import WebSocket

from voice_relay.bot.realtime_api import RealtimeConnection
from voice_relay.bot.twilio_realtime_bridge import RelayEngine
from voice_relay.config.constants import LOGGER_NAME
from voice_relay.config.settings import Settings
from voice_relay.events import EventEmitter, LoggingEventEmitter
from voice_relay.models.call_session import CallSession

logger = logging.getLogger(LOGGER_NAME)

# Builds the outbound Realtime connection for a new call
ConnectionFactory = Callable[[Settings], RealtimeConnection]


class WebSocketManager:
    """Accepts Twilio media-stream WebSockets and runs one relay per call.

    Each accepted connection gets its own CallSession and RelayEngine, registered in
    ``active_sessions`` under the session id until the relay finishes.
    """

    def __init__(self, settings: Settings,
                 connection_factory: ConnectionFactory = RealtimeConnection.from_settings,
                 emitter: Optional[EventEmitter] = None):
        self.settings = settings
        self.connection_factory = connection_factory
        self.emitter = emitter or LoggingEventEmitter()
        self.active_sessions: Dict[str, RelayEngine] = {}

    def _optimize_socket(self, websocket: WebSocket) -> None:
        """
        Disable Nagle's algorithm on the underlying TCP socket when it is reachable.

        Args:
            websocket: The FastAPI WebSocket connection
        """
        try:
            client = websocket.client
            if hasattr(client, "sock") and client.sock is not None:
                client.sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
                logger.debug("Optimized socket: TCP_NODELAY enabled for low latency")
        except OSError as e:
            logger.warning(f"Could not optimize socket: {e}")

    def create_engine(self, websocket: WebSocket) -> RelayEngine:
        """Build the session and relay engine for a newly accepted connection."""
        session = CallSession(
            telephony_ws=websocket,
            ai_connection=self.connection_factory(self.settings),
            emitter=self.emitter,
        )
        return RelayEngine(session, self.settings, emitter=self.emitter)

    async def handle_websocket(self, websocket: WebSocket) -> None:
        """Handle a Twilio media-stream connection throughout its lifecycle.

        Args:
            websocket (WebSocket): The FastAPI WebSocket connection object

        This method:
        1. Accepts the WebSocket connection
        2. Creates a CallSession and RelayEngine for it
        3. Runs the relay until the call ends
        4. Removes the session from the registry
        """
        await websocket.accept()
        self._optimize_socket(websocket)

        engine = self.create_engine(websocket)
        session_id = engine.session.session_id
        self.active_sessions[session_id] = engine
        logger.info(f"Media stream connected: {session_id} ({len(self.active_sessions)} active)")

        try:
            await engine.run()
        finally:
            self.active_sessions.pop(session_id, None)
            logger.info(f"Media stream closed: {session_id} ({len(self.active_sessions)} active)")
