"""
WebSocket connection to the OpenAI Realtime API.

A thin transport wrapper: it opens the authenticated connection, sends text frames,
yields incoming frames and closes. There is no reconnection, heartbeat loop or
buffering: when the connection drops, that side of the call is over.
"""

import asyncio
import logging
import time
from typing import AsyncIterator, Union

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from voice_relay.config.constants import (
    DEFAULT_REALTIME_URL,
    LOGGER_NAME,
    REALTIME_BETA_HEADER,
)
from voice_relay.config.settings import Settings

logger = logging.getLogger(LOGGER_NAME)

CONNECTION_TIMEOUT = 30  # seconds

# WebSocket configuration for low latency
WS_MAX_SIZE = 16 * 1024 * 1024  # 16MB - large enough for audio chunks
WS_PING_INTERVAL = 20  # seconds between keepalive pings


class RealtimeConnectionError(Exception):
    """The Realtime API connection could not be opened or failed abnormally."""


class RealtimeConnection:
    """
    Client connection to the OpenAI Realtime API for one call.
    """
    def __init__(self, api_key: str, model: str, url: str = DEFAULT_REALTIME_URL,
                 timeout: float = CONNECTION_TIMEOUT):
        self.api_key = api_key
        self.model = model
        self.url = f"{url}?model={model}"
        self.timeout = timeout
        self.ws = None
        self._closed = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "RealtimeConnection":
        return cls(settings.openai_api_key, settings.realtime_model, url=settings.realtime_url)

    @property
    def headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "OpenAI-Beta": REALTIME_BETA_HEADER,
        }

    @property
    def is_open(self) -> bool:
        return self.ws is not None and not self._closed

    async def connect(self) -> None:
        """
        Open the WebSocket to the Realtime endpoint.

        Raises:
            RealtimeConnectionError: On timeout, refusal or if the connection was closed
        """
        if self._closed:
            raise RealtimeConnectionError("Connection already closed")

        logger.info(f"Connecting to OpenAI Realtime API with model: {self.model}")
        logger.debug(f"WebSocket URL: {self.url}")
        connection_start = time.time()
        try:
            self.ws = await asyncio.wait_for(
                websockets.connect(
                    self.url,
                    additional_headers=self.headers,
                    max_size=WS_MAX_SIZE,
                    ping_interval=WS_PING_INTERVAL,
                    compression=None,  # Disable compression for lower latency
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise RealtimeConnectionError(
                f"Timeout while connecting to OpenAI Realtime API (after {self.timeout}s)"
            ) from e
        except (OSError, WebSocketException) as e:
            raise RealtimeConnectionError(f"Failed to connect to OpenAI Realtime API: {e}") from e

        logger.debug(f"WebSocket connection established in {time.time() - connection_start:.2f} seconds")

    async def send(self, message: str) -> bool:
        """
        Send one text frame.

        Returns:
            bool: True if the frame was handed to the transport, False if the
                connection is not open
        """
        if not self.is_open:
            return False
        try:
            await self.ws.send(message)
            return True
        except ConnectionClosed as e:
            logger.debug(f"Send on closed Realtime connection: {e}")
            return False

    async def iter_messages(self) -> AsyncIterator[Union[str, bytes]]:
        """
        Yield incoming frames until the connection closes.

        Ends quietly on a normal close.

        Raises:
            RealtimeConnectionError: If the connection closes abnormally
        """
        if self.ws is None:
            raise RealtimeConnectionError("Not connected")
        try:
            async for message in self.ws:
                yield message
        except ConnectionClosedError as e:
            raise RealtimeConnectionError(f"Connection closed unexpectedly: {e}") from e

    async def close(self) -> None:
        """Close the connection; calling it again is a no-op."""
        if self._closed:
            return
        self._closed = True
        if self.ws is not None:
            logger.debug("Closing OpenAI Realtime WebSocket")
            await self.ws.close()

