"""
FastAPI server relaying Twilio Media Streams to the OpenAI Realtime API.

This module builds the FastAPI application that Twilio talks to: the voice webhook
returning TwiML for incoming calls, and the media-stream WebSocket endpoint where
each call's audio is relayed to and from the OpenAI Realtime API.

The application is created by ``create_app`` from an explicit Settings value; see
``run.py`` for the command-line entry point.
"""

from typing import Optional

from fastapi import FastAPI, Request, WebSocket

from voice_relay.config.constants import INCOMING_CALL_PATH, MEDIA_STREAM_PATH
from voice_relay.config.settings import Settings
from voice_relay.handlers.call_handlers import handle_incoming_call
from voice_relay.websocket_manager import WebSocketManager

APP_NAME = "Twilio Realtime Voice Relay"
APP_DESCRIPTION = "Relay between Twilio Media Streams and the OpenAI Realtime API"
APP_VERSION = "1.0.0"

# Twilio may be configured to call the webhook with any of these methods
INCOMING_CALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def create_app(settings: Settings,
               websocket_manager: Optional[WebSocketManager] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Process settings shared by every call
        websocket_manager: Connection acceptor; one is built from settings when omitted

    Returns:
        FastAPI: The configured application
    """
    app = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=APP_VERSION,
    )
    manager = websocket_manager or WebSocketManager(settings)
    app.state.settings = settings
    app.state.websocket_manager = manager

    @app.get("/")
    async def root():
        """Root endpoint acknowledging that the server is running.

        Returns:
            dict: Basic information about the API and its endpoints.
        """
        return {
            "message": "Twilio Media Stream Server is running!",
            "name": APP_NAME,
            "version": APP_VERSION,
            "endpoints": {
                INCOMING_CALL_PATH: "Twilio voice webhook returning TwiML",
                MEDIA_STREAM_PATH: "WebSocket endpoint for Twilio Media Streams",
                "/health": "Health check endpoint",
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring system status.

        Returns:
            dict: Status information including the number of calls being relayed.
        """
        return {
            "status": "healthy",
            "openai_api_key_configured": bool(settings.openai_api_key),
            "active_sessions": len(manager.active_sessions),
        }

    @app.api_route(INCOMING_CALL_PATH, methods=INCOMING_CALL_METHODS)
    async def incoming_call(request: Request):
        """Twilio voice webhook: answer with TwiML connecting the call to the media stream."""
        return await handle_incoming_call(request, settings)

    @app.websocket(MEDIA_STREAM_PATH)
    async def media_stream(websocket: WebSocket):
        """WebSocket endpoint for Twilio Media Streams.

        Each connection is one call; its audio is relayed to a dedicated OpenAI
        Realtime connection until either side hangs up.
        """
        await manager.handle_websocket(websocket)

    return app
