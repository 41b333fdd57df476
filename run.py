"""
Run script for starting the Twilio Realtime Voice Relay server.

This script loads the configuration, builds the FastAPI application and serves it
with uvicorn, using WebSocket settings suited to real-time audio between Twilio
and the OpenAI Realtime API.

Usage:
    python run.py [--port PORT] [--host HOST] [--log-level LEVEL]

Exits with status 1 when OPENAI_API_KEY is missing or the configuration is invalid;
uvicorn exits with status 1 if the listener cannot bind.
"""

import argparse
import sys
from typing import Optional, Sequence

import uvicorn

from voice_relay.config.logging_config import configure_logging
from voice_relay.config.settings import ConfigurationError, load_dotenv_file, load_settings
from voice_relay.main import create_app


def parse_args(argv: Optional[Sequence[str]] = None):
    """Parse command line arguments; unset options fall back to the environment."""
    parser = argparse.ArgumentParser(
        description="Start the Twilio Realtime Voice Relay server"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to run the server on (default: PORT env var or 5050)",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind the server to (default: HOST env var or 0.0.0.0)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: LOG_LEVEL env var or INFO)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None):
    """Main entry point for starting the server."""
    args = parse_args(argv)
    load_dotenv_file()

    try:
        settings = load_settings(host=args.host, port=args.port, log_level=args.log_level)
    except ConfigurationError as e:
        logger = configure_logging(args.log_level)
        logger.error(str(e))
        sys.exit(1)

    logger = configure_logging(settings.log_level)
    logger.info(f"Starting server on http://{settings.host}:{settings.port}")
    logger.info(f"Realtime endpoint: {settings.realtime_endpoint}")
    logger.info(f"Teardown policy: {settings.teardown_policy.value}")

    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        # Use HTTP/1.1 for lower overhead than HTTP/2
        http="h11",
        # Disable access logs for lower overhead, we have our own logging
        access_log=False,
        ws_max_size=16777216,  # 16MB - large enough for audio chunks
        ws_ping_interval=20,
        ws_ping_timeout=20,
    )


if __name__ == "__main__":
    main()
