import asyncio
import json
import logging

import pytest
from fastapi import WebSocketDisconnect

from voice_relay.config.settings import Settings


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


# Sentinels pushed onto the fake sockets' queues
DISCONNECT = object()
CLOSE = object()


class RecordingEmitter:
    """EventEmitter that keeps every event for assertions."""

    def __init__(self):
        self.events = []

    def emit(self, kind, **fields):
        self.events.append((kind, fields))

    def kinds(self):
        return [kind for kind, _ in self.events]

    def count(self, kind):
        return self.kinds().count(kind)


class FakeTelephonySocket:
    """Stands in for the FastAPI WebSocket Twilio is connected to."""

    def __init__(self):
        self.incoming = asyncio.Queue()
        self.sent = []
        self.client = None
        self.accepted = False
        self.close_calls = 0

    async def accept(self):
        self.accepted = True

    async def receive_text(self):
        item = await self.incoming.get()
        if item is DISCONNECT:
            raise WebSocketDisconnect(code=1000)
        return item

    async def send_text(self, text):
        self.sent.append(json.loads(text))

    async def close(self, code=1000):
        self.close_calls += 1

    def push(self, message):
        self.incoming.put_nowait(message if isinstance(message, str) else json.dumps(message))

    def hang_up(self):
        self.incoming.put_nowait(DISCONNECT)


class FakeRealtimeConnection:
    """Stands in for RealtimeConnection; connect() blocks until allowed."""

    def __init__(self, fail_connect=None):
        self.allow_connect = asyncio.Event()
        self.fail_connect = fail_connect
        self.incoming = asyncio.Queue()
        self.sent = []
        self.close_calls = 0
        self.is_open = False

    async def connect(self):
        await self.allow_connect.wait()
        if self.fail_connect is not None:
            raise self.fail_connect
        self.is_open = True

    async def send(self, message):
        if not self.is_open:
            return False
        self.sent.append(json.loads(message))
        return True

    async def iter_messages(self):
        while True:
            item = await self.incoming.get()
            if item is CLOSE:
                self.is_open = False
                return
            if isinstance(item, Exception):
                self.is_open = False
                raise item
            yield item

    async def close(self):
        self.close_calls += 1
        self.is_open = False

    def push(self, message):
        self.incoming.put_nowait(message if isinstance(message, str) else json.dumps(message))

    def remote_close(self):
        self.incoming.put_nowait(CLOSE)

    def fail(self, error):
        self.incoming.put_nowait(error)


async def wait_until(predicate, timeout=1.0):
    """Yield to the event loop until predicate() holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def settings():
    return Settings(openai_api_key="test-api-key", session_settle_delay=0)


@pytest.fixture
def emitter():
    return RecordingEmitter()


@pytest.fixture
def telephony():
    return FakeTelephonySocket()


@pytest.fixture
def ai_connection():
    return FakeRealtimeConnection()
