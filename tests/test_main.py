import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock

from voice_relay.config.settings import Settings
from voice_relay.main import APP_NAME, create_app
from voice_relay.websocket_manager import WebSocketManager


@pytest.fixture
def app():
    return create_app(Settings(openai_api_key="test-api-key"))


@pytest.fixture
def client(app):
    return TestClient(app)


def test_health_check(client):
    """Test the health check endpoint returns correct response"""
    response = client.get("/health")
    assert response.status_code == 200

    response_json = response.json()
    assert response_json["status"] == "healthy"
    assert response_json["openai_api_key_configured"] is True
    assert response_json["active_sessions"] == 0


def test_root_endpoint(client):
    """Test the root endpoint acknowledges the server is running"""
    response = client.get("/")
    assert response.status_code == 200

    response_json = response.json()
    assert response_json["message"] == "Twilio Media Stream Server is running!"
    assert response_json["name"] == APP_NAME
    assert response_json["version"] == "1.0.0"
    assert "/media-stream" in response_json["endpoints"]
    assert "/incoming-call" in response_json["endpoints"]
    assert "/health" in response_json["endpoints"]


@pytest.mark.parametrize("method", ["GET", "POST"])
def test_incoming_call_returns_twiml(client, method):
    response = client.request(method, "/incoming-call", headers={"host": "relay.example.com"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/xml")
    body = response.text
    assert body.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert "<Connect><Stream url=\"wss://relay.example.com/media-stream\" /></Connect>" in body
    assert '<Pause length="1"/>' in body


def test_incoming_call_uses_configured_prompts():
    settings = Settings(
        openai_api_key="test-api-key",
        call_greeting="Hello & welcome",
        call_ready_prompt="Go ahead",
    )
    client = TestClient(create_app(settings))

    body = client.post("/incoming-call", headers={"host": "relay.example.com"}).text

    assert "<Say>Hello &amp; welcome</Say>" in body
    assert "<Say>Go ahead</Say>" in body
    assert body.index("Hello &amp; welcome") < body.index("Go ahead") < body.index("<Connect>")


@pytest.mark.parametrize("method", ["PUT", "HEAD", "OPTIONS"])
def test_incoming_call_accepts_any_method(client, method):
    response = client.request(method, "/incoming-call", headers={"host": "relay.example.com"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/xml")


def test_app_state(app):
    assert app.title == APP_NAME
    assert app.version == "1.0.0"
    assert isinstance(app.state.websocket_manager, WebSocketManager)
    assert app.state.settings.openai_api_key == "test-api-key"

    route_paths = [route.path for route in app.routes]
    assert "/media-stream" in route_paths
    assert "/incoming-call" in route_paths
    assert "/health" in route_paths
    assert "/" in route_paths


@pytest.mark.asyncio
async def test_websocket_endpoint():
    """Test that websocket endpoint calls the handle_websocket method"""
    manager = MagicMock()
    manager.handle_websocket = AsyncMock()
    app = create_app(Settings(openai_api_key="test-api-key"), websocket_manager=manager)
    mock_websocket = MagicMock()

    # Find the websocket endpoint by path
    websocket_route = next(route for route in app.routes if route.path == "/media-stream")
    await websocket_route.endpoint(mock_websocket)

    manager.handle_websocket.assert_awaited_once_with(mock_websocket)


def test_health_counts_active_sessions():
    manager = WebSocketManager(Settings(openai_api_key="test-api-key"))
    manager.active_sessions["abc"] = MagicMock()
    client = TestClient(create_app(manager.settings, websocket_manager=manager))

    assert client.get("/health").json()["active_sessions"] == 1
