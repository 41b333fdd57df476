from voice_relay.handlers.call_handlers import build_media_stream_twiml


def test_minimal_twiml():
    twiml = build_media_stream_twiml("abc.ngrok.app")

    assert twiml == (
        '<?xml version="1.0" encoding="UTF-8"?>'
        "<Response>"
        '<Connect><Stream url="wss://abc.ngrok.app/media-stream" /></Connect>'
        "</Response>"
    )


def test_greeting_pause_and_prompt_order():
    twiml = build_media_stream_twiml("host:5050", greeting="Hi there", ready_prompt="Talk now", pause_seconds=2)

    assert "<Say>Hi there</Say><Pause length=\"2\"/><Say>Talk now</Say><Connect>" in twiml
    assert 'url="wss://host:5050/media-stream"' in twiml


def test_text_is_escaped():
    twiml = build_media_stream_twiml("host", greeting="<Hangup/> & bye", ready_prompt=None)

    assert "<Hangup/>" not in twiml
    assert "<Say>&lt;Hangup/&gt; &amp; bye</Say>" in twiml


def test_host_is_quoted_in_attribute():
    twiml = build_media_stream_twiml('evil"host')

    assert 'url=\'wss://evil"host/media-stream\'' in twiml


def test_custom_stream_path():
    twiml = build_media_stream_twiml("host", stream_path="/calls/stream")

    assert 'url="wss://host/calls/stream"' in twiml
