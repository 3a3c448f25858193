"""Tests for the WebSocket broadcast channel."""

import asyncio
from unittest.mock import AsyncMock, Mock

from fastapi.websockets import WebSocketDisconnect, WebSocketState

from quakewatch.shell.broadcast import DATA_UPDATE_EVENT, WebSocketChannel, build_message


def make_websocket():
    websocket = Mock()
    websocket.application_state = WebSocketState.CONNECTED
    websocket.client_state = WebSocketState.CONNECTED
    websocket.send_json = AsyncMock()
    return websocket


class TestWebSocketChannel:
    """Tests for WebSocketChannel.send()."""

    def test_sends_framed_event(self):
        websocket = make_websocket()
        channel = WebSocketChannel(websocket)

        delivered = asyncio.run(channel.send(DATA_UPDATE_EVENT, {"allEarthquakes": []}))

        assert delivered is True
        websocket.send_json.assert_awaited_once_with(
            {"event": "data-update", "data": {"allEarthquakes": []}}
        )

    def test_closed_channel_is_noop(self):
        websocket = make_websocket()
        channel = WebSocketChannel(websocket)
        channel.close()

        delivered = asyncio.run(channel.send(DATA_UPDATE_EVENT, {}))

        assert delivered is False
        assert channel.is_open is False
        websocket.send_json.assert_not_awaited()

    def test_disconnected_client_is_noop(self):
        websocket = make_websocket()
        websocket.client_state = WebSocketState.DISCONNECTED
        channel = WebSocketChannel(websocket)

        assert asyncio.run(channel.send(DATA_UPDATE_EVENT, {})) is False
        websocket.send_json.assert_not_awaited()

    def test_send_failure_closes_channel(self):
        websocket = make_websocket()
        websocket.send_json.side_effect = WebSocketDisconnect(code=1006)
        channel = WebSocketChannel(websocket)

        assert asyncio.run(channel.send(DATA_UPDATE_EVENT, {})) is False
        assert channel.is_open is False

    def test_runtime_error_treated_as_closed(self):
        websocket = make_websocket()
        websocket.send_json.side_effect = RuntimeError("Cannot call send once closed")
        channel = WebSocketChannel(websocket)

        assert asyncio.run(channel.send(DATA_UPDATE_EVENT, {})) is False


def test_build_message():
    assert build_message("pong", {}) == {"event": "pong", "data": {}}
