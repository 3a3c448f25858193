"""Broadcast Channel - Imperative Shell.

Delivers named events with a JSON payload to one connected client. The
scheduler only depends on the BroadcastChannel protocol; WebSocketChannel
is the FastAPI-backed implementation.
"""

import logging
from typing import Any, Protocol

from fastapi.websockets import WebSocket, WebSocketDisconnect, WebSocketState


logger = logging.getLogger(__name__)


DATA_UPDATE_EVENT = "data-update"


class BroadcastChannel(Protocol):
    """Push side of one subscriber connection."""

    @property
    def is_open(self) -> bool:
        """True while the client can still receive messages."""
        ...

    async def send(self, event: str, payload: dict[str, Any]) -> bool:
        """Push an event; returns False if it could not be delivered."""
        ...


def build_message(event: str, payload: dict[str, Any]) -> dict[str, Any]:
    """Frame an event for the wire."""
    return {"event": event, "data": payload}


class WebSocketChannel:
    """BroadcastChannel writing JSON frames to a FastAPI WebSocket.

    Sending to a closed socket is a silent no-op.
    """

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket
        self._closed = False

    @property
    def is_open(self) -> bool:
        return (
            not self._closed
            and self.websocket.application_state == WebSocketState.CONNECTED
            and self.websocket.client_state == WebSocketState.CONNECTED
        )

    def close(self) -> None:
        """Mark the channel closed so later sends are dropped."""
        self._closed = True

    async def send(self, event: str, payload: dict[str, Any]) -> bool:
        if not self.is_open:
            logger.debug("Dropping %s for closed channel", event)
            return False

        try:
            await self.websocket.send_json(build_message(event, payload))
            return True
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            # Client went away between the check and the send
            logger.info("Could not deliver %s: %s", event, e)
            self._closed = True
            return False
