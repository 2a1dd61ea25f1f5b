"""Push connection contract and its WebSocket implementation."""

from __future__ import annotations

from typing import Protocol

from fastapi import WebSocket
from starlette.websockets import WebSocketState


class PushConnection(Protocol):
    """A live push channel. Identity is object identity; connections are hashable."""

    @property
    def is_open(self) -> bool:
        ...

    async def send(self, payload: str) -> None:
        ...


class WebSocketConnection:
    """Adapts a Starlette WebSocket to PushConnection."""

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self.user_id: int | None = None

    @property
    def is_open(self) -> bool:
        return (
            self._websocket.client_state == WebSocketState.CONNECTED
            and self._websocket.application_state == WebSocketState.CONNECTED
        )

    async def send(self, payload: str) -> None:
        await self._websocket.send_text(payload)

    def __repr__(self) -> str:
        return f"WebSocketConnection(user_id={self.user_id}, client={self._websocket.client})"
