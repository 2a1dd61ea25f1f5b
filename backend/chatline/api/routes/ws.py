"""WebSocket push channel.

Handshake: the client's first useful frame is ``{"type": "auth", "userId": N}``;
the server tags the connection with N and answers ``{"type": "auth_success"}``.
Untagged connections receive no routed events.
"""
from __future__ import annotations

import json
import logging
from typing import Literal

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import Field, ValidationError

from chatline.realtime.connection import WebSocketConnection
from chatline.realtime.hub import RealtimeHub
from chatline.schemas.common import CamelModel
from chatline.schemas.events import AuthSuccessEvent, serialize_event

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=['push'])


class AuthFrame(CamelModel):
    type: Literal['auth']
    user_id: int = Field(..., ge=1, strict=True)


async def _handle_frame(hub: RealtimeHub, connection: WebSocketConnection, raw: str) -> None:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        LOGGER.warning("Ignoring non-JSON frame from %r", connection)
        return

    if not isinstance(data, dict) or data.get('type') != 'auth':
        LOGGER.debug("Ignoring frame from %r", connection)
        return

    try:
        frame = AuthFrame.model_validate(data)
    except ValidationError:
        LOGGER.warning("Rejected auth frame from %r", connection)
        return

    hub.registry.register(frame.user_id, connection)
    connection.user_id = frame.user_id
    LOGGER.info("User %s authenticated via WebSocket", frame.user_id)
    await connection.send(serialize_event(AuthSuccessEvent()))


@router.websocket('/ws')
async def push_channel(websocket: WebSocket) -> None:
    hub: RealtimeHub = websocket.app.state.hub
    await websocket.accept()
    connection = WebSocketConnection(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message['type'] == 'websocket.disconnect':
                raise WebSocketDisconnect(message.get('code', 1000))
            raw = message.get('text')
            if raw is None:
                LOGGER.debug("Ignoring binary frame from %r", connection)
                continue
            await _handle_frame(hub, connection, raw)
    except WebSocketDisconnect:
        pass
    finally:
        user_id = hub.registry.unregister(connection)
        if user_id is not None:
            LOGGER.info("User %s disconnected", user_id)
