"""Push payloads sent over the WebSocket channel.

Every event carries a ``type`` discriminator; field names are camelCase on
the wire.
"""
from __future__ import annotations

from typing import Literal

from chatline.schemas.common import CamelModel
from chatline.schemas.group import MemberOut
from chatline.schemas.message import MessageOut
from chatline.schemas.status import StatusOut, StatusViewOut


class AuthSuccessEvent(CamelModel):
    type: Literal['auth_success'] = 'auth_success'


class NewMessageEvent(CamelModel):
    type: Literal['new_message'] = 'new_message'
    chat_id: str
    message: MessageOut


class MemberAddedEvent(CamelModel):
    type: Literal['member_added'] = 'member_added'
    group_id: int
    user_id: int
    member: MemberOut


class MemberUpdatedEvent(CamelModel):
    type: Literal['member_updated'] = 'member_updated'
    group_id: int
    member: MemberOut


class NewStatusEvent(CamelModel):
    type: Literal['new_status'] = 'new_status'
    user_id: int
    status: StatusOut


class StatusViewedEvent(CamelModel):
    type: Literal['status_viewed'] = 'status_viewed'
    status_id: int
    viewer_id: int
    view: StatusViewOut


def serialize_event(event: CamelModel) -> str:
    return event.model_dump_json(by_alias=True)
