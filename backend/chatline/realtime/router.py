"""Fan-out of domain events to live push connections.

Delivery is best effort and at most once: closed connections are skipped,
failed sends are logged, nothing is queued or retried. Callers invoke the
router only after the triggering write has been committed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List

from starlette.concurrency import run_in_threadpool

from chatline.core.chat_keys import DirectChat, GroupChat, MalformedChatKeyError, decode_chat_key
from chatline.realtime.connection import PushConnection
from chatline.realtime.membership import ConversationTracker, GroupMembershipResolver
from chatline.realtime.registry import ConnectionRegistry
from chatline.schemas.common import CamelModel
from chatline.schemas.events import (
    MemberAddedEvent,
    MemberUpdatedEvent,
    NewMessageEvent,
    NewStatusEvent,
    StatusViewedEvent,
    serialize_event,
)
from chatline.schemas.group import MemberOut
from chatline.schemas.message import MessageOut
from chatline.schemas.status import StatusOut, StatusViewOut

LOGGER = logging.getLogger(__name__)


class DeliveryRouter:
    """Resolves routing targets and pushes serialized events to them."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        membership: GroupMembershipResolver,
        conversations: ConversationTracker,
    ) -> None:
        self._registry = registry
        self._membership = membership
        self._conversations = conversations

    # -- primitives -----------------------------------------------------

    async def deliver_to_user(self, user_id: int, event: CamelModel) -> int:
        """Send ``event`` to every open connection of ``user_id``; returns the send count."""
        return await self._push(self._registry.connections_for(user_id), serialize_event(event))

    async def deliver_to_group(self, group_id: int, event: CamelModel) -> int:
        member_ids = await run_in_threadpool(self._membership.members_of, group_id)
        return await self._deliver_to_users(member_ids, serialize_event(event))

    async def broadcast(self, event: CamelModel) -> int:
        return await self._deliver_to_users(self._registry.user_ids(), serialize_event(event))

    async def _deliver_to_users(self, user_ids: Iterable[int], payload: str) -> int:
        connections: List[PushConnection] = []
        for user_id in user_ids:
            connections.extend(self._registry.connections_for(user_id))
        return await self._push(connections, payload)

    async def _push(self, connections: Iterable[PushConnection], payload: str) -> int:
        targets = [conn for conn in connections if conn.is_open]
        if not targets:
            return 0
        # Sends run concurrently so one stalled socket does not hold up the rest.
        results = await asyncio.gather(*(self._send_one(conn, payload) for conn in targets))
        return sum(results)

    async def _send_one(self, connection: PushConnection, payload: str) -> bool:
        try:
            await connection.send(payload)
        except Exception as exc:
            LOGGER.warning("Push to %r failed: %s", connection, exc)
            return False
        return True

    # -- domain events ----------------------------------------------------

    async def route_message(self, message: MessageOut) -> int:
        """Push ``new_message`` to the scope named by the message's chat key.

        Group keys fan out to the current members. Direct keys go to both
        participants and update the pair's conversation entry. Undecodable
        keys are skipped.
        """
        try:
            target = decode_chat_key(message.chat_id)
        except MalformedChatKeyError:
            LOGGER.debug("Skipping delivery of message %s: malformed chat id %r", message.id, message.chat_id)
            return 0

        event = NewMessageEvent(chat_id=message.chat_id, message=message)
        try:
            if isinstance(target, GroupChat):
                return await self.deliver_to_group(target.group_id, event)

            assert isinstance(target, DirectChat)
            user_a, user_b = target.participants
            sent = await self.deliver_to_user(user_a, event)
            sent += await self.deliver_to_user(user_b, event)
            await run_in_threadpool(self._conversations.record_activity, user_a, user_b)
            return sent
        except Exception:
            LOGGER.exception("Delivery of message %s to %s failed", message.id, message.chat_id)
            return 0

    async def notify_member_added(self, member: MemberOut) -> int:
        event = MemberAddedEvent(group_id=member.group_id, user_id=member.user_id, member=member)
        return await self._notify_group(member.group_id, event)

    async def notify_member_updated(self, member: MemberOut) -> int:
        event = MemberUpdatedEvent(group_id=member.group_id, member=member)
        return await self._notify_group(member.group_id, event)

    async def notify_new_status(self, status: StatusOut) -> int:
        try:
            return await self.broadcast(NewStatusEvent(user_id=status.user_id, status=status))
        except Exception:
            LOGGER.exception("Broadcast of status %s failed", status.id)
            return 0

    async def notify_status_viewed(self, owner_id: int, view: StatusViewOut) -> int:
        event = StatusViewedEvent(status_id=view.status_id, viewer_id=view.viewer_id, view=view)
        try:
            return await self.deliver_to_user(owner_id, event)
        except Exception:
            LOGGER.exception("Delivery of view %s to user %s failed", view.id, owner_id)
            return 0

    async def _notify_group(self, group_id: int, event: CamelModel) -> int:
        try:
            return await self.deliver_to_group(group_id, event)
        except Exception:
            LOGGER.exception("Delivery of %s to group %s failed", event.type, group_id)
            return 0
