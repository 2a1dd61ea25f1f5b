from __future__ import annotations

import asyncio
from datetime import datetime

from chatline.crud import conversations as conversations_crud
from chatline.crud import groups as groups_crud
from chatline.schemas.events import NewStatusEvent
from chatline.schemas.group import MemberOut
from chatline.schemas.message import MessageOut
from chatline.schemas.status import StatusOut, StatusViewOut
from conftest import FakeConnection


def _message(chat_id: str, sender_id: int = 1, message_id: int = 1) -> MessageOut:
    return MessageOut(
        id=message_id,
        sender_id=sender_id,
        chat_id=chat_id,
        content="hello",
        content_type="text",
        timestamp=datetime(2024, 1, 1, 12, 0, 0),
        is_read=False,
        is_deleted=False,
    )


def _status(user_id: int) -> StatusOut:
    return StatusOut(
        id=3,
        user_id=user_id,
        content="https://img.example.com/1.png",
        content_type="image",
        created_at=datetime(2024, 1, 1),
        expires_at=datetime(2024, 1, 4),
    )


def test_deliver_to_user_only_reaches_open_connections(registry, delivery_router) -> None:
    open_a, open_b = FakeConnection("a"), FakeConnection("b")
    closed = FakeConnection("closed", is_open=False)
    for conn in (open_a, open_b, closed):
        registry.register(42, conn)

    sent = asyncio.run(delivery_router.deliver_to_user(42, NewStatusEvent(user_id=1, status=_status(1))))

    assert sent == 2
    assert len(open_a.sent) == 1
    assert len(open_b.sent) == 1
    assert closed.sent == []


def test_deliver_to_unknown_user_is_noop(delivery_router) -> None:
    sent = asyncio.run(delivery_router.deliver_to_user(404, NewStatusEvent(user_id=1, status=_status(1))))
    assert sent == 0


def test_failing_connection_does_not_block_others(registry, delivery_router) -> None:
    broken = FakeConnection("broken", fail=True)
    healthy = FakeConnection("healthy")
    registry.register(1, broken)
    registry.register(1, healthy)

    sent = asyncio.run(delivery_router.deliver_to_user(1, NewStatusEvent(user_id=1, status=_status(1))))

    assert sent == 1
    assert len(healthy.sent) == 1


def test_unregistered_connection_gets_nothing(registry, delivery_router) -> None:
    conn = FakeConnection()
    registry.register(5, conn)
    registry.unregister(conn)

    asyncio.run(delivery_router.deliver_to_user(5, NewStatusEvent(user_id=1, status=_status(1))))

    assert conn.sent == []
    assert len(registry.connections_for(5)) == 0


def test_direct_message_reaches_both_participants(registry, delivery_router, session_factory) -> None:
    c1 = FakeConnection("c1")
    registry.register(42, c1)

    sent = asyncio.run(delivery_router.route_message(_message("42_7", sender_id=42)))

    assert sent == 1
    assert len(c1.sent) == 1
    event = c1.sent[0]
    assert event["type"] == "new_message"
    assert event["chatId"] == "42_7"
    assert event["message"]["senderId"] == 42
    assert event["message"]["content"] == "hello"


def test_direct_message_records_conversation_in_either_order(delivery_router, session_factory) -> None:
    asyncio.run(delivery_router.route_message(_message("3_8", message_id=1)))
    with session_factory() as db:
        conv = conversations_crud.get_conversation(db, 8, 3)
        assert conv is not None
        first_activity = conv.last_message_at

    # Reply built in the other order lands on the same conversation row.
    asyncio.run(delivery_router.route_message(_message("8_3", sender_id=8, message_id=2)))
    with session_factory() as db:
        conversations = conversations_crud.list_conversations_for_user(db, 3)
        assert len(conversations) == 1
        assert conversations[0].last_message_at >= first_activity


def test_group_message_fans_out_to_all_member_connections(
    registry, delivery_router, session_factory, make_user
) -> None:
    u1, u2, u3, outsider = make_user(), make_user(), make_user(), make_user()
    with session_factory() as db:
        group = groups_crud.create_group(db, "team", creator_id=u1)
        groups_crud.add_group_member(db, group.id, u2)
        groups_crud.add_group_member(db, group.id, u3)
        group_id = group.id

    c_1 = FakeConnection("u1")
    c_a, c_b = FakeConnection("u2-a"), FakeConnection("u2-b")
    c_3 = FakeConnection("u3")
    c_out = FakeConnection("outsider")
    registry.register(u1, c_1)
    registry.register(u2, c_a)
    registry.register(u2, c_b)
    registry.register(u3, c_3)
    registry.register(outsider, c_out)

    sent = asyncio.run(delivery_router.route_message(_message(f"group_{group_id}", sender_id=u1)))

    assert sent == 4
    for conn in (c_1, c_a, c_b, c_3):
        assert [e["type"] for e in conn.sent] == ["new_message"]
    assert c_out.sent == []


def test_group_delivery_uses_membership_at_call_time(
    registry, delivery_router, session_factory, make_user
) -> None:
    owner, late = make_user(), make_user()
    with session_factory() as db:
        group_id = groups_crud.create_group(db, "late joiners", creator_id=owner).id

    late_conn = FakeConnection("late")
    registry.register(late, late_conn)

    asyncio.run(delivery_router.route_message(_message(f"group_{group_id}", sender_id=owner, message_id=1)))
    assert late_conn.sent == []

    with session_factory() as db:
        groups_crud.add_group_member(db, group_id, late)

    asyncio.run(delivery_router.route_message(_message(f"group_{group_id}", sender_id=owner, message_id=2)))
    assert [e["message"]["id"] for e in late_conn.sent] == [2]


def test_message_to_unknown_group_is_dropped(registry, delivery_router) -> None:
    conn = FakeConnection()
    registry.register(1, conn)

    assert asyncio.run(delivery_router.route_message(_message("group_999"))) == 0
    assert conn.sent == []


def test_malformed_chat_key_is_skipped(registry, delivery_router, session_factory) -> None:
    conn = FakeConnection()
    registry.register(1, conn)

    assert asyncio.run(delivery_router.route_message(_message("1_2_3"))) == 0
    assert conn.sent == []
    with session_factory() as db:
        assert conversations_crud.list_conversations_for_user(db, 1) == []


def test_broadcast_reaches_every_registered_user(registry, delivery_router) -> None:
    conns = [FakeConnection(str(i)) for i in range(3)]
    for user_id, conn in enumerate(conns, start=1):
        registry.register(user_id, conn)
    registry.register(9, FakeConnection("closed", is_open=False))

    sent = asyncio.run(delivery_router.notify_new_status(_status(1)))

    assert sent == 3
    for conn in conns:
        assert conn.sent[0]["type"] == "new_status"
        assert conn.sent[0]["userId"] == 1
        assert conn.sent[0]["status"]["expiresAt"].startswith("2024-01-04")


def test_status_view_notifies_owner_only(registry, delivery_router) -> None:
    owner, viewer = FakeConnection("owner"), FakeConnection("viewer")
    registry.register(1, owner)
    registry.register(2, viewer)
    view = StatusViewOut(id=10, status_id=3, viewer_id=2, viewed_at=datetime(2024, 1, 2))

    asyncio.run(delivery_router.notify_status_viewed(1, view))

    assert owner.sent == [
        {
            "type": "status_viewed",
            "statusId": 3,
            "viewerId": 2,
            "view": {"id": 10, "statusId": 3, "viewerId": 2, "viewedAt": "2024-01-02T00:00:00"},
        }
    ]
    assert viewer.sent == []


def test_member_events_go_to_group(registry, delivery_router, session_factory, make_user) -> None:
    owner, joiner = make_user(), make_user()
    with session_factory() as db:
        group_id = groups_crud.create_group(db, "club", creator_id=owner).id
        member = MemberOut.model_validate(groups_crud.add_group_member(db, group_id, joiner))

    owner_conn, joiner_conn = FakeConnection("owner"), FakeConnection("joiner")
    registry.register(owner, owner_conn)
    registry.register(joiner, joiner_conn)

    asyncio.run(delivery_router.notify_member_added(member))
    asyncio.run(delivery_router.notify_member_updated(member))

    for conn in (owner_conn, joiner_conn):
        assert [e["type"] for e in conn.sent] == ["member_added", "member_updated"]
    added = owner_conn.sent[0]
    assert added["groupId"] == group_id
    assert added["userId"] == joiner
    assert added["member"]["canWrite"] is True
