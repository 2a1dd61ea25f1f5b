from __future__ import annotations

from chatline.crud import statuses as statuses_crud
from chatline.models.message import Message


def _register(client, username: str) -> dict:
    resp = client.post(
        "/api/register",
        json={"username": username, "email": f"{username}@example.com", "password": "correct-horse-1"},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_register_and_login(client) -> None:
    user = _register(client, "alice")
    assert user["username"] == "alice"
    assert user["about"] == "Available"
    assert "password" not in user and "passwordHash" not in user

    ok = client.post("/api/login", json={"email": "alice@example.com", "password": "correct-horse-1"})
    assert ok.status_code == 200
    assert ok.json()["id"] == user["id"]

    bad = client.post("/api/login", json={"email": "alice@example.com", "password": "wrong-password"})
    assert bad.status_code == 401


def test_register_rejects_duplicates(client) -> None:
    _register(client, "bob")

    same_email = client.post(
        "/api/register",
        json={"username": "bobby", "email": "bob@example.com", "password": "correct-horse-1"},
    )
    assert same_email.status_code == 400
    assert same_email.json()["detail"] == "Email already in use"

    same_name = client.post(
        "/api/register",
        json={"username": "bob", "email": "other@example.com", "password": "correct-horse-1"},
    )
    assert same_name.status_code == 400


def test_user_profile_update_and_delete(client) -> None:
    user = _register(client, "carol")

    resp = client.patch(f"/api/users/{user['id']}", json={"about": "At work"})
    assert resp.status_code == 200
    assert resp.json()["about"] == "At work"

    assert client.delete(f"/api/users/{user['id']}").json() == {"status": "ok"}
    assert client.get(f"/api/users/{user['id']}").status_code == 404


def test_send_and_list_messages(client) -> None:
    alice, bob = _register(client, "alice"), _register(client, "bob")
    chat_id = f"{alice['id']}_{bob['id']}"

    for text in ("one", "two", "three"):
        resp = client.post("/api/messages", json={"senderId": alice["id"], "chatId": chat_id, "content": text})
        assert resp.status_code == 201
        body = resp.json()
        assert body["chatId"] == chat_id
        assert body["isRead"] is False and body["isDeleted"] is False

    history = client.get(f"/api/messages/{chat_id}").json()
    assert [m["content"] for m in history] == ["one", "two", "three"]

    latest = client.get(f"/api/messages/{chat_id}", params={"limit": 2}).json()
    assert [m["content"] for m in latest] == ["two", "three"]

    first_id = history[0]["id"]
    assert client.patch(f"/api/messages/{first_id}/read").json()["isRead"] is True
    assert client.delete(f"/api/messages/{first_id}").status_code == 200
    remaining = client.get(f"/api/messages/{chat_id}").json()
    assert [m["content"] for m in remaining] == ["two", "three"]


def test_message_with_undecodable_chat_id_is_stored_but_not_routed(client) -> None:
    alice, bob = _register(client, "alice"), _register(client, "bob")

    resp = client.post(
        "/api/messages",
        json={"senderId": alice["id"], "chatId": "lobby_general_x", "content": "anyone here?"},
    )
    assert resp.status_code == 201
    assert resp.json()["chatId"] == "lobby_general_x"

    history = client.get("/api/messages/lobby_general_x").json()
    assert [m["content"] for m in history] == ["anyone here?"]
    assert client.get(f"/api/users/{alice['id']}/conversations").json() == []
    assert client.get(f"/api/users/{bob['id']}/conversations").json() == []


def test_send_message_rejects_unknown_sender(client) -> None:
    resp = client.post("/api/messages", json={"senderId": 999, "chatId": "1_2", "content": "x"})
    assert resp.status_code == 404


def test_message_content_is_stored_verbatim(client) -> None:
    alice, bob = _register(client, "alice"), _register(client, "bob")
    chat_id = f"{alice['id']}_{bob['id']}"
    texts = [
        "the onclick handler throws",
        "see <script>alert(1)</script> in the log",
        "trailing spaces   \n\tindented line  ",
    ]

    for text in texts:
        resp = client.post("/api/messages", json={"senderId": alice["id"], "chatId": chat_id, "content": text})
        assert resp.status_code == 201, resp.text
        assert resp.json()["content"] == text

    history = client.get(f"/api/messages/{chat_id}").json()
    assert [m["content"] for m in history] == texts


def test_message_content_rejects_control_characters(client) -> None:
    alice = _register(client, "alice")

    for text in ("nul\x00byte", "bell\x07", "   "):
        resp = client.post("/api/messages", json={"senderId": alice["id"], "chatId": "1_2", "content": text})
        assert resp.status_code == 422


def test_direct_message_creates_conversation(client) -> None:
    alice, bob = _register(client, "alice"), _register(client, "bob")

    client.post("/api/messages", json={"senderId": alice["id"], "chatId": f"{alice['id']}_{bob['id']}", "content": "hi"})
    client.post("/api/messages", json={"senderId": bob["id"], "chatId": f"{bob['id']}_{alice['id']}", "content": "yo"})

    conversations = client.get(f"/api/users/{alice['id']}/conversations").json()
    assert len(conversations) == 1
    assert conversations[0]["otherUser"]["username"] == "bob"

    bobs = client.get(f"/api/users/{bob['id']}/conversations").json()
    assert bobs[0]["otherUser"]["username"] == "alice"


def test_group_lifecycle(client) -> None:
    owner, guest = _register(client, "owner"), _register(client, "guest")

    group = client.post("/api/groups", json={"name": "Hikers", "creatorId": owner["id"]}).json()
    detail = client.get(f"/api/groups/{group['id']}").json()
    assert [(m["userId"], m["isAdmin"]) for m in detail["members"]] == [(owner["id"], True)]

    added = client.post(f"/api/groups/{group['id']}/members", json={"userId": guest["id"]})
    assert added.status_code == 201
    member = added.json()
    assert member["canWrite"] is True and member["isAdmin"] is False

    again = client.post(f"/api/groups/{group['id']}/members", json={"userId": guest["id"]})
    assert again.status_code == 400

    updated = client.patch(f"/api/groups/members/{member['id']}", json={"canWrite": False})
    assert updated.json()["canWrite"] is False

    assert [g["name"] for g in client.get(f"/api/users/{guest['id']}/groups").json()] == ["Hikers"]
    assert client.get("/api/groups/999").status_code == 404
    assert client.post("/api/groups/999/members", json={"userId": guest["id"]}).status_code == 404
    assert client.patch("/api/groups/members/999", json={"isAdmin": True}).status_code == 404


def test_status_endpoints(client) -> None:
    owner, viewer = _register(client, "owner"), _register(client, "viewer")

    created = client.post("/api/statuses", json={"userId": owner["id"], "content": "sunset.png", "caption": "Nice"})
    assert created.status_code == 201
    status = created.json()
    assert status["expiresAt"] is not None

    assert [s["id"] for s in client.get("/api/statuses").json()] == [status["id"]]
    assert [s["id"] for s in client.get(f"/api/users/{owner['id']}/statuses").json()] == [status["id"]]

    # Repeat views are each recorded
    for _ in range(2):
        resp = client.post(f"/api/statuses/{status['id']}/views", json={"viewerId": viewer["id"]})
        assert resp.status_code == 201
    views = client.get(f"/api/statuses/{status['id']}/views").json()
    assert [v["viewerId"] for v in views] == [viewer["id"], viewer["id"]]

    assert client.post("/api/statuses/999/views", json={"viewerId": viewer["id"]}).status_code == 404


def test_expired_status_is_not_listed(client, app, session_factory) -> None:
    owner = _register(client, "owner")
    with session_factory() as db:
        st = statuses_crud.create_status(db, owner["id"], "old.png")
        st.expires_at = st.created_at.replace(year=st.created_at.year - 1)
        db.commit()

    assert client.get("/api/statuses").json() == []
    assert app.state.hub.scheduler.retire_expired_statuses() == 1


def test_failed_write_is_reported_and_not_routed(client, app, monkeypatch) -> None:
    alice = _register(client, "alice")
    routed = []

    async def record(message):
        routed.append(message)

    def broken_commit(*args, **kwargs):
        raise RuntimeError("write failed")

    monkeypatch.setattr(app.state.hub.router, "route_message", record)
    monkeypatch.setattr("chatline.crud.messages.create_message", broken_commit)

    resp = client.post("/api/messages", json={"senderId": alice["id"], "chatId": "1_2", "content": "lost"})

    assert resp.status_code == 500
    assert routed == []


def test_delivery_failure_does_not_fail_the_write(client, app, session_factory, monkeypatch) -> None:
    alice = _register(client, "alice")

    async def explode(*args, **kwargs):
        raise RuntimeError("no members for you")

    monkeypatch.setattr(app.state.hub.router, "deliver_to_group", explode)
    group = client.post("/api/groups", json={"name": "Quiet", "creatorId": alice["id"]}).json()

    resp = client.post(
        "/api/messages",
        json={"senderId": alice["id"], "chatId": f"group_{group['id']}", "content": "still saved"},
    )

    assert resp.status_code == 201
    with session_factory() as db:
        assert db.get(Message, resp.json()["id"]).content == "still saved"
