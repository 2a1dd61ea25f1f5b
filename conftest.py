from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from chatline.core.config import Settings
from chatline.crud.users import create_user
from chatline.db.init_db import init_db
from chatline.db.session import build_session_factory
from chatline.main import create_app
from chatline.realtime.membership import ConversationTracker, GroupMembershipResolver
from chatline.realtime.registry import ConnectionRegistry
from chatline.realtime.router import DeliveryRouter


class FakeConnection:
    """In-memory PushConnection that records decoded payloads."""

    def __init__(self, name: str = "conn", is_open: bool = True, fail: bool = False) -> None:
        self.name = name
        self.is_open = is_open
        self.fail = fail
        self.sent: list[dict] = []

    async def send(self, payload: str) -> None:
        if self.fail:
            raise ConnectionError(f"{self.name} is broken")
        self.sent.append(json.loads(payload))

    def __repr__(self) -> str:
        return f"FakeConnection({self.name})"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def make_user(session_factory):
    counter = {"n": 0}

    def _make(username: str | None = None) -> int:
        counter["n"] += 1
        name = username or f"user{counter['n']}"
        with session_factory() as db:
            return create_user(db, name, f"{name}@example.com", "correct-horse-1").id

    return _make


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def delivery_router(registry, session_factory):
    return DeliveryRouter(
        registry,
        GroupMembershipResolver(session_factory),
        ConversationTracker(session_factory),
    )


@pytest.fixture
def app(engine):
    config = Settings(database_url="sqlite://", scheduler_enabled=False, log_level="WARNING")
    return create_app(config, engine=engine)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
