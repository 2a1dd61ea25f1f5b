from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.engine import Engine

from chatline.api.routes.auth import router as auth_router
from chatline.api.routes.groups import router as groups_router
from chatline.api.routes.messages import router as messages_router
from chatline.api.routes.statuses import router as statuses_router
from chatline.api.routes.users import router as users_router
from chatline.api.routes.ws import router as ws_router
from chatline.core.config import Settings, settings
from chatline.core.logging import configure_logging
from chatline.db.init_db import init_db
from chatline.db.session import build_engine, build_session_factory
from chatline.realtime.hub import RealtimeHub


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Logging is set up when the server starts, not when this module is imported.
    configure_logging(app.state.settings)
    init_db(app.state.engine)
    await app.state.hub.start()
    try:
        yield
    finally:
        await app.state.hub.stop()


def create_app(config: Settings | None = None, engine: Engine | None = None) -> FastAPI:
    config = config or settings

    engine = engine or build_engine(config.database_url)
    session_factory = build_session_factory(engine)

    app = FastAPI(title="Chatline", version="0.1.0", lifespan=lifespan)
    app.state.settings = config
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.hub = RealtimeHub(session_factory, config)

    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(messages_router)
    app.include_router(groups_router)
    app.include_router(statuses_router)
    app.include_router(ws_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
