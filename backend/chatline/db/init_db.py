# backend/chatline/db/init_db.py
from sqlalchemy.engine import Engine

from chatline.db.base import Base

# Models must be imported so the tables are registered on Base.metadata
from chatline import models  # noqa: F401


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)
