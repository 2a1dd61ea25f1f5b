# backend/chatline/models/message.py
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from chatline.core.clock import utcnow
from chatline.db.base import Base


class Message(Base):
    __tablename__ = "messages"

    id: Mapped[int] = mapped_column(primary_key=True)

    sender_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    # Routing scope, see chatline.core.chat_keys. Fixed at creation.
    chat_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(String(32), default="text", nullable=False)

    timestamp: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True, nullable=False)

    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
