# backend/chatline/models/status.py
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chatline.core.clock import utcnow
from chatline.db.base import Base


class Status(Base):
    __tablename__ = "statuses"

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column(String(32), default="image", nullable=False)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    # Set once by crud.statuses.create_status; NULL never expires.
    expires_at: Mapped[datetime | None] = mapped_column(DateTime, index=True, nullable=True)

    views = relationship("StatusView", back_populates="status", cascade="all,delete-orphan")
