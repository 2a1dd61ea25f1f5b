# backend/chatline/models/status_view.py
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chatline.core.clock import utcnow
from chatline.db.base import Base


class StatusView(Base):
    __tablename__ = "status_views"

    id: Mapped[int] = mapped_column(primary_key=True)

    status_id: Mapped[int] = mapped_column(ForeignKey("statuses.id", ondelete="CASCADE"), index=True, nullable=False)
    viewer_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    viewed_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    status = relationship("Status", back_populates="views")
