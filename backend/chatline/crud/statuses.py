# backend/chatline/crud/statuses.py
from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from chatline.core.clock import utcnow
from chatline.models.status import Status
from chatline.models.status_view import StatusView

STATUS_TTL = timedelta(days=3)


def create_status(
    db: Session,
    user_id: int,
    content: str,
    content_type: str = "image",
    caption: str | None = None,
    now: datetime | None = None,
) -> Status:
    created_at = now or utcnow()
    st = Status(
        user_id=user_id,
        content=content,
        content_type=content_type,
        caption=caption,
        created_at=created_at,
        expires_at=created_at + STATUS_TTL,
    )

    db.add(st)
    db.commit()
    db.refresh(st)
    return st


def get_status(db: Session, status_id: int) -> Status | None:
    return db.get(Status, status_id)


def _active_clause(now: datetime):
    return or_(Status.expires_at.is_(None), Status.expires_at > now)


def list_active_statuses(db: Session, now: datetime | None = None) -> list[Status]:
    stmt = (
        select(Status)
        .where(_active_clause(now or utcnow()))
        .order_by(Status.created_at.desc(), Status.id.desc())
    )
    return list(db.execute(stmt).scalars())


def list_statuses_by_user(db: Session, user_id: int, now: datetime | None = None) -> list[Status]:
    stmt = (
        select(Status)
        .where(Status.user_id == user_id, _active_clause(now or utcnow()))
        .order_by(Status.created_at.desc(), Status.id.desc())
    )
    return list(db.execute(stmt).scalars())


def list_all_statuses(db: Session) -> list[Status]:
    return list(db.execute(select(Status).order_by(Status.id)).scalars())


def delete_status(db: Session, status_id: int) -> bool:
    st = db.get(Status, status_id)
    if not st:
        return False
    db.delete(st)
    db.commit()
    return True


def add_status_view(db: Session, status_id: int, viewer_id: int) -> StatusView:
    # Repeat views are recorded again: the view list is a view count, not a viewer set.
    view = StatusView(status_id=status_id, viewer_id=viewer_id)

    db.add(view)
    db.commit()
    db.refresh(view)
    return view


def get_status_views(db: Session, status_id: int) -> list[StatusView]:
    stmt = select(StatusView).where(StatusView.status_id == status_id).order_by(StatusView.id)
    return list(db.execute(stmt).scalars())
