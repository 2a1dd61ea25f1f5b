# backend/chatline/crud/conversations.py
from __future__ import annotations

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from chatline.core.clock import utcnow
from chatline.models.conversation import Conversation


def get_conversation(db: Session, user_a: int, user_b: int) -> Conversation | None:
    """Find the conversation of a participant pair, in either stored order."""
    stmt = select(Conversation).where(
        or_(
            and_(Conversation.user1_id == user_a, Conversation.user2_id == user_b),
            and_(Conversation.user1_id == user_b, Conversation.user2_id == user_a),
        )
    ).order_by(Conversation.id).limit(1)
    return db.execute(stmt).scalar_one_or_none()


def get_or_create_conversation(db: Session, user_a: int, user_b: int) -> tuple[Conversation, bool]:
    """Return ``(conversation, created)``."""
    conv = get_conversation(db, user_a, user_b)
    if conv:
        return conv, False

    conv = Conversation(user1_id=user_a, user2_id=user_b)
    db.add(conv)
    db.commit()
    db.refresh(conv)
    return conv, True


def touch_conversation(db: Session, conversation_id: int) -> Conversation | None:
    conv = db.get(Conversation, conversation_id)
    if not conv:
        return None
    conv.last_message_at = utcnow()
    db.add(conv)
    db.commit()
    db.refresh(conv)
    return conv


def list_conversations_for_user(db: Session, user_id: int) -> list[Conversation]:
    stmt = (
        select(Conversation)
        .where(or_(Conversation.user1_id == user_id, Conversation.user2_id == user_id))
        .order_by(Conversation.last_message_at.desc(), Conversation.id.desc())
    )
    return list(db.execute(stmt).scalars())
