# backend/chatline/crud/messages.py
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from chatline.models.message import Message


def create_message(
    db: Session,
    sender_id: int,
    chat_id: str,
    content: str,
    content_type: str = "text",
) -> Message:
    msg = Message(
        sender_id=sender_id,
        chat_id=chat_id,
        content=content,
        content_type=content_type,
    )

    db.add(msg)
    db.commit()
    db.refresh(msg)
    return msg


def get_message(db: Session, message_id: int) -> Message | None:
    return db.get(Message, message_id)


def get_messages_by_chat(db: Session, chat_id: str, limit: int = 50) -> list[Message]:
    """Return the newest ``limit`` live messages of a chat, oldest first."""
    stmt = (
        select(Message)
        .where(Message.chat_id == chat_id, Message.is_deleted.is_(False))
        .order_by(Message.timestamp.desc(), Message.id.desc())
        .limit(limit)
    )
    newest_first = list(db.execute(stmt).scalars())
    newest_first.reverse()
    return newest_first


def mark_message_read(db: Session, message_id: int, is_read: bool = True) -> Message | None:
    msg = db.get(Message, message_id)
    if not msg:
        return None
    msg.is_read = is_read
    db.add(msg)
    db.commit()
    db.refresh(msg)
    return msg


def soft_delete_message(db: Session, message_id: int) -> bool:
    msg = db.get(Message, message_id)
    if not msg:
        return False
    msg.is_deleted = True
    db.add(msg)
    db.commit()
    return True


def list_all_messages(db: Session) -> list[Message]:
    return list(db.execute(select(Message).order_by(Message.id)).scalars())
