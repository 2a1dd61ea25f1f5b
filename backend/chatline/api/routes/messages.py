from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from chatline.api.deps import get_hub, get_settings
from chatline.core.config import Settings
from chatline.crud import messages as messages_crud
from chatline.crud import users as users_crud
from chatline.db.session import get_db
from chatline.realtime.hub import RealtimeHub
from chatline.schemas.common import StatusResponse
from chatline.schemas.message import MessageCreate, MessageOut, MessageReadUpdate

router = APIRouter(prefix='/api/messages', tags=['messages'])


@router.get('/{chat_id}', response_model=List[MessageOut])
def list_messages(
    chat_id: str,
    limit: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
):
    """Latest messages of a chat, oldest first."""
    limit = min(limit or config.default_history_limit, config.max_history_limit)
    return messages_crud.get_messages_by_chat(db, chat_id, limit)


@router.post('', response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def send_message(
    req: MessageCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
) -> MessageOut:
    if not users_crud.get_user(db, req.sender_id):
        raise HTTPException(status_code=404, detail='Sender not found')

    try:
        msg = messages_crud.create_message(
            db,
            sender_id=req.sender_id,
            chat_id=req.chat_id,
            content=req.content,
            content_type=req.content_type,
        )
    except Exception:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Error sending message',
        )

    out = MessageOut.model_validate(msg)
    # Runs after the response has been sent
    background_tasks.add_task(hub.router.route_message, out)
    return out


@router.patch('/{message_id}/read', response_model=MessageOut)
def mark_as_read(
    message_id: int,
    payload: Optional[MessageReadUpdate] = None,
    db: Session = Depends(get_db),
):
    is_read = payload.is_read if payload is not None else True
    msg = messages_crud.mark_message_read(db, message_id, is_read)
    if not msg:
        raise HTTPException(status_code=404, detail='Message not found')
    return msg


@router.delete('/{message_id}', response_model=StatusResponse)
def delete_message(message_id: int, db: Session = Depends(get_db)):
    """Soft delete: the row stays, history no longer returns it."""
    if not messages_crud.soft_delete_message(db, message_id):
        raise HTTPException(status_code=404, detail='Message not found')
    return StatusResponse(status='ok')
