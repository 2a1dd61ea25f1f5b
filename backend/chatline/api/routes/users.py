from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from chatline.crud import conversations as conversations_crud
from chatline.crud import groups as groups_crud
from chatline.crud import statuses as statuses_crud
from chatline.crud import users as users_crud
from chatline.db.session import get_db
from chatline.schemas.auth import UserOut, UserUpdate
from chatline.schemas.common import StatusResponse
from chatline.schemas.conversation import ConversationWithUserOut
from chatline.schemas.group import GroupOut
from chatline.schemas.status import StatusOut

router = APIRouter(prefix='/api/users', tags=['users'])


def _get_user_or_404(db: Session, user_id: int):
    u = users_crud.get_user(db, user_id)
    if not u:
        raise HTTPException(status_code=404, detail='User not found')
    return u


@router.get('/{user_id}', response_model=UserOut)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return _get_user_or_404(db, user_id)


@router.patch('/{user_id}', response_model=UserOut)
def update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db)):
    u = _get_user_or_404(db, user_id)
    changes = payload.model_dump(exclude_unset=True)

    if 'email' in changes:
        other = users_crud.get_by_email(db, changes['email'])
        if other and other.id != u.id:
            raise HTTPException(status_code=400, detail='Email already in use')
    if 'username' in changes:
        other = users_crud.get_by_username(db, changes['username'])
        if other and other.id != u.id:
            raise HTTPException(status_code=400, detail='Username already taken')

    try:
        return users_crud.update_user(db, u, changes)
    except Exception:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Error updating user',
        )


@router.delete('/{user_id}', response_model=StatusResponse)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    if not users_crud.delete_user(db, user_id):
        raise HTTPException(status_code=404, detail='User not found')
    return StatusResponse(status='ok')


@router.get('/{user_id}/groups', response_model=List[GroupOut])
def list_user_groups(user_id: int, db: Session = Depends(get_db)):
    return groups_crud.list_groups_for_user(db, user_id)


@router.get('/{user_id}/statuses', response_model=List[StatusOut])
def list_user_statuses(user_id: int, db: Session = Depends(get_db)):
    """Unexpired statuses of one user, newest first."""
    return statuses_crud.list_statuses_by_user(db, user_id)


@router.get('/{user_id}/conversations', response_model=List[ConversationWithUserOut])
def list_user_conversations(user_id: int, db: Session = Depends(get_db)):
    """Direct conversations, most recently active first, with the other participant embedded."""
    conversations = conversations_crud.list_conversations_for_user(db, user_id)

    other_ids = [c.user2_id if c.user1_id == user_id else c.user1_id for c in conversations]
    others = users_crud.get_users(db, other_ids)

    items = []
    for conv, other_id in zip(conversations, other_ids):
        other = others.get(other_id)
        # Conversations with deleted accounts are hidden
        if other is None:
            continue
        items.append(ConversationWithUserOut(
            id=conv.id,
            user1_id=conv.user1_id,
            user2_id=conv.user2_id,
            last_message_at=conv.last_message_at,
            other_user=UserOut.model_validate(other),
        ))
    return items
