from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from chatline.api.deps import get_hub
from chatline.crud import groups as groups_crud
from chatline.crud import users as users_crud
from chatline.db.session import get_db
from chatline.realtime.hub import RealtimeHub
from chatline.schemas.group import (
    GroupCreate,
    GroupDetailOut,
    GroupOut,
    MemberAdd,
    MemberOut,
    MemberUpdate,
)

router = APIRouter(prefix='/api/groups', tags=['groups'])


@router.post('', response_model=GroupOut, status_code=status.HTTP_201_CREATED)
def create_group(req: GroupCreate, db: Session = Depends(get_db)):
    if not users_crud.get_user(db, req.creator_id):
        raise HTTPException(status_code=404, detail='User not found')

    try:
        return groups_crud.create_group(
            db,
            name=req.name,
            creator_id=req.creator_id,
            description=req.description,
            profile_picture=req.profile_picture,
        )
    except Exception:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Error creating group',
        )


@router.get('/{group_id}', response_model=GroupDetailOut)
def get_group(group_id: int, db: Session = Depends(get_db)):
    group = groups_crud.get_group(db, group_id)
    if not group:
        raise HTTPException(status_code=404, detail='Group not found')

    detail = GroupDetailOut.model_validate(group)
    detail.members = [MemberOut.model_validate(m) for m in groups_crud.get_group_members(db, group_id)]
    return detail


@router.post('/{group_id}/members', response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def add_member(
    group_id: int,
    req: MemberAdd,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    if not groups_crud.get_group(db, group_id):
        raise HTTPException(status_code=404, detail='Group not found')
    if not users_crud.get_user(db, req.user_id):
        raise HTTPException(status_code=404, detail='User not found')
    if groups_crud.get_group_member(db, group_id, req.user_id):
        raise HTTPException(status_code=400, detail='User is already a member of this group')

    try:
        member = groups_crud.add_group_member(
            db,
            group_id=group_id,
            user_id=req.user_id,
            is_admin=req.is_admin,
            can_write=req.can_write,
        )
    except Exception:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Error adding member',
        )

    out = MemberOut.model_validate(member)
    # The new member is already in the group, so it receives the event too
    background_tasks.add_task(hub.router.notify_member_added, out)
    return out


@router.patch('/members/{member_id}', response_model=MemberOut)
def update_member(
    member_id: int,
    req: MemberUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    try:
        member = groups_crud.update_group_member(
            db,
            member_id,
            is_admin=req.is_admin,
            can_write=req.can_write,
        )
    except Exception:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Error updating member',
        )

    if not member:
        raise HTTPException(status_code=404, detail='Member not found')

    out = MemberOut.model_validate(member)
    background_tasks.add_task(hub.router.notify_member_updated, out)
    return out
