from __future__ import annotations

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from chatline.api.deps import get_hub
from chatline.crud import statuses as statuses_crud
from chatline.crud import users as users_crud
from chatline.db.session import get_db
from chatline.realtime.hub import RealtimeHub
from chatline.schemas.status import StatusCreate, StatusOut, StatusViewCreate, StatusViewOut

router = APIRouter(prefix='/api/statuses', tags=['statuses'])


@router.post('', response_model=StatusOut, status_code=status.HTTP_201_CREATED)
def create_status(
    req: StatusCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    if not users_crud.get_user(db, req.user_id):
        raise HTTPException(status_code=404, detail='User not found')

    try:
        st = statuses_crud.create_status(
            db,
            user_id=req.user_id,
            content=req.content,
            content_type=req.content_type,
            caption=req.caption,
        )
    except Exception:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Error creating status',
        )

    out = StatusOut.model_validate(st)
    # Statuses are visible to everyone online
    background_tasks.add_task(hub.router.notify_new_status, out)
    return out


@router.get('', response_model=List[StatusOut])
def list_active_statuses(db: Session = Depends(get_db)):
    return statuses_crud.list_active_statuses(db)


@router.post('/{status_id}/views', response_model=StatusViewOut, status_code=status.HTTP_201_CREATED)
def view_status(
    status_id: int,
    req: StatusViewCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    st = statuses_crud.get_status(db, status_id)
    if not st:
        raise HTTPException(status_code=404, detail='Status not found')

    try:
        view = statuses_crud.add_status_view(db, status_id=status_id, viewer_id=req.viewer_id)
    except Exception:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Error recording status view',
        )

    out = StatusViewOut.model_validate(view)
    background_tasks.add_task(hub.router.notify_status_viewed, st.user_id, out)
    return out


@router.get('/{status_id}/views', response_model=List[StatusViewOut])
def list_status_views(status_id: int, db: Session = Depends(get_db)):
    return statuses_crud.get_status_views(db, status_id)
