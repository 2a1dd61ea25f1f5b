# backend/chatline/api/routes/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from chatline.core.security import verify_password
from chatline.crud.users import create_user, get_by_email, get_by_username
from chatline.db.session import get_db
from chatline.schemas.auth import LoginIn, RegisterIn, UserOut

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    if get_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail="Email already in use")
    if get_by_username(db, payload.username):
        raise HTTPException(status_code=400, detail="Username already taken")

    try:
        return create_user(
            db,
            payload.username,
            payload.email,
            payload.password,
            profile_picture=payload.profile_picture,
            about=payload.about,
        )
    except Exception:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error creating user",
        )


@router.post("/login", response_model=UserOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    u = get_by_email(db, payload.email)
    if not u or not verify_password(payload.password, u.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return u
