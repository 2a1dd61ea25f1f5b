# backend/chatline/crud/users.py
from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from chatline.core.security import hash_password
from chatline.models.user import User

# Fields a PATCH /users/{id} may touch; the password goes through hash_password.
_UPDATABLE_FIELDS = {"username", "email", "profile_picture", "about"}


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(User.email == email)
    return db.execute(stmt).scalar_one_or_none()


def get_by_username(db: Session, username: str) -> User | None:
    stmt = select(User).where(User.username == username)
    return db.execute(stmt).scalar_one_or_none()


def get_users(db: Session, user_ids: list[int]) -> dict[int, User]:
    if not user_ids:
        return {}
    stmt = select(User).where(User.id.in_(user_ids))
    return {u.id: u for u in db.execute(stmt).scalars()}


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    profile_picture: str | None = None,
    about: str | None = None,
) -> User:
    u = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        profile_picture=profile_picture,
        about=about if about is not None else "Available",
    )

    db.add(u)
    db.commit()
    db.refresh(u)
    return u


def update_user(db: Session, user: User, changes: dict[str, Any]) -> User:
    for field, value in changes.items():
        if field == "password":
            user.password_hash = hash_password(value)
        elif field in _UPDATABLE_FIELDS:
            setattr(user, field, value)

    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def delete_user(db: Session, user_id: int) -> bool:
    u = db.get(User, user_id)
    if not u:
        return False
    db.delete(u)
    db.commit()
    return True
