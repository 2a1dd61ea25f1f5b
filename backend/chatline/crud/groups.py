# backend/chatline/crud/groups.py
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from chatline.models.chat_group import ChatGroup
from chatline.models.group_member import GroupMember


def create_group(
    db: Session,
    name: str,
    creator_id: int,
    description: str | None = None,
    profile_picture: str | None = None,
) -> ChatGroup:
    """Create a group and enrol its creator as an admin in one transaction."""
    group = ChatGroup(
        name=name,
        creator_id=creator_id,
        description=description,
        profile_picture=profile_picture,
    )
    db.add(group)
    db.flush()  # Get group.id

    db.add(GroupMember(group_id=group.id, user_id=creator_id, is_admin=True, can_write=True))

    db.commit()
    db.refresh(group)
    return group


def get_group(db: Session, group_id: int) -> ChatGroup | None:
    return db.get(ChatGroup, group_id)


def list_groups_for_user(db: Session, user_id: int) -> list[ChatGroup]:
    stmt = (
        select(ChatGroup)
        .join(GroupMember, GroupMember.group_id == ChatGroup.id)
        .where(GroupMember.user_id == user_id)
        .order_by(ChatGroup.id)
    )
    return list(db.execute(stmt).scalars())


def get_group_member(db: Session, group_id: int, user_id: int) -> GroupMember | None:
    stmt = select(GroupMember).where(GroupMember.group_id == group_id, GroupMember.user_id == user_id)
    return db.execute(stmt).scalar_one_or_none()


def get_group_members(db: Session, group_id: int) -> list[GroupMember]:
    stmt = select(GroupMember).where(GroupMember.group_id == group_id).order_by(GroupMember.id)
    return list(db.execute(stmt).scalars())


def get_group_member_ids(db: Session, group_id: int) -> list[int]:
    stmt = select(GroupMember.user_id).where(GroupMember.group_id == group_id).order_by(GroupMember.id)
    return list(db.execute(stmt).scalars())


def add_group_member(
    db: Session,
    group_id: int,
    user_id: int,
    is_admin: bool = False,
    can_write: bool = True,
) -> GroupMember:
    member = GroupMember(group_id=group_id, user_id=user_id, is_admin=is_admin, can_write=can_write)

    db.add(member)
    db.commit()
    db.refresh(member)
    return member


def update_group_member(
    db: Session,
    member_id: int,
    is_admin: bool | None = None,
    can_write: bool | None = None,
) -> GroupMember | None:
    member = db.get(GroupMember, member_id)
    if not member:
        return None

    if is_admin is not None:
        member.is_admin = is_admin
    if can_write is not None:
        member.can_write = can_write

    db.add(member)
    db.commit()
    db.refresh(member)
    return member
