"""Session-backed lookups the delivery router needs.

Both helpers open their own short-lived session: they run after the
request that triggered them has already committed and closed its session.
"""

from __future__ import annotations

from typing import List

from sqlalchemy.orm import Session, sessionmaker

from chatline.crud import conversations as conversations_crud
from chatline.crud import groups as groups_crud


class GroupMembershipResolver:
    """Current member ids of a group. Never cached."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def members_of(self, group_id: int) -> List[int]:
        with self._session_factory() as db:
            if groups_crud.get_group(db, group_id) is None:
                return []
            return groups_crud.get_group_member_ids(db, group_id)


class ConversationTracker:
    """Keeps the participant-pair conversation list in step with direct messages."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def record_activity(self, user_a: int, user_b: int) -> int:
        """Create the pair's conversation or bump its last activity; returns its id."""
        with self._session_factory() as db:
            try:
                conv, created = conversations_crud.get_or_create_conversation(db, user_a, user_b)
                if not created:
                    conversations_crud.touch_conversation(db, conv.id)
                return conv.id
            except Exception:
                db.rollback()
                raise
