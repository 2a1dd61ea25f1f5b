from __future__ import annotations

from datetime import datetime

from chatline.schemas.auth import UserOut
from chatline.schemas.common import CamelModel


class ConversationOut(CamelModel):
    id: int
    user1_id: int
    user2_id: int
    last_message_at: datetime


class ConversationWithUserOut(ConversationOut):
    other_user: UserOut
