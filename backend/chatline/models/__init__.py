# backend/chatline/models/__init__.py
from .user import User
from .message import Message
from .chat_group import ChatGroup
from .group_member import GroupMember
from .status import Status
from .status_view import StatusView
from .conversation import Conversation

__all__ = [
    "User",
    "Message",
    "ChatGroup",
    "GroupMember",
    "Status",
    "StatusView",
    "Conversation",
]
