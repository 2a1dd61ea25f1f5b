"""Chat key encoding.

A chat key names the scope a message belongs to. Two forms exist:

- group chats: ``group_<group_id>``
- direct chats: ``<user_a>_<user_b>``

Direct keys keep the participant order the caller supplied. ``"4_9"`` and
``"9_4"`` are different keys, so every call site that builds a direct key
must agree on the order or one conversation ends up split across two keys.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple, Union

GROUP_PREFIX = "group_"
SEPARATOR = "_"

_DECIMAL = re.compile(r"[0-9]+")


class MalformedChatKeyError(ValueError):
    """Raised when a chat key cannot be decoded into a routing target."""


@dataclass(frozen=True)
class GroupChat:
    group_id: int


@dataclass(frozen=True)
class DirectChat:
    participants: Tuple[int, int]


ChatTarget = Union[GroupChat, DirectChat]


def group_chat_key(group_id: int) -> str:
    if group_id < 0:
        raise ValueError(f"Group id must be non-negative: {group_id}")
    return f"{GROUP_PREFIX}{group_id}"


def direct_chat_key(user_a: int, user_b: int) -> str:
    """Return the direct key for ``user_a`` and ``user_b`` in that order."""

    if user_a < 0 or user_b < 0:
        raise ValueError(f"User ids must be non-negative: {user_a}, {user_b}")
    return f"{user_a}{SEPARATOR}{user_b}"


def _parse_decimal(raw: str, chat_key: str) -> int:
    if not _DECIMAL.fullmatch(raw):
        raise MalformedChatKeyError(f"Invalid chat key: {chat_key!r}")
    return int(raw)


def decode_chat_key(chat_key: str) -> ChatTarget:
    """Decode a chat key into a group or direct target.

    Raises MalformedChatKeyError when the key matches neither form.
    """

    if chat_key.startswith(GROUP_PREFIX):
        return GroupChat(_parse_decimal(chat_key[len(GROUP_PREFIX):], chat_key))

    parts = chat_key.split(SEPARATOR)
    if len(parts) != 2:
        raise MalformedChatKeyError(f"Invalid chat key: {chat_key!r}")
    return DirectChat(
        (_parse_decimal(parts[0], chat_key), _parse_decimal(parts[1], chat_key))
    )
