"""Live push connections per user.

The registry only holds references; the transport owns each connection and
reports its closure through ``unregister``.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, FrozenSet, List, Set

from chatline.realtime.connection import PushConnection

LOGGER = logging.getLogger(__name__)


class ConnectionRegistry:
    """Maps user ids to their open push connections (multi-device).

    All state is guarded by one lock, so register/unregister calls from
    worker threads and from the event loop are atomic with respect to each
    other. Nothing here awaits.
    """

    def __init__(self) -> None:
        self._by_user: Dict[int, Set[PushConnection]] = {}
        self._owner: Dict[PushConnection, int] = {}
        self._lock = threading.Lock()

    def register(self, user_id: int, connection: PushConnection) -> None:
        """Tag ``connection`` with ``user_id``.

        A connection belongs to at most one user; registering it again under
        a different id moves it.
        """
        with self._lock:
            previous = self._owner.get(connection)
            if previous is not None and previous != user_id:
                self._discard(previous, connection)
            self._by_user.setdefault(user_id, set()).add(connection)
            self._owner[connection] = user_id

    def unregister(self, connection: PushConnection) -> int | None:
        """Drop ``connection`` wherever it is registered.

        Returns the user id it belonged to, or None for an unknown connection.
        """
        with self._lock:
            user_id = self._owner.pop(connection, None)
            if user_id is not None:
                self._discard(user_id, connection)
            return user_id

    def _discard(self, user_id: int, connection: PushConnection) -> None:
        bucket = self._by_user.get(user_id)
        if bucket is None:
            return
        bucket.discard(connection)
        if not bucket:
            del self._by_user[user_id]

    def connections_for(self, user_id: int) -> FrozenSet[PushConnection]:
        with self._lock:
            return frozenset(self._by_user.get(user_id, ()))

    def user_for(self, connection: PushConnection) -> int | None:
        with self._lock:
            return self._owner.get(connection)

    def user_ids(self) -> List[int]:
        with self._lock:
            return list(self._by_user)

    def is_online(self, user_id: int) -> bool:
        with self._lock:
            return user_id in self._by_user

    def connection_count(self) -> int:
        with self._lock:
            return len(self._owner)

    def clear(self) -> None:
        with self._lock:
            dropped = len(self._owner)
            self._by_user.clear()
            self._owner.clear()
        if dropped:
            LOGGER.info("Connection registry cleared (%s connections)", dropped)
