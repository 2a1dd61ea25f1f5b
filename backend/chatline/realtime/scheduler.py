"""Periodic retirement of expired messages and statuses.

Two independent loops, each sleeping its own interval before every sweep:

- messages older than the retention window are soft-deleted (daily)
- statuses whose ``expires_at`` has passed are hard-deleted (hourly)

A sweep scans every row. A failure on one row is logged and the sweep moves
on to the next.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from sqlalchemy.orm import Session, sessionmaker
from starlette.concurrency import run_in_threadpool

from chatline.core.clock import utcnow
from chatline.crud import messages as messages_crud
from chatline.crud import statuses as statuses_crud

LOGGER = logging.getLogger(__name__)

DEFAULT_MESSAGE_RETENTION = timedelta(days=10)
DEFAULT_MESSAGE_INTERVAL = 24 * 60 * 60.0
DEFAULT_STATUS_INTERVAL = 60 * 60.0


class ExpiryScheduler:
    def __init__(
        self,
        session_factory: sessionmaker[Session],
        message_retention: timedelta = DEFAULT_MESSAGE_RETENTION,
        message_interval: float = DEFAULT_MESSAGE_INTERVAL,
        status_interval: float = DEFAULT_STATUS_INTERVAL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._message_retention = message_retention
        self._message_interval = message_interval
        self._status_interval = status_interval
        self._clock = clock
        self._tasks: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def retire_expired_messages(self, now: Optional[datetime] = None) -> int:
        """Soft-delete live messages older than the retention window."""
        cutoff = (now or self._clock()) - self._message_retention
        retired = 0
        with self._session_factory() as db:
            expired = [
                msg.id
                for msg in messages_crud.list_all_messages(db)
                if not msg.is_deleted and msg.timestamp < cutoff
            ]
            for message_id in expired:
                try:
                    if messages_crud.soft_delete_message(db, message_id):
                        retired += 1
                except Exception:
                    db.rollback()
                    LOGGER.exception("Failed to retire message %s", message_id)
        if retired:
            LOGGER.info("Retired %s messages older than %s", retired, cutoff.isoformat())
        return retired

    def retire_expired_statuses(self, now: Optional[datetime] = None) -> int:
        """Delete statuses whose expiry lies strictly in the past."""
        now = now or self._clock()
        retired = 0
        with self._session_factory() as db:
            expired = [
                st.id
                for st in statuses_crud.list_all_statuses(db)
                if st.expires_at is not None and st.expires_at < now
            ]
            for status_id in expired:
                try:
                    if statuses_crud.delete_status(db, status_id):
                        retired += 1
                except Exception:
                    db.rollback()
                    LOGGER.exception("Failed to retire status %s", status_id)
        if retired:
            LOGGER.info("Retired %s expired statuses", retired)
        return retired

    def start(self) -> None:
        """Spawn both loops on the running event loop. Idempotent."""
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(
                self._run_every(self._message_interval, self.retire_expired_messages),
                name="expire-messages",
            ),
            asyncio.create_task(
                self._run_every(self._status_interval, self.retire_expired_statuses),
                name="expire-statuses",
            ),
        ]
        LOGGER.info(
            "Expiry scheduler started (messages every %ss, statuses every %ss)",
            self._message_interval,
            self._status_interval,
        )

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        if tasks:
            LOGGER.info("Expiry scheduler stopped")

    async def _run_every(self, interval: float, job: Callable[[], int]) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await run_in_threadpool(job)
            except Exception:
                LOGGER.exception("Expiry sweep %s failed", job.__name__)
