"""Per-application container for the realtime services."""

from __future__ import annotations

import logging
from datetime import timedelta

from sqlalchemy.orm import Session, sessionmaker

from chatline.core.config import Settings
from chatline.realtime.membership import ConversationTracker, GroupMembershipResolver
from chatline.realtime.registry import ConnectionRegistry
from chatline.realtime.router import DeliveryRouter
from chatline.realtime.scheduler import ExpiryScheduler

LOGGER = logging.getLogger(__name__)


class RealtimeHub:
    """Owns the connection registry, the delivery router and the expiry scheduler.

    Built once per application and stored on ``app.state``; ``start`` and
    ``stop`` run inside the application lifespan.
    """

    def __init__(self, session_factory: sessionmaker[Session], config: Settings) -> None:
        self.config = config
        self.registry = ConnectionRegistry()
        self.router = DeliveryRouter(
            self.registry,
            GroupMembershipResolver(session_factory),
            ConversationTracker(session_factory),
        )
        self.scheduler = ExpiryScheduler(
            session_factory,
            message_retention=timedelta(days=config.message_retention_days),
            message_interval=config.message_sweep_interval_seconds,
            status_interval=config.status_sweep_interval_seconds,
        )

    async def start(self) -> None:
        if self.config.scheduler_enabled:
            self.scheduler.start()
        else:
            LOGGER.info("Expiry scheduler disabled by configuration")

    async def stop(self) -> None:
        await self.scheduler.stop()
        self.registry.clear()
