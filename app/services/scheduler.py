"""
Scheduler Service - periodic retention purge
Runs as a background task alongside the API
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.services.readings import purge_expired_readings

logger = logging.getLogger(__name__)


class RetentionScheduler:
    """Deletes readings older than `retention_days` every `interval` seconds."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        retention_days: int,
        interval: float = 3600,
    ):
        self.session_maker = session_maker
        self.retention_days = retention_days
        self.interval = interval
        self.running = False

    async def start(self):
        """Start the purge loop."""
        self.running = True
        logger.info(f"🧹 Retention scheduler started (keep {self.retention_days} days)")

        while self.running:
            try:
                await self.run_once()
            except Exception as e:
                logger.error(f"Retention purge failed: {e}")

            await asyncio.sleep(self.interval)

    def stop(self):
        """Stop the scheduler."""
        self.running = False
        logger.info("🧹 Retention scheduler stopped")

    async def run_once(self) -> int:
        """Run a single purge pass."""
        async with self.session_maker() as session:
            return await purge_expired_readings(session, self.retention_days)
