"""
Readings Service - store readings and run windowed queries
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StorageError
from app.core.timeframes import TimeFrame, compute_cutoff, ensure_utc, resolve_time_frame, utcnow
from app.models.reading import Reading

logger = logging.getLogger(__name__)


@dataclass
class WindowResult:
    """Readings in a trailing window, newest first."""

    readings: list[Reading]
    time_frame: TimeFrame
    cutoff: datetime

    @property
    def count(self) -> int:
        return len(self.readings)


async def store_reading(
    session: AsyncSession,
    values: dict[str, float],
    now: datetime | None = None,
) -> Reading:
    """
    Persist one validated reading.

    timestamp and created_at are always assigned here; `now` exists so
    tests can place readings in the past.
    """
    stamp = ensure_utc(now) if now is not None else utcnow()
    reading = Reading(**values, timestamp=stamp, created_at=stamp)

    try:
        session.add(reading)
        await session.commit()
        await session.refresh(reading)
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Error storing sensor data")
        raise StorageError("Failed to store sensor data") from e

    logger.info(
        f"💾 Stored reading {reading.id}: T={reading.temperature}C "
        f"H={reading.humidity}% P={reading.pressure}hPa G={reading.gas_resistance}kOhm"
    )
    return reading


async def query_window(
    session: AsyncSession,
    time_frame: str | TimeFrame | None,
    limit: int,
    now: datetime | None = None,
) -> WindowResult:
    """Readings with timestamp >= now - offset(time_frame), newest first, at most `limit`."""
    resolved = resolve_time_frame(time_frame)
    cutoff = compute_cutoff(resolved, now)

    try:
        result = await session.execute(
            select(Reading)
            .where(Reading.timestamp >= cutoff)
            .order_by(desc(Reading.timestamp), desc(Reading.id))
            .limit(limit)
        )
        readings = list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.exception("Error fetching sensor data")
        raise StorageError("Failed to fetch sensor data") from e

    return WindowResult(readings=readings, time_frame=resolved, cutoff=cutoff)


async def purge_expired_readings(
    session: AsyncSession,
    retention_days: int | None,
    now: datetime | None = None,
) -> int:
    """
    Delete readings older than the retention period.

    Returns:
        Number of deleted readings (0 when retention is disabled)
    """
    if retention_days is None or retention_days <= 0:
        return 0

    now = ensure_utc(now) if now is not None else utcnow()
    threshold = now - timedelta(days=retention_days)

    try:
        result = await session.execute(
            delete(Reading).where(Reading.timestamp < threshold)
        )
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Error purging expired readings")
        raise StorageError("Failed to purge expired readings") from e

    deleted = result.rowcount or 0
    if deleted:
        logger.info(f"🧹 Purged {deleted} readings older than {retention_days} days")
    return deleted
