"""
Dashboard state - latest poll results, owned by the poller, read by the views
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from app.core.timeframes import utcnow
from app.schemas.reading import ReadingOut

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Failed to fetch sensor data"


@dataclass
class DashboardState:
    """
    What the dashboard currently shows.

    Every poll takes a sequence number from begin_poll(). A result is only
    applied if its poll was initiated after the one that produced the
    current state, so a slow poll resolving late can't overwrite newer data.
    """

    readings: list[ReadingOut] = field(default_factory=list)
    error: str | None = None
    loading: bool = True
    last_polled_at: datetime | None = None
    initiated_seq: int = 0
    applied_seq: int = 0

    @property
    def latest(self) -> ReadingOut | None:
        """Newest reading (the API returns newest first)."""
        return self.readings[0] if self.readings else None

    def begin_poll(self) -> int:
        self.initiated_seq += 1
        return self.initiated_seq

    def _accept(self, seq: int) -> bool:
        if seq <= self.applied_seq:
            logger.debug(f"Dropping stale poll #{seq} (showing #{self.applied_seq})")
            return False
        self.applied_seq = seq
        self.loading = False
        return True

    def apply_success(self, seq: int, readings: list[ReadingOut], now: datetime | None = None) -> bool:
        """Replace readings with a poll result. Returns False if stale."""
        if not self._accept(seq):
            return False
        self.readings = readings
        self.error = None
        self.last_polled_at = now or utcnow()
        return True

    def apply_failure(self, seq: int, message: str = FETCH_ERROR_MESSAGE) -> bool:
        """Switch to the error state. Returns False if stale."""
        if not self._accept(seq):
            return False
        self.error = message
        return True
