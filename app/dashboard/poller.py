"""
Dashboard poller - fetches readings from the API on a fixed interval

Polls fire on schedule whether or not the previous one has finished;
DashboardState decides which result wins.
"""

import asyncio
import logging

import httpx

from app.dashboard.state import FETCH_ERROR_MESSAGE, DashboardState
from app.schemas.reading import ReadingOut

logger = logging.getLogger(__name__)

SENSOR_DATA_PATH = "/api/sensor-data"


class DashboardPoller:
    """Keeps a DashboardState fed from GET /api/sensor-data."""

    def __init__(
        self,
        state: DashboardState,
        base_url: str,
        interval: float = 10.0,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.state = state
        self.interval = interval
        # One client for every poll so connections are reused
        self.http_client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self.running = False
        self._tasks: set[asyncio.Task] = set()

    async def fetch(self) -> list[ReadingOut]:
        """
        Fetch the server-default window.

        Raises:
            httpx.HTTPError: network failure or non-2xx response
            ValueError: body is not the expected JSON
        """
        response = await self.http_client.get(SENSOR_DATA_PATH)
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict) or not payload.get("success"):
            raise ValueError("Unexpected response body")
        return [ReadingOut.model_validate(item) for item in payload.get("data", [])]

    async def refresh(self) -> bool:
        """
        Run one poll and apply its result.

        Any failure is reported as the single dashboard error state.

        Returns:
            True if the result was applied (not stale)
        """
        seq = self.state.begin_poll()
        try:
            readings = await self.fetch()
        except (httpx.HTTPError, ValueError, TypeError) as e:
            logger.warning(f"⚠️ Poll #{seq} failed: {e}")
            return self.state.apply_failure(seq, FETCH_ERROR_MESSAGE)

        applied = self.state.apply_success(seq, readings)
        if applied:
            logger.debug(f"Poll #{seq}: {len(readings)} readings")
        return applied

    def trigger(self) -> asyncio.Task:
        """Start a poll without waiting for it."""
        task = asyncio.create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def start(self):
        """Poll every `interval` seconds until stopped."""
        self.running = True
        logger.info(f"📡 Polling {self.http_client.base_url} every {self.interval}s")

        while self.running:
            self.trigger()
            await asyncio.sleep(self.interval)

    def stop(self):
        self.running = False

    async def close(self):
        """Stop polling, drop in-flight polls and close the HTTP client."""
        self.stop()
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.http_client.aclose()
