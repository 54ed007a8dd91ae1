"""
Periodic report refresher.

Re-issues the report fetch on a fixed interval for as long as the app runs.
No backoff, no jitter, and no check for a fetch already in flight; the
view's sequence numbers keep overlapping fetches from clobbering each other.
"""

import asyncio
import logging
from typing import Optional

from linkstats_app.config import settings
from linkstats_app.report.view import ReportView

logger = logging.getLogger(__name__)


class RefreshWorker:
    """
    Background loop calling view.refresh("timer") every interval seconds.

    Started and stopped by the application lifespan.
    """

    def __init__(
        self,
        view: ReportView,
        interval: Optional[float] = None,
        refresh_on_start: Optional[bool] = None,
    ):
        """
        Args:
            view: Report view to refresh
            interval: Seconds between refreshes (default from settings)
            refresh_on_start: Fetch once immediately before the first wait
        """
        self.view = view
        self.interval = interval if interval is not None else settings.refresh_interval
        self.refresh_on_start = settings.refresh_on_startup if refresh_on_start is None else refresh_on_start
        self.running = False
        self.ticks = 0
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    async def run(self):
        """Run until stop() is called or the task is cancelled"""
        self.running = True
        self._stop_event.clear()
        logger.info("Report refresher started (every %ss)", self.interval)

        try:
            if self.refresh_on_start:
                await self._tick("startup")

            while self.running:
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                    break
                except asyncio.TimeoutError:
                    pass
                await self._tick("timer")
        except asyncio.CancelledError:
            logger.info("Report refresher cancelled")
            raise
        finally:
            self.running = False
            logger.info("Report refresher stopped")

    async def _tick(self, reason: str):
        try:
            await self.view.refresh(reason)
            self.ticks += 1
        except Exception:
            # fetch() never raises; anything here is a bug, keep the timer alive
            logger.exception("Report refresh failed")

    def start(self) -> asyncio.Task:
        """Schedule run() on the current event loop"""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    def stop(self):
        self.running = False
        self._stop_event.set()

    async def shutdown(self):
        """Stop and wait for the loop to exit"""
        self.stop()
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
