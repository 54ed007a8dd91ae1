"""
Report view state.

The view owns the current filter and the latest result; the stats service
stays a pure filter -> rows function. State machine:

    idle -> fetching -> rendered
              ^            |
              +------------+  filter change, timer tick, search submit

Fetches are not cancelled. Each one is numbered instead, and a response
whose number is older than the latest issued one is dropped, so the
latest request wins no matter which response lands last.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from linkstats_app.schemas.stats import ExportFormat, LinkStat, ReportSnapshot, StatsFilter
from linkstats_app.services.export import ExportPayload, export
from linkstats_app.services.stats_service import StatsService

logger = logging.getLogger(__name__)


class ReportState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    RENDERED = "rendered"


class ReportView:
    def __init__(self, service: StatsService, stats_filter: Optional[StatsFilter] = None):
        self.service = service
        self.filter = stats_filter or StatsFilter()
        self.search_term = ""
        self.rows: List[LinkStat] = []
        self.state = ReportState.IDLE
        self.last_refreshed: Optional[datetime] = None
        self._issued = 0

    @property
    def latest_sequence(self) -> int:
        return self._issued

    async def set_filter(self, stats_filter: StatsFilter) -> bool:
        """
        Replace the filter; refetch only if it is a different filter.

        Returns:
            True if a fetch was issued
        """
        if stats_filter == self.filter:
            return False
        self.filter = stats_filter
        await self.refresh("filter")
        return True

    async def submit_search(self, term: str) -> None:
        """Set the client-side search term and refetch (the Enter key)"""
        self.search_term = term.strip()
        await self.refresh("search")

    async def refresh(self, reason: str = "manual") -> bool:
        """
        Fetch rows for the current filter.

        Returns:
            True if the result was applied, False if a newer fetch
            was issued while this one was in flight
        """
        self._issued += 1
        sequence = self._issued
        stats_filter = self.filter
        self.state = ReportState.FETCHING
        logger.info("Report refresh #%d (%s)", sequence, reason)

        rows = await self.service.fetch(stats_filter)

        if sequence < self._issued:
            logger.info("Discarding stale report refresh #%d (latest is #%d)", sequence, self._issued)
            return False

        self.rows = rows
        self.state = ReportState.RENDERED
        self.last_refreshed = datetime.now(timezone.utc)
        return True

    def visible_rows(self) -> List[LinkStat]:
        """Latest rows narrowed by the client-side search term"""
        if not self.search_term:
            return list(self.rows)
        needle = self.search_term.lower()
        return [row for row in self.rows if needle in row.name.lower()]

    def export(self, fmt: ExportFormat, include_country: bool = False) -> ExportPayload:
        return export(self.visible_rows(), fmt, include_country=include_country)

    def snapshot(self) -> ReportSnapshot:
        return ReportSnapshot(
            state=self.state.value,
            filter=self.filter,
            search_term=self.search_term,
            rows=self.visible_rows(),
            last_refreshed=self.last_refreshed.isoformat() if self.last_refreshed else None,
        )
