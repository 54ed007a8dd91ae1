import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo

from linkstats_app.cache.strategies import CacheStrategy
from linkstats_app.config import settings
from linkstats_app.notifications import NotificationCenter
from linkstats_app.schemas.stats import LinkStat, SortDirection, SortKey, StatsFilter
from linkstats_app.sources.strategies import StatsSourceStrategy

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Failed to fetch link statistics"
THIRTY_DAYS = 30


def apply_filters(rows: Iterable[LinkStat], stats_filter: StatsFilter) -> List[LinkStat]:
    """
    Apply the client-side filters to already normalised rows.

    Robot rows are dropped when filter_robots is set; a non-empty country
    list keeps only rows from those countries; search is a case-insensitive
    substring match on the name. Sorting runs last.
    """
    result = list(rows)

    if stats_filter.filter_robots:
        result = [row for row in result if not row.is_robot]

    if stats_filter.countries:
        allowed = set(stats_filter.countries)
        result = [row for row in result if row.country in allowed]

    if stats_filter.search:
        needle = stats_filter.search.lower()
        result = [row for row in result if needle in row.name.lower()]

    if stats_filter.sort_by is not None:
        result = sort_rows(result, stats_filter.sort_by, stats_filter.sort_dir)

    return result


def sort_rows(
    rows: Iterable[LinkStat],
    key: SortKey,
    direction: SortDirection = SortDirection.DESC,
) -> List[LinkStat]:
    """Stable sort by a report column; names compare case-insensitively"""
    if key == SortKey.NAME:
        sort_key = lambda row: row.name.lower()
    else:
        sort_key = lambda row: getattr(row, key.value)
    return sorted(rows, key=sort_key, reverse=direction == SortDirection.DESC)


class StatsService:
    """
    Stats service with dependency injection for source, cache and notifier.

    fetch() is the only public operation: it turns a StatsFilter into report
    rows and never raises. Any upstream failure is logged, raised as a
    transient notification and degrades to an empty list.
    """

    def __init__(
        self,
        source: StatsSourceStrategy,
        cache: Optional[CacheStrategy] = None,
        notifier: Optional[NotificationCenter] = None,
        page_size: Optional[int] = None,
        timezone: Optional[str] = None,
        sparkline_days: Optional[int] = None,
        cache_ttl: Optional[int] = None,
        today: Optional[Callable[[], date]] = None,
    ):
        """
        Initialize stats service with dependencies.

        Args:
            source: Where link and click payloads come from
            cache: Cache for upstream payloads (optional)
            notifier: Receives the user-facing error on failure (optional)
            today: Returns the current day; defaults to now in `timezone`
        """
        self.source = source
        self.cache = cache
        self.notifier = notifier
        self.page_size = page_size or settings.linkly_page_size
        self.timezone = timezone or settings.timezone
        self.sparkline_days = sparkline_days or settings.sparkline_days
        self.cache_ttl = cache_ttl if cache_ttl is not None else settings.cache_ttl
        self._today = today or self._today_in_timezone

    def _today_in_timezone(self) -> date:
        return datetime.now(ZoneInfo(self.timezone)).date()

    async def fetch(self, stats_filter: StatsFilter) -> List[LinkStat]:
        """
        Fetch report rows for a filter.

        Returns:
            Filtered, sorted rows; [] if anything went wrong upstream
        """
        try:
            rows = await self._fetch_rows(stats_filter)
        except Exception:
            logger.exception("Fetching link statistics failed")
            if self.notifier:
                self.notifier.error(FETCH_ERROR_MESSAGE)
            return []

        return apply_filters(rows, stats_filter)

    def _window(self, stats_filter: StatsFilter):
        """
        First and last day of click data to request.

        The range end anchors the report; the window always spans exactly the
        days the 30 day counter and the sparkline read, whatever the range start.
        """
        if stats_filter.date_range is not None:
            end = stats_filter.date_range.end
        else:
            end = self._today()
        covered_days = max(THIRTY_DAYS, self.sparkline_days)
        return end - timedelta(days=covered_days - 1), end

    async def _cached(self, key: str, load: Callable[[], Awaitable[Any]]) -> Any:
        """Cache-aside lookup; cache errors are a miss, never a failure"""
        if self.cache:
            cached = await self.cache.get_json(key)
            if cached is not None:
                return cached

        payload = await load()

        if self.cache:
            await self.cache.set_json(key, payload, ttl=self.cache_ttl)
        return payload

    async def _list_links(self, stats_filter: StatsFilter) -> List[Dict[str, Any]]:
        """Walk every page of the upstream link list"""
        sort_by = stats_filter.sort_by.value if stats_filter.sort_by else None
        sort_dir = stats_filter.sort_dir.value if stats_filter.sort_by else None

        links: List[Dict[str, Any]] = []
        page = 1
        while True:
            key = f"links:{page}:{self.page_size}:{stats_filter.search or ''}:{sort_by}:{sort_dir}"
            payload = await self._cached(
                key,
                lambda page=page: self.source.list_links_page(
                    page=page,
                    page_size=self.page_size,
                    search=stats_filter.search,
                    sort_by=sort_by,
                    sort_dir=sort_dir,
                ),
            )
            page_links = payload["links"]
            links.extend(page_links)

            total_pages = payload.get("total_pages")
            if total_pages is None:
                if len(page_links) < self.page_size:
                    break
            elif page >= int(total_pages):
                break
            if not page_links:
                break
            page += 1

        return links

    async def _click_series(self, link_id: str, start: date, end: date, include_bots: bool) -> Dict[str, Any]:
        key = f"clicks:{link_id}:{start.isoformat()}:{end.isoformat()}:{int(include_bots)}:{self.timezone}"
        return await self._cached(
            key,
            lambda: self.source.get_click_series(
                link_id,
                start=start,
                end=end,
                include_bots=include_bots,
                timezone=self.timezone,
            ),
        )

    async def _fetch_rows(self, stats_filter: StatsFilter) -> List[LinkStat]:
        start, end = self._window(stats_filter)
        include_bots = not stats_filter.filter_robots

        links = await self._list_links(stats_filter)
        # One failed series fails the whole batch
        series = await asyncio.gather(*[
            self._click_series(str(link["id"]), start, end, include_bots)
            for link in links
        ])

        return [
            self._normalize(link, payload, start, end)
            for link, payload in zip(links, series)
        ]

    def _normalize(self, link: Dict[str, Any], payload: Dict[str, Any], start: date, end: date) -> LinkStat:
        """Flatten one link and its daily buckets into a report row"""
        buckets: Dict[str, int] = {}
        for point in payload["traffic"]:
            day = str(point["t"])[:10]
            buckets[day] = buckets.get(day, 0) + int(point["y"])

        days = (end - start).days + 1
        counts = [
            buckets.get((start + timedelta(days=offset)).isoformat(), 0)
            for offset in range(days)
        ]

        link_id = str(link["id"])
        return LinkStat(
            id=link_id,
            name=link.get("name") or link.get("url") or link_id,
            sparkline_data=counts[-self.sparkline_days:],
            today=counts[-1],
            thirty_day=sum(counts[-THIRTY_DAYS:]),
            total=int(link.get("clicks_count", sum(counts))),
            is_robot=bool(link.get("is_robot", False)),
            country=link.get("country") or "",
        )
