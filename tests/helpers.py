"""
Shared test doubles and builders.
"""

from datetime import date

from linkstats_app.schemas.stats import LinkStat
from linkstats_app.sources.exceptions import UpstreamError
from linkstats_app.sources.strategies import MockStatsSource

TODAY = date(2026, 10, 19)


class FakeClock:
    """Monotonic clock the tests move by hand"""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class CountingSource(MockStatsSource):
    """Mock source that counts upstream calls and can fail one link's series"""

    def __init__(self, links=None, failing_link_id=None):
        super().__init__(links)
        self.failing_link_id = failing_link_id
        self.page_calls = 0
        self.series_calls = 0
        self.last_series_kwargs = None

    async def list_links_page(self, *args, **kwargs):
        self.page_calls += 1
        return await super().list_links_page(*args, **kwargs)

    async def get_click_series(self, link_id, **kwargs):
        self.series_calls += 1
        self.last_series_kwargs = kwargs
        if link_id == self.failing_link_id:
            raise UpstreamError(503)
        return await super().get_click_series(link_id, **kwargs)


def make_row(id="1", name="Link", today=0, thirty_day=0, total=0, is_robot=False, country="USA", sparkline=None):
    return LinkStat(
        id=id,
        name=name,
        sparkline_data=sparkline if sparkline is not None else [1, 2, 3, 4, 5, 6, 7],
        today=today,
        thirty_day=thirty_day,
        total=total,
        is_robot=is_robot,
        country=country,
    )
