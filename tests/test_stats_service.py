"""
Tests for the stats service: filtering, normalisation and failure handling.
"""

import asyncio
from datetime import date

from linkstats_app.cache.strategies import InMemoryCache, NullCache
from linkstats_app.notifications import NotificationCenter
from linkstats_app.schemas.stats import DateRange, SortDirection, SortKey, StatsFilter
from linkstats_app.services.stats_service import FETCH_ERROR_MESSAGE, StatsService, apply_filters, sort_rows
from tests.helpers import TODAY, CountingSource, make_row


def build_service(source, notifier=None, cache=None, page_size=100):
    return StatsService(
        source=source,
        cache=cache if cache is not None else NullCache(),
        notifier=notifier,
        page_size=page_size,
        timezone="UTC",
        sparkline_days=7,
        today=lambda: TODAY,
    )


class TestApplyFilters:
    """Test client-side filters on normalised rows"""

    def test_robot_exclusion_removes_only_robots(self):
        rows = [
            make_row(id="1", is_robot=False),
            make_row(id="2", is_robot=True),
            make_row(id="3", is_robot=False),
        ]

        result = apply_filters(rows, StatsFilter(filter_robots=True))

        assert [row.id for row in result] == ["1", "3"]

    def test_robots_kept_when_not_filtering(self):
        rows = [make_row(id="1"), make_row(id="2", is_robot=True)]

        result = apply_filters(rows, StatsFilter(filter_robots=False))

        assert len(result) == 2

    def test_country_allow_list(self):
        rows = [
            make_row(id="1", country="USA"),
            make_row(id="2", country="Canada"),
            make_row(id="3", country="Germany"),
        ]

        result = apply_filters(rows, StatsFilter(filter_robots=False, countries=["USA", "Germany"]))

        assert [row.id for row in result] == ["1", "3"]

    def test_empty_country_list_keeps_everything(self):
        rows = [make_row(id="1", country="USA"), make_row(id="2", country="Canada")]

        assert len(apply_filters(rows, StatsFilter(filter_robots=False, countries=[]))) == 2
        assert len(apply_filters(rows, StatsFilter(filter_robots=False, countries=None))) == 2

    def test_search_is_case_insensitive(self):
        rows = [make_row(id="1", name="Marketing Campaign Q1"), make_row(id="2", name="Newsletter Signup")]

        result = apply_filters(rows, StatsFilter(filter_robots=False, search="CAMPAIGN"))

        assert [row.id for row in result] == ["1"]

    def test_sort_by_total(self):
        rows = [make_row(id="1", total=5), make_row(id="2", total=50), make_row(id="3", total=20)]

        result = apply_filters(
            rows,
            StatsFilter(filter_robots=False, sort_by=SortKey.TOTAL, sort_dir=SortDirection.DESC),
        )

        assert [row.id for row in result] == ["2", "3", "1"]

    def test_sort_by_name_ascending(self):
        rows = [make_row(id="1", name="beta"), make_row(id="2", name="Alpha"), make_row(id="3", name="gamma")]

        result = sort_rows(rows, SortKey.NAME, SortDirection.ASC)

        assert [row.name for row in result] == ["Alpha", "beta", "gamma"]


class TestFetch:
    """Test StatsService.fetch against the mock upstream"""

    def test_filter_robots_returns_only_human_row(self, stats_service):
        """Given one robot and one human link, only the human one is returned"""
        rows = asyncio.run(stats_service.fetch(StatsFilter(filter_robots=True)))

        assert len(rows) == 1
        assert rows[0].name == "Marketing Campaign Q1"
        assert rows[0].is_robot is False

    def test_normalizes_link_and_series(self, stats_service):
        rows = asyncio.run(stats_service.fetch(StatsFilter(filter_robots=True)))
        row = rows[0]

        assert row.id == "1"
        assert row.sparkline_data == [1, 5, 2, 8, 3, 7, 4]
        assert row.today == 4
        assert row.thirty_day == 246
        assert row.total == 368
        assert row.country == "USA"

    def test_all_traffic_includes_robot_row(self, stats_service, source):
        rows = asyncio.run(stats_service.fetch(StatsFilter(filter_robots=False)))

        assert {row.name for row in rows} == {"Marketing Campaign Q1", "Newsletter Signup"}
        assert source.last_series_kwargs["include_bots"] is True

    def test_country_filter(self, stats_service):
        rows = asyncio.run(stats_service.fetch(StatsFilter(filter_robots=False, countries=["Canada"])))

        assert [row.name for row in rows] == ["Newsletter Signup"]

    def test_short_date_range_still_covers_thirty_days(self, stats_service, source):
        date_range = DateRange(start=date(2026, 10, 10), end=date(2026, 10, 18))

        asyncio.run(stats_service.fetch(StatsFilter(date_range=date_range)))

        assert source.last_series_kwargs["end"] == date(2026, 10, 18)
        assert source.last_series_kwargs["start"] == date(2026, 9, 19)

    def test_long_date_range_requests_only_reported_days(self, stats_service, source):
        date_range = DateRange(start=date(2020, 1, 1), end=TODAY)

        rows = asyncio.run(stats_service.fetch(StatsFilter(date_range=date_range)))

        assert source.last_series_kwargs["start"] == date(2026, 9, 20)
        assert source.last_series_kwargs["end"] == TODAY
        assert rows[0].today == 4
        assert rows[0].thirty_day == 246
        assert rows[0].sparkline_data == [1, 5, 2, 8, 3, 7, 4]

    def test_date_range_start_does_not_change_rows(self, stats_service):
        wide = asyncio.run(stats_service.fetch(StatsFilter(date_range=DateRange(start=date(2020, 1, 1), end=TODAY))))
        narrow = asyncio.run(stats_service.fetch(StatsFilter(date_range=DateRange(start=TODAY, end=TODAY))))

        assert wide == narrow

    def test_walks_every_page(self):
        source = CountingSource()
        service = build_service(source, page_size=1)

        rows = asyncio.run(service.fetch(StatsFilter(filter_robots=False)))

        assert len(rows) == 2
        assert source.page_calls == 2

    def test_cached_payloads_skip_upstream(self):
        source = CountingSource()
        service = build_service(source, cache=InMemoryCache())

        asyncio.run(service.fetch(StatsFilter()))
        asyncio.run(service.fetch(StatsFilter()))

        assert source.page_calls == 1
        assert source.series_calls == 2


class TestFetchFailures:
    """Test that upstream failures degrade to an empty result"""

    def test_failed_series_fails_whole_batch(self):
        notifier = NotificationCenter()
        service = build_service(CountingSource(failing_link_id="2"), notifier=notifier)

        rows = asyncio.run(service.fetch(StatsFilter(filter_robots=False)))

        assert rows == []
        assert [n.message for n in notifier.active()] == [FETCH_ERROR_MESSAGE]

    def test_decode_failure_returns_empty_list(self):
        class BrokenSource(CountingSource):
            async def list_links_page(self, *args, **kwargs):
                return {"links": [{"name": "no id"}], "page": 1, "total_pages": 1}

        notifier = NotificationCenter()
        service = build_service(BrokenSource(), notifier=notifier)

        assert asyncio.run(service.fetch(StatsFilter())) == []
        assert notifier.active()[0].level == "error"

    def test_failure_without_notifier_does_not_raise(self):
        service = build_service(CountingSource(failing_link_id="1"))

        assert asyncio.run(service.fetch(StatsFilter())) == []
