"""
Tests for the report view state machine.
"""

import asyncio

from linkstats_app.report.view import ReportState, ReportView
from linkstats_app.schemas.stats import ExportFormat, StatsFilter
from tests.helpers import make_row


class ControlledService:
    """Service whose fetches complete only when the test releases them"""

    def __init__(self):
        self.calls = []

    async def fetch(self, stats_filter):
        release = asyncio.Event()
        call = {"filter": stats_filter, "release": release, "rows": []}
        self.calls.append(call)
        await release.wait()
        return call["rows"]


class TestReportView:
    """Test filter handling, refresh and client-side search"""

    def test_starts_idle(self, report_view):
        assert report_view.state == ReportState.IDLE
        assert report_view.visible_rows() == []

    def test_refresh_renders_rows(self, report_view):
        applied = asyncio.run(report_view.refresh())

        assert applied is True
        assert report_view.state == ReportState.RENDERED
        assert [row.name for row in report_view.visible_rows()] == ["Marketing Campaign Q1"]
        assert report_view.last_refreshed is not None

    def test_same_filter_does_not_refetch(self, report_view, source):
        asyncio.run(report_view.refresh())
        calls_before = source.page_calls

        issued = asyncio.run(report_view.set_filter(StatsFilter()))

        assert issued is False
        assert source.page_calls == calls_before

    def test_changed_filter_refetches(self, report_view):
        asyncio.run(report_view.refresh())

        issued = asyncio.run(report_view.set_filter(StatsFilter(filter_robots=False)))

        assert issued is True
        assert len(report_view.rows) == 2

    def test_submit_search_filters_by_name(self, report_view):
        asyncio.run(report_view.set_filter(StatsFilter(filter_robots=False)))

        asyncio.run(report_view.submit_search("  NEWSLETTER "))

        assert report_view.search_term == "NEWSLETTER"
        assert [row.name for row in report_view.visible_rows()] == ["Newsletter Signup"]
        assert len(report_view.rows) == 2

    def test_export_uses_visible_rows(self, report_view):
        asyncio.run(report_view.set_filter(StatsFilter(filter_robots=False)))
        asyncio.run(report_view.submit_search("campaign"))

        payload = report_view.export(ExportFormat.CSV)

        assert payload.content.splitlines() == [
            "Name,Today,30 Day,Total",
            "Marketing Campaign Q1,4,246,368",
        ]

    def test_snapshot(self, report_view):
        asyncio.run(report_view.refresh())

        snapshot = report_view.snapshot()

        assert snapshot.state == "rendered"
        assert snapshot.filter == StatsFilter()
        assert len(snapshot.rows) == 1


class TestStaleResponses:
    """Test that the latest issued fetch wins"""

    def test_older_response_is_discarded(self):
        async def scenario():
            service = ControlledService()
            view = ReportView(service)

            first = asyncio.create_task(view.refresh("timer"))
            await asyncio.sleep(0)
            second = asyncio.create_task(view.refresh("manual"))
            await asyncio.sleep(0)

            old_call, new_call = service.calls
            old_call["rows"] = [make_row(id="old")]
            new_call["rows"] = [make_row(id="new")]

            # Newer response lands first, the stale one afterwards
            new_call["release"].set()
            assert await second is True
            old_call["release"].set()
            assert await first is False

            return view

        view = asyncio.run(scenario())

        assert [row.id for row in view.rows] == ["new"]
        assert view.state == ReportState.RENDERED

    def test_view_keeps_fetching_until_latest_lands(self):
        async def scenario():
            service = ControlledService()
            view = ReportView(service)

            first = asyncio.create_task(view.refresh())
            await asyncio.sleep(0)
            second = asyncio.create_task(view.refresh())
            await asyncio.sleep(0)

            service.calls[0]["release"].set()
            await first
            state_after_stale = view.state

            service.calls[1]["release"].set()
            await second
            return state_after_stale, view.state

        state_after_stale, final_state = asyncio.run(scenario())

        assert state_after_stale == ReportState.FETCHING
        assert final_state == ReportState.RENDERED
