"""
Test configuration and fixtures for the link stats dashboard.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient

from main import app
from linkstats_app.cache.strategies import InMemoryCache
from linkstats_app.config import settings
from linkstats_app.dependencies import get_notifier, get_report_view, get_stats_service
from linkstats_app.notifications import NotificationCenter
from linkstats_app.report.view import ReportView
from linkstats_app.services.stats_service import StatsService
from tests.helpers import TODAY, CountingSource, FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def notifier():
    return NotificationCenter(ttl=10)


@pytest.fixture
def source():
    return CountingSource()


@pytest.fixture
def stats_service(source, notifier):
    """StatsService over the mock links, pinned to TODAY"""
    return StatsService(
        source=source,
        cache=InMemoryCache(),
        notifier=notifier,
        page_size=100,
        timezone="UTC",
        sparkline_days=7,
        cache_ttl=60,
        today=lambda: TODAY,
    )


@pytest.fixture
def report_view(stats_service):
    return ReportView(stats_service)


@pytest.fixture
def client(monkeypatch, stats_service, report_view, notifier):
    """
    Test client with the service, view and notifier overridden.
    The background refresher is kept from fetching during tests.
    """
    monkeypatch.setattr(settings, "refresh_on_startup", False)
    monkeypatch.setattr(settings, "refresh_interval", 3600)

    app.dependency_overrides[get_stats_service] = lambda: stats_service
    app.dependency_overrides[get_report_view] = lambda: report_view
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
