"""
FastAPI dependencies for dependency injection.

This module provides singleton instances of the cache, the stats source,
the notification center and the report view that are injected into
services and routes.

Tests swap any of them through app.dependency_overrides.
"""

from functools import lru_cache

from fastapi import Depends

from linkstats_app.cache.factory import CacheFactory, CacheBackend
from linkstats_app.cache.strategies import CacheStrategy
from linkstats_app.config import settings
from linkstats_app.notifications import NotificationCenter
from linkstats_app.report.view import ReportView
from linkstats_app.services.stats_service import StatsService
from linkstats_app.sources.factory import StatsSourceFactory, StatsSourceBackend
from linkstats_app.sources.strategies import StatsSourceStrategy


@lru_cache()
def get_cache() -> CacheStrategy:
    """
    Get cache instance (singleton).

    Factory gets config from settings internally.
    """
    backend = CacheBackend(settings.cache_backend)
    return CacheFactory.create(backend)


@lru_cache()
def get_stats_source() -> StatsSourceStrategy:
    """Get stats source instance (singleton), live or mock per settings"""
    backend = StatsSourceBackend(settings.stats_source)
    return StatsSourceFactory.create(backend)


@lru_cache()
def get_notifier() -> NotificationCenter:
    return NotificationCenter(ttl=settings.notification_ttl)


def get_stats_service(
    source: StatsSourceStrategy = Depends(get_stats_source),
    cache: CacheStrategy = Depends(get_cache),
    notifier: NotificationCenter = Depends(get_notifier),
) -> StatsService:
    """
    Get StatsService with all dependencies injected.

    Controllers depend on the service; the service depends on the
    infrastructure (source, cache, notifier).
    """
    return StatsService(source=source, cache=cache, notifier=notifier)


@lru_cache()
def get_report_view() -> ReportView:
    """
    Get the report view (singleton).

    The view holds dashboard state across requests, so it is built once
    from the singleton infrastructure rather than per request.
    """
    service = StatsService(source=get_stats_source(), cache=get_cache(), notifier=get_notifier())
    return ReportView(service)
