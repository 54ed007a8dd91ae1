"""
Stats sources for link and click data.
Implements Strategy Pattern for live and mock upstreams.
"""

from .exceptions import StatsSourceError, UpstreamConnectionError, UpstreamError, UpstreamDecodeError
from .strategies import StatsSourceStrategy, LinklyStatsSource, MockStatsSource
from .factory import StatsSourceFactory, StatsSourceBackend

__all__ = [
    "StatsSourceError",
    "UpstreamConnectionError",
    "UpstreamError",
    "UpstreamDecodeError",
    "StatsSourceStrategy",
    "LinklyStatsSource",
    "MockStatsSource",
    "StatsSourceFactory",
    "StatsSourceBackend",
]
