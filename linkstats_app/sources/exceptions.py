"""
Errors raised by stats sources.

Sources raise; StatsService.fetch is the only place that catches them.
"""

from typing import Optional


class StatsSourceError(Exception):
    """Base class for every failure talking to a stats source"""


class UpstreamConnectionError(StatsSourceError):
    """The upstream API could not be reached (DNS, refused, timeout)"""


class UpstreamError(StatsSourceError):
    """The upstream API answered with a non-2xx status"""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        super().__init__(message or f"Upstream API returned HTTP {status_code}")


class UpstreamDecodeError(StatsSourceError):
    """The upstream response body was not the JSON shape we expect"""
