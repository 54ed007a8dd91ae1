"""
Stats source strategies using Strategy Pattern.

Allows switching where link and click data comes from:
- LinklyStatsSource: the LinklyHQ HTTP API (production)
- MockStatsSource: fixed sample links served in-process (development, demos)

Both return raw payloads in the same pinned v1 contract so the service
layer can cache and normalise them without knowing which one is active:

    list_links_page -> {"links": [{"id", "name", "url", "clicks_count",
                                   "country", "is_robot"}, ...],
                        "page": int, "total_pages": int}
    get_click_series -> {"traffic": [{"t": "YYYY-MM-DD", "y": int}, ...]}
"""

from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
import asyncio
import logging

import requests

from .exceptions import StatsSourceError, UpstreamConnectionError, UpstreamDecodeError, UpstreamError

logger = logging.getLogger(__name__)

# Report sort keys -> upstream sort_by values
UPSTREAM_SORT_FIELDS = {
    "name": "name",
    "today": "clicks_today",
    "thirty_day": "clicks_30d",
    "total": "clicks_count",
}


class StatsSourceStrategy(ABC):
    """
    Abstract base class for stats sources.

    Pattern: Strategy Pattern
    Similar to the cache backends: the service depends on this interface,
    the factory picks the implementation from settings.
    """

    @abstractmethod
    async def list_links_page(
        self,
        page: int = 1,
        page_size: int = 100,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_dir: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Get one page of the workspace's links.

        Args:
            page: 1-based page number
            page_size: Links per page
            search: Upstream name/url search term
            sort_by: Report sort key (see UPSTREAM_SORT_FIELDS)
            sort_dir: "asc" or "desc"

        Returns:
            Page payload with "links", "page" and "total_pages"

        Raises:
            StatsSourceError: on any network, status or decode failure
        """
        pass

    @abstractmethod
    async def get_click_series(
        self,
        link_id: str,
        start: date,
        end: date,
        include_bots: bool = False,
        timezone: str = "UTC",
    ) -> Dict[str, Any]:
        """
        Get daily click buckets for one link.

        Args:
            link_id: Upstream link identifier
            start: First day (inclusive)
            end: Last day (inclusive)
            include_bots: Count clicks from robots as well
            timezone: IANA timezone the day buckets are cut in

        Returns:
            Series payload with "traffic": [{"t": day, "y": count}, ...]

        Raises:
            StatsSourceError: on any network, status or decode failure
        """
        pass


def _require_list(payload: Any, key: str) -> List[Any]:
    if not isinstance(payload, dict) or not isinstance(payload.get(key), list):
        raise UpstreamDecodeError(f"Upstream payload has no '{key}' list")
    return payload[key]


class LinklyStatsSource(StatsSourceStrategy):
    """
    LinklyHQ API client.

    The API key comes from settings and is sent as a bearer token.
    requests is blocking, so every call runs in a worker thread to keep
    the event loop free.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        workspace_id: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url: API root, e.g. https://app.linklyhq.com/api/v1
            api_key: Workspace API key
            workspace_id: Workspace whose links are reported
            timeout: Seconds per request
            session: Pre-built session (tests inject a fake one)
        """
        self.base_url = base_url.rstrip("/")
        self.workspace_id = workspace_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Accept": "application/json",
        })

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/workspace/{self.workspace_id}/{endpoint}"

    def _get(self, endpoint: str, params: Dict[str, Any]) -> Any:
        """Blocking GET returning the decoded JSON body"""
        url = self._url(endpoint)
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamConnectionError(f"GET {url} failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise UpstreamError(response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamDecodeError(f"GET {url} returned invalid JSON") from e

    async def _get_async(self, endpoint: str, params: Dict[str, Any]) -> Any:
        return await asyncio.to_thread(self._get, endpoint, params)

    async def list_links_page(
        self,
        page: int = 1,
        page_size: int = 100,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_dir: Optional[str] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page, "page_size": page_size}
        if search:
            params["search"] = search
        if sort_by:
            params["sort_by"] = UPSTREAM_SORT_FIELDS.get(sort_by, sort_by)
            params["sort_dir"] = sort_dir or "desc"

        payload = await self._get_async("list_links", params)
        _require_list(payload, "links")
        return payload

    async def get_click_series(
        self,
        link_id: str,
        start: date,
        end: date,
        include_bots: bool = False,
        timezone: str = "UTC",
    ) -> Dict[str, Any]:
        params = {
            "link_id": link_id,
            "start": start.isoformat(),
            "end": end.isoformat(),
            "bots": "true" if include_bots else "false",
            "frequency": "day",
            "timezone": timezone,
        }
        payload = await self._get_async("clicks", params)
        _require_list(payload, "traffic")
        return payload


# Sample links served by MockStatsSource. "daily" holds the most recent
# days, newest last; older days count as zero.
MOCK_LINKS: List[Dict[str, Any]] = [
    {
        "id": "1",
        "name": "Marketing Campaign Q1",
        "url": "https://example.com/campaigns/q1",
        "clicks_count": 368,
        "country": "USA",
        "is_robot": False,
        "daily": [12, 9, 14, 8, 10, 11, 7, 13, 9, 10, 12, 8, 11, 9, 10, 6, 12, 11, 9, 8,
                  7, 10, 1, 5, 2, 8, 3, 7, 4],
    },
    {
        "id": "2",
        "name": "Newsletter Signup",
        "url": "https://example.com/newsletter",
        "clicks_count": 5252,
        "country": "Canada",
        "is_robot": True,
        "daily": [160, 171, 158, 149, 180, 166, 172, 169, 151, 177, 165, 170, 168, 175, 162,
                  159, 181, 173, 164, 167, 170, 163, 174, 171, 2, 6, 3, 9, 5, 7, 4],
    },
]


class MockStatsSource(StatsSourceStrategy):
    """
    In-process source serving MOCK_LINKS.

    Honours paging and search like the live API; sorting is left to the
    service. Useful for running the dashboard without an API key.
    """

    def __init__(self, links: Optional[List[Dict[str, Any]]] = None):
        self.links = links if links is not None else MOCK_LINKS

    def _find(self, link_id: str) -> Dict[str, Any]:
        for link in self.links:
            if str(link["id"]) == str(link_id):
                return link
        raise UpstreamError(404, f"Link {link_id} not found")

    async def list_links_page(
        self,
        page: int = 1,
        page_size: int = 100,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_dir: Optional[str] = None,
    ) -> Dict[str, Any]:
        links = self.links
        if search:
            needle = search.lower()
            links = [
                link for link in links
                if needle in link["name"].lower() or needle in link.get("url", "").lower()
            ]

        total_pages = max(1, -(-len(links) // page_size))
        offset = (page - 1) * page_size
        page_links = [
            {key: value for key, value in link.items() if key != "daily"}
            for link in links[offset:offset + page_size]
        ]
        return {"links": page_links, "page": page, "total_pages": total_pages}

    async def get_click_series(
        self,
        link_id: str,
        start: date,
        end: date,
        include_bots: bool = False,
        timezone: str = "UTC",
    ) -> Dict[str, Any]:
        daily = self._find(link_id).get("daily", [])
        days = (end - start).days + 1
        traffic = []
        for offset in range(days):
            day = start + timedelta(days=offset)
            back = (end - day).days
            count = daily[-1 - back] if back < len(daily) else 0
            traffic.append({"t": day.isoformat(), "y": count})
        return {"traffic": traffic}


__all__ = [
    "StatsSourceStrategy",
    "LinklyStatsSource",
    "MockStatsSource",
    "MOCK_LINKS",
    "StatsSourceError",
]
