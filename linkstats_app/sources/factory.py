"""
Factory for creating stats source instances.
Simple factory with singleton caching.
"""

from enum import Enum
import logging

from .strategies import StatsSourceStrategy, LinklyStatsSource, MockStatsSource
from linkstats_app.config import settings

logger = logging.getLogger(__name__)


class StatsSourceBackend(Enum):
    """Available stats sources"""
    LINKLY = "linkly"
    MOCK = "mock"


class StatsSourceFactory:
    """
    Simple factory for creating stats sources.

    Gets configuration from settings (not passed as parameters).
    """

    _instance: StatsSourceStrategy = None

    @classmethod
    def create(cls, backend: StatsSourceBackend) -> StatsSourceStrategy:
        """
        Create or return cached stats source instance.

        Args:
            backend: Type of source (from enum)

        Returns:
            Singleton stats source instance
        """
        if cls._instance is not None:
            return cls._instance

        if backend == StatsSourceBackend.LINKLY:
            if not settings.linkly_api_key or not settings.linkly_workspace_id:
                logger.warning("LINKLY_API_KEY or LINKLY_WORKSPACE_ID is not set; upstream calls will fail")
            cls._instance = LinklyStatsSource(
                base_url=settings.linkly_base_url,
                api_key=settings.linkly_api_key,
                workspace_id=settings.linkly_workspace_id,
                timeout=settings.linkly_timeout,
            )
            logger.info("Linkly stats source initialized (%s)", settings.linkly_base_url)

        elif backend == StatsSourceBackend.MOCK:
            cls._instance = MockStatsSource()
            logger.info("Mock stats source initialized")

        else:
            raise ValueError(f"Unknown stats source: {backend}")

        return cls._instance

    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
