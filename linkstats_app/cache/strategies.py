"""
Cache strategies using Strategy Pattern.
Caches decoded upstream API payloads (Redis, In-Memory, Null).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple
import json
import logging
import time

logger = logging.getLogger(__name__)


class CacheStrategy(ABC):
    """
    Abstract base class for cache strategies.

    Values are JSON-serialisable payloads (the decoded body of an upstream
    response). All methods are async because Redis involves network I/O.

    A cache failure must never fail the caller: implementations log and
    report a miss instead of raising.
    """

    @abstractmethod
    async def get_json(self, key: str) -> Optional[Any]:
        """
        Get a cached payload.

        Args:
            key: Cache key

        Returns:
            Decoded payload or None on miss
        """
        pass

    @abstractmethod
    async def set_json(self, key: str, value: Any, ttl: int = 60) -> bool:
        """
        Cache a payload for ttl seconds.

        Returns:
            True if stored, False otherwise
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    async def clear(self) -> bool:
        pass


class RedisCache(CacheStrategy):
    """
    Redis cache implementation.

    Shared between dashboard processes so a refresh in one worker
    spares the upstream API a request from the others.
    """

    def __init__(self, redis_client, prefix: str = "linkstats:"):
        """
        Args:
            redis_client: Redis client instance (redis.Redis)
            prefix: Namespace for every key written by this cache
        """
        self.redis = redis_client
        self.prefix = prefix

    async def get_json(self, key: str) -> Optional[Any]:
        try:
            value = self.redis.get(self.prefix + key)
            return json.loads(value) if value else None
        except Exception as e:
            logger.warning("Redis get error for %s: %s", key, e)
            return None

    async def set_json(self, key: str, value: Any, ttl: int = 60) -> bool:
        try:
            return bool(self.redis.setex(self.prefix + key, ttl, json.dumps(value)))
        except Exception as e:
            logger.warning("Redis set error for %s: %s", key, e)
            return False

    async def delete(self, key: str) -> bool:
        try:
            return bool(self.redis.delete(self.prefix + key))
        except Exception as e:
            logger.warning("Redis delete error for %s: %s", key, e)
            return False

    async def clear(self) -> bool:
        """Delete only this cache's keys, not the whole Redis database"""
        try:
            for key in self.redis.scan_iter(match=self.prefix + "*"):
                self.redis.delete(key)
            return True
        except Exception as e:
            logger.warning("Redis clear error: %s", e)
            return False


class InMemoryCache(CacheStrategy):
    """
    In-memory cache using a dict of (expires_at, payload).

    TTL is enforced on read against a monotonic clock; every write also
    drops entries that have already expired, so keys that are never read
    again do not accumulate.
    Used in development, tests and as the Redis fallback.
    """

    def __init__(self, clock=time.monotonic):
        self._cache: Dict[str, Tuple[float, Any]] = {}
        self._clock = clock

    async def get_json(self, key: str) -> Optional[Any]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._cache[key]
            return None
        return value

    async def set_json(self, key: str, value: Any, ttl: int = 60) -> bool:
        now = self._clock()
        self._purge_expired(now)
        self._cache[key] = (now + ttl, value)
        return True

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._cache.items() if now >= expires_at]
        for key in expired:
            del self._cache[key]

    async def delete(self, key: str) -> bool:
        return self._cache.pop(key, None) is not None

    async def clear(self) -> bool:
        self._cache.clear()
        return True


class NullCache(CacheStrategy):
    """
    Null Object Pattern - cache that does nothing.

    Every read is a miss, so each fetch goes to the upstream API.
    """

    async def get_json(self, key: str) -> Optional[Any]:
        return None

    async def set_json(self, key: str, value: Any, ttl: int = 60) -> bool:
        return True

    async def delete(self, key: str) -> bool:
        return True

    async def clear(self) -> bool:
        return True
