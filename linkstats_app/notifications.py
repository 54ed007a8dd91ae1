"""
Transient user-facing notifications.

The stats service raises a notification instead of an exception when a
fetch fails; the dashboard polls the active ones and shows them until
they expire.
"""

from collections import deque
from datetime import datetime, timezone
from threading import Lock
from typing import Deque, List
import time

from pydantic import BaseModel, Field, PrivateAttr


class Notification(BaseModel):
    level: str = Field(..., description="'error' or 'info'")
    message: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    _expires_at: float = PrivateAttr(0.0)


class NotificationCenter:
    """
    Bounded, thread-safe store of notifications that expire after ttl seconds.
    """

    def __init__(self, ttl: float = 10, max_items: int = 50, clock=time.monotonic):
        self.ttl = ttl
        self._items: Deque[Notification] = deque(maxlen=max_items)
        self._lock = Lock()
        self._clock = clock

    def _push(self, level: str, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        notification._expires_at = self._clock() + self.ttl
        with self._lock:
            self._items.append(notification)
        return notification

    def error(self, message: str) -> Notification:
        return self._push("error", message)

    def info(self, message: str) -> Notification:
        return self._push("info", message)

    def active(self) -> List[Notification]:
        """Drop expired notifications and return the rest, oldest first"""
        now = self._clock()
        with self._lock:
            while self._items and self._items[0]._expires_at <= now:
                self._items.popleft()
            return list(self._items)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
