from __future__ import annotations

import json
import threading
import time
from collections import OrderedDict
from typing import Any, Optional


def make_cache_key(*parts: Any) -> str:
    return json.dumps(parts, sort_keys=True, default=str, separators=(",", ":"))


class TTLCache:
    """Thread-safe in-memory cache with a fixed time-to-live and a size cap."""

    def __init__(self, ttl_seconds: float, max_items: int = 1000, clock=time.monotonic) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_items = max_items
        self._clock = clock
        self._lock = threading.Lock()
        self._items: OrderedDict[str, tuple[Any, float]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def get(self, key: str) -> Optional[Any]:
        now = self._clock()
        with self._lock:
            item = self._items.get(key)
            if item is None:
                self.misses += 1
                return None
            value, expires_at = item
            if expires_at <= now:
                del self._items[key]
                self.misses += 1
                return None
            self.hits += 1
            return value

    def set(self, key: str, value: Any) -> None:
        now = self._clock()
        with self._lock:
            self._items.pop(key, None)
            self._items[key] = (value, now + self.ttl_seconds)
            self._prune(now)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def _prune(self, now: float) -> None:
        expired = [key for key, (_, expires_at) in self._items.items() if expires_at <= now]
        for key in expired:
            del self._items[key]
        while len(self._items) > self.max_items:
            self._items.popitem(last=False)
