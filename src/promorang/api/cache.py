"""TTL cache for read-heavy advertiser endpoints."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class CacheState(Enum):
    EMPTY = 'empty'
    FRESH = 'fresh'
    STALE = 'stale'
    FETCHING = 'fetching'


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """Per-key `{value, expires_at}` cache with explicit invalidation.

    Each key is one resource family ("plans", "coupons"). Invalidation drops
    the whole entry; entries are never partially updated.

    Concurrent misses on the same key share a single load. A load that was
    overtaken by an invalidation still returns its value to its callers but
    is not stored.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: Dict[str, CacheEntry] = {}
        self._inflight: Dict[str, Future] = {}
        self._generations: Dict[str, int] = {}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() < entry.expires_at:
                return entry.value
        return None

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._generations[key] = self._generations.get(key, 0) + 1
        logger.debug(f"Cache invalidated: {key}")

    def clear(self) -> None:
        with self._lock:
            for key in list(self._entries) + list(self._inflight):
                self._generations[key] = self._generations.get(key, 0) + 1
            self._entries.clear()

    def state(self, key: str) -> CacheState:
        with self._lock:
            if key in self._inflight:
                return CacheState.FETCHING
            entry = self._entries.get(key)
            if entry is None:
                return CacheState.EMPTY
            if self._clock() < entry.expires_at:
                return CacheState.FRESH
            return CacheState.STALE

    def get_or_load(
        self,
        key: str,
        loader: Callable[[], Any],
        ttl: float,
        force_refresh: bool = False,
    ) -> Any:
        """Return the cached value for key, calling loader on a miss."""
        with self._lock:
            entry = self._entries.get(key)
            if not force_refresh and entry is not None and self._clock() < entry.expires_at:
                logger.debug(f"Cache hit: {key}")
                return entry.value

            pending = self._inflight.get(key)
            owner = pending is None
            if owner:
                pending = Future()
                self._inflight[key] = pending
                generation = self._generations.get(key, 0)

        if not owner:
            return pending.result()

        try:
            value = loader()
        except BaseException as e:
            with self._lock:
                self._inflight.pop(key, None)
            pending.set_exception(e)
            raise

        with self._lock:
            self._inflight.pop(key, None)
            if self._generations.get(key, 0) == generation:
                self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)
            else:
                logger.debug(f"Discarding load for {key}: invalidated while fetching")
        pending.set_result(value)
        return value
