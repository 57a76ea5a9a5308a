"""
Place-detail cache.

Detail records are keyed by place id and expire after ``CacheConfig.ttl_hours``.
Implementations signal a broken backend with ``CacheError``; callers treat
that as a miss and go to the provider.
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Protocol

from ..places.models import PlaceDetails
from .config import DEFAULT_CACHE_CONFIG, CacheConfig


class DetailStore(Protocol):
    def get(self, place_id: str) -> PlaceDetails | None: ...

    def set(self, place_id: str, details: PlaceDetails) -> None: ...


class DetailCache:
    def __init__(
        self,
        config: CacheConfig = DEFAULT_CACHE_CONFIG,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self._clock = clock
        self._entries: dict[str, tuple[float, PlaceDetails]] = {}
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    def get(self, place_id: str) -> PlaceDetails | None:
        if not self.config.enabled:
            return None
        with self._lock:
            entry = self._entries.get(place_id)
            if entry and self._clock() - entry[0] < self.config.ttl_seconds:
                self._hits += 1
                return entry[1]
            if entry:
                del self._entries[place_id]
            self._misses += 1
            return None

    def set(self, place_id: str, details: PlaceDetails) -> None:
        if not self.config.enabled:
            return
        with self._lock:
            self._entries[place_id] = (self._clock(), details)

    def get_stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
