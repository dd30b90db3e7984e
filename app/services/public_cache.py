"""
Process-local cache for public share payloads.

Advisory only: a miss recomputes from the database, entries live for a
bounded TTL, and every trip/item/vote mutation or link revocation drops the
trip's entry through ``invalidate_trip``.
"""
import threading
import time
from typing import Any


def trip_key(trip_id: int) -> str:
    return f"public:trip:{trip_id}"


class PublicShareCache:
    def __init__(self, ttl_seconds: float, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            hit = self._store.get(key)
            if hit is None:
                return None
            expires_at, value = hit
            if expires_at <= self._clock():
                del self._store[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._store[key] = (self._clock() + ttl, value)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def invalidate_trip(self, trip_id: int) -> None:
        self.invalidate(trip_key(trip_id))

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


def _default_cache() -> PublicShareCache:
    from app.core.config import settings
    return PublicShareCache(settings.PUBLIC_SHARE_CACHE_TTL_SECONDS)


public_cache = _default_cache()
