"""Key-value caches used for file listings and searches."""

from __future__ import annotations

import threading
import time
from datetime import timedelta
from typing import Callable, Optional, Union

import redis

TTL = Union[float, timedelta, None]


def _seconds(ttl: TTL) -> Optional[float]:
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


class MemoryCache:
    """In-process cache with the same get/set behaviour as the Redis cache.

    A ``ttl`` of ``None`` keeps whatever expiry the key already had.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, tuple[str, Optional[float]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, deadline = entry
            if deadline is not None and self._clock() >= deadline:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: str | bytes, ttl: TTL = None) -> None:
        """Store a value, expiring after ``ttl`` seconds when given."""
        if isinstance(value, bytes):
            value = value.decode()
        seconds = _seconds(ttl)
        with self._lock:
            now = self._clock()
            if seconds is None:
                old = self._entries.get(key)
                deadline = None
                if old is not None and (old[1] is None or old[1] > now):
                    deadline = old[1]
            else:
                deadline = now + seconds
            self._entries[key] = (value, deadline)


class _RedisCache:
    """Redis-backed cache exposing the MemoryCache interface."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    def get(self, key: str) -> Optional[str]:
        return self._client.get(key)

    def set(self, key: str, value: str | bytes, ttl: TTL = None) -> None:
        seconds = _seconds(ttl)
        if seconds is None:
            self._client.set(key, value, keepttl=True)
        else:
            self._client.set(key, value, px=max(1, int(seconds * 1000)))


def connect_redis(host: str = "localhost", port: int = 6379, db: int = 0) -> _RedisCache:
    """Connect to Redis and check the connection with a ping."""
    client = redis.Redis(
        host=host, port=port, db=db, decode_responses=True, socket_connect_timeout=5
    )
    try:
        client.ping()
    except redis.RedisError as exc:
        raise ConnectionError(f"Failed to connect to Redis: {exc}") from exc
    return _RedisCache(client)