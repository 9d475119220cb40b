"""Snapshot storage for the cart: a synchronous key-value store."""
from typing import Optional, Protocol

from cartsync.db import get_redis_sync


class SnapshotStore(Protocol):
    def read(self, key: str) -> Optional[str]: ...

    def write(self, key: str, value: str) -> None: ...


class RedisSnapshotStore:
    """Snapshot store backed by the sync Upstash Redis client.

    No TTL: the snapshot lives until the next commit replaces it.
    """

    def __init__(self, redis=None):
        self._redis = redis

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            self._redis = get_redis_sync()
        return self._redis

    def read(self, key: str) -> Optional[str]:
        value = self.redis.get(key)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    def write(self, key: str, value: str) -> None:
        self.redis.set(key, value)
