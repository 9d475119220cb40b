"""
Redis client for the cart snapshot.

The snapshot store is synchronous, so only the sync Upstash client is used.
"""

from typing import Optional

from upstash_redis import Redis

from cartsync.config import get_settings

_redis_client: Optional[Redis] = None


def get_redis_sync() -> Redis:
    """
    Get sync Upstash Redis client (singleton).

    Uses the standard Upstash env var names:
    - UPSTASH_REDIS_REST_URL
    - UPSTASH_REDIS_REST_TOKEN
    """
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        if not settings.redis_url or not settings.redis_token:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        _redis_client = Redis(url=settings.redis_url, token=settings.redis_token)

    return _redis_client


class RedisKeys:
    """Redis keys used by cartsync."""

    @staticmethod
    def cart_key() -> str:
        return get_settings().storage_key
