"""
Shared Dependencies for Routers

Lazy-loaded singletons: nothing talks to Redis or the API until the first
request needs the cart.
"""

import asyncio
from typing import Optional, TYPE_CHECKING

from cartsync.logging import get_logger

if TYPE_CHECKING:
    from cartsync.cart import CartStore
    from cartsync.services.api import ApiClient
    from cartsync.services.notifications import Notifier

logger = get_logger(__name__)

_api_client: Optional["ApiClient"] = None
_notifier: Optional["Notifier"] = None
_cart_store: Optional["CartStore"] = None
_cart_store_lock = asyncio.Lock()


def get_api_client() -> "ApiClient":
    """Get or create the shared API client"""
    global _api_client
    if _api_client is None:
        from cartsync.services.api import ApiClient
        _api_client = ApiClient.from_settings()
    return _api_client


def get_notifier() -> "Notifier":
    """Get or create the notifier chosen by settings"""
    global _notifier
    if _notifier is None:
        from cartsync.services.notifications import notifier_from_settings
        _notifier = notifier_from_settings()
    return _notifier


async def get_cart_store() -> "CartStore":
    """Get or create the session CartStore (restores the snapshot on first call).

    Concurrent first requests wait on one lock, so only one store is built.
    """
    global _cart_store
    if _cart_store is not None:
        return _cart_store
    async with _cart_store_lock:
        if _cart_store is None:
            from cartsync.cart import CartStore, RedisSnapshotStore
            from cartsync.db import RedisKeys
            from cartsync.services.repositories import ProductRepository, StockRepository

            client = get_api_client()
            _cart_store = await CartStore.open(
                products=ProductRepository(client),
                stock=StockRepository(client),
                snapshot=RedisSnapshotStore(),
                notifier=get_notifier(),
                key=RedisKeys.cart_key(),
            )
    return _cart_store


async def shutdown_services():
    """Close the http client and flush pending notifications."""
    global _api_client, _notifier, _cart_store, _cart_store_lock
    from cartsync.services.notifications import TelegramNotifier

    if isinstance(_notifier, TelegramNotifier):
        await _notifier.drain()
    if _api_client is not None:
        try:
            await _api_client.aclose()
        except Exception as e:
            logger.warning(f"Failed to close API client: {e}")
    _api_client = None
    _notifier = None
    _cart_store = None
    _cart_store_lock = asyncio.Lock()
