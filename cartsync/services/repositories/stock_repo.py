"""Stock Repository - read-only stock lookups.

Stock is input only; nothing here writes it back.
"""
from .base import BaseRepository
from cartsync.services.models import Stock


class StockRepository(BaseRepository):
    """Stock operations."""

    async def get_stock(self, product_id: int) -> Stock:
        """Fetch the stock record. ``amount`` may be None when the API omits it."""
        path = f"/stock/{product_id}"
        data = await self.client.get_json(path)
        return self._parse(Stock, data, path)
