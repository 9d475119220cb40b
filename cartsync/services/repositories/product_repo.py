"""Product Repository - catalog lookups."""
from .base import BaseRepository
from cartsync.services.models import Product


class ProductRepository(BaseRepository):
    """Catalog operations."""

    async def get_product(self, product_id: int) -> Product:
        """Fetch a product record. Raises NotFoundError / NetworkError."""
        path = f"/products/{product_id}"
        data = await self.client.get_json(path)
        return self._parse(Product, data, path)
