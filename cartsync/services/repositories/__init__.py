"""API repositories."""
from .base import BaseRepository
from .product_repo import ProductRepository
from .stock_repo import StockRepository

__all__ = [
    "BaseRepository",
    "ProductRepository",
    "StockRepository",
]
