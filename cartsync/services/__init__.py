"""Collaborators of the cart store: API client, repositories, notifications."""
from .api import ApiClient
from .models import Product, Stock
from .notifications import LogNotifier, Notifier, TelegramNotifier, notifier_from_settings
from .repositories import ProductRepository, StockRepository

__all__ = [
    "ApiClient",
    "Product",
    "Stock",
    "Notifier",
    "LogNotifier",
    "TelegramNotifier",
    "notifier_from_settings",
    "ProductRepository",
    "StockRepository",
]
