"""Pytest configuration and fixtures"""
import asyncio
import os
import pytest
from unittest.mock import Mock, AsyncMock

# Set test environment variables
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")
os.environ.setdefault("CART_API_URL", "http://catalog.test")

from cartsync.cart import Cart, CartLine, CartStore, serialize_cart
from cartsync.config import get_settings
from cartsync.errors import NotFoundError
from cartsync.services.models import Product, Stock

CART_KEY = "test:cart"


class MemorySnapshotStore:
    """Dict-backed snapshot store that records writes"""

    def __init__(self, initial: dict | None = None):
        self.data = dict(initial or {})
        self.writes: list[tuple[str, str]] = []
        self.fail_writes = False

    def read(self, key):
        return self.data.get(key)

    def write(self, key, value):
        if self.fail_writes:
            raise ConnectionError("redis unavailable")
        self.writes.append((key, value))
        self.data[key] = value


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached per process; tests that patch env need a clean cache"""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def catalog():
    """Products known to the catalog API"""
    return {
        1: Product(id=1, title="Running Shoe", price="179.90", image="https://img.test/1.jpg"),
        2: Product(id=2, title="Trail Shoe", price="139.90", image="https://img.test/2.jpg", brand="Acme"),
        3: Product(id=3, title="Court Shoe", price="219.90", image="https://img.test/3.jpg"),
        5: Product(id=5, title="Sold Out Shoe", price="99.90", image="https://img.test/5.jpg"),
    }


@pytest.fixture
def stock_levels():
    """Stock per product id; ids missing here answer 404"""
    return {1: 5, 2: 10, 3: 4, 5: 0}


@pytest.fixture
def product_repo(catalog):
    """ProductRepository double backed by ``catalog``"""

    async def get_product(product_id):
        await asyncio.sleep(0)
        if product_id not in catalog:
            raise NotFoundError(f"GET /products/{product_id}: not found", status_code=404)
        return catalog[product_id]

    repo = Mock()
    repo.get_product = AsyncMock(side_effect=get_product)
    return repo


@pytest.fixture
def stock_repo(stock_levels):
    """StockRepository double backed by ``stock_levels``"""

    async def get_stock(product_id):
        await asyncio.sleep(0)
        if product_id not in stock_levels:
            raise NotFoundError(f"GET /stock/{product_id}: not found", status_code=404)
        return Stock(id=product_id, amount=stock_levels[product_id])

    repo = Mock()
    repo.get_stock = AsyncMock(side_effect=get_stock)
    return repo


@pytest.fixture
def notifier():
    notifier = Mock()
    notifier.report_error = Mock()
    return notifier


@pytest.fixture
def snapshot():
    return MemorySnapshotStore()


@pytest.fixture
def make_line(catalog):
    """Build a cart line for a catalog product"""

    def _make(product_id: int, amount: int) -> CartLine:
        return CartLine.from_product(catalog[product_id], amount=amount)

    return _make


@pytest.fixture
def make_store(product_repo, stock_repo, snapshot, notifier):
    """Create a CartStore, optionally seeding the snapshot with ``lines``"""

    def _make(lines=None) -> CartStore:
        if lines is not None:
            snapshot.data[CART_KEY] = serialize_cart(Cart(tuple(lines)))
        return CartStore(
            products=product_repo,
            stock=stock_repo,
            snapshot=snapshot,
            notifier=notifier,
            key=CART_KEY,
        )

    return _make
