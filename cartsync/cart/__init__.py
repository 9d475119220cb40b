"""Cart package: models, snapshot storage and the cart store."""
from .models import Cart, CartLine, deserialize_cart, serialize_cart
from .storage import RedisSnapshotStore, SnapshotStore
from .store import CartResult, CartStore

__all__ = [
    "Cart",
    "CartLine",
    "CartResult",
    "CartStore",
    "RedisSnapshotStore",
    "SnapshotStore",
    "deserialize_cart",
    "serialize_cart",
]
