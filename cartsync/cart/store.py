"""
Cart store: the single owner of the session cart.

Keeps three things in agreement:
- the in-memory cart published to listeners,
- the snapshot in the key-value store,
- the stock limits reported by the stock API.

Every mutation runs read -> validate -> snapshot write -> publish under one
asyncio.Lock. The snapshot store is synchronous, so its calls run in a worker
thread (asyncio.to_thread) while the lock is held. A rejected or failed
mutation changes neither copy; it returns a CartResult carrying the typed
error and reports the message to the notifier.
"""
import asyncio
import json
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from cartsync.cart.models import Cart, CartLine, deserialize_cart, serialize_cart
from cartsync.cart.storage import SnapshotStore
from cartsync.errors import (
    MSG_ADD_FAILED,
    MSG_REMOVE_FAILED,
    MSG_UPDATE_FAILED,
    ApiError,
    CartError,
    CollaboratorFailure,
    LineNotFound,
    StockUnavailable,
)
from cartsync.logging import get_logger, sanitize_id_for_logging
from cartsync.services.models import Stock
from cartsync.services.notifications import Notifier
from cartsync.services.repositories import ProductRepository, StockRepository

logger = get_logger(__name__)

CartListener = Callable[[Cart], None]


@dataclass(frozen=True)
class CartResult:
    """Outcome of a cart operation: the current cart and the error, if rejected."""
    cart: Cart
    error: Optional[CartError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CartStore:
    """
    Session cart kept in sync with its snapshot and with stock.

    Usage:
        store = CartStore(products, stock, snapshot, notifier, key="cartsync:cart")
        result = await store.add_product(1)
        if not result.ok:
            ...  # already reported to the notifier
    """

    def __init__(
        self,
        products: ProductRepository,
        stock: StockRepository,
        snapshot: SnapshotStore,
        notifier: Notifier,
        key: str,
    ):
        self.products = products
        self.stock = stock
        self.snapshot = snapshot
        self.notifier = notifier
        self.key = key
        self._lock = asyncio.Lock()
        self._listeners: list[CartListener] = []
        self._cart = self._restore()

    @classmethod
    async def open(
        cls,
        products: ProductRepository,
        stock: StockRepository,
        snapshot: SnapshotStore,
        notifier: Notifier,
        key: str,
    ) -> "CartStore":
        """Build the store in a worker thread so the snapshot read does not block the loop."""
        return await asyncio.to_thread(cls, products, stock, snapshot, notifier, key)

    # ==================== QUERIES ====================

    @property
    def cart(self) -> Cart:
        """The last committed cart."""
        return self._cart

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Call ``listener`` with the new cart after each commit. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ==================== MUTATIONS ====================

    async def add_product(self, product_id: int) -> CartResult:
        """Add one unit of ``product_id``: a new line, or +1 on an existing one."""
        return await self._run(self._add, MSG_ADD_FAILED, product_id)

    async def remove_product(self, product_id: int) -> CartResult:
        """Remove the line for ``product_id``. Removing an absent product is an error."""
        return await self._run(self._remove, MSG_REMOVE_FAILED, product_id)

    async def update_product_amount(self, product_id: int, amount: int) -> CartResult:
        """Set the quantity of an existing line, within 1..stock."""
        return await self._run(self._update, MSG_UPDATE_FAILED, product_id, amount)

    async def _run(self, operation: Callable[..., Awaitable[Cart]], failure_message: str, *args) -> CartResult:
        async with self._lock:
            try:
                cart = await operation(*args)
            except CartError as e:
                return self._reject(e)
            except Exception as e:
                logger.error(f"Unexpected error in {operation.__name__}: {e}", exc_info=True)
                return self._reject(CollaboratorFailure(failure_message, args[0]))
            return CartResult(cart)

    async def _add(self, product_id: int) -> Cart:
        existing = self._cart.find(product_id)
        if existing is not None:
            return await self._update(product_id, existing.amount + 1)

        stock = await self._fetch_stock(product_id, MSG_ADD_FAILED)
        # A record without an amount counts as no stock
        if stock.amount is None or stock.amount < 1:
            raise StockUnavailable(product_id)

        try:
            product = await self.products.get_product(product_id)
        except ApiError as e:
            logger.error(f"Catalog lookup failed for product {product_id}: {e}")
            raise CollaboratorFailure(MSG_ADD_FAILED, product_id) from e
        if product.id != product_id:
            logger.error(f"Catalog returned product {product.id} for id {product_id}")
            raise CollaboratorFailure(MSG_ADD_FAILED, product_id)

        return await self._commit(self._cart.appended(CartLine.from_product(product)), MSG_ADD_FAILED)

    async def _remove(self, product_id: int) -> Cart:
        if self._cart.find(product_id) is None:
            raise LineNotFound(MSG_REMOVE_FAILED, product_id)
        return await self._commit(self._cart.without(product_id), MSG_REMOVE_FAILED)

    async def _update(self, product_id: int, amount: int) -> Cart:
        if self._cart.find(product_id) is None:
            raise LineNotFound(MSG_UPDATE_FAILED, product_id)

        stock = await self._fetch_stock(product_id, MSG_UPDATE_FAILED)
        if stock.amount is None:
            logger.error(f"Stock record for product {product_id} has no amount")
            raise CollaboratorFailure(MSG_UPDATE_FAILED, product_id)

        if amount < 1 or amount > stock.amount:
            raise StockUnavailable(product_id)

        return await self._commit(self._cart.with_amount(product_id, amount), MSG_UPDATE_FAILED)

    # ==================== INTERNALS ====================

    async def _fetch_stock(self, product_id: int, failure_message: str) -> Stock:
        try:
            return await self.stock.get_stock(product_id)
        except ApiError as e:
            logger.error(f"Stock lookup failed for product {product_id}: {e}")
            raise CollaboratorFailure(failure_message, product_id) from e

    async def _commit(self, cart: Cart, failure_message: str) -> Cart:
        """Write the snapshot, then publish. Nothing is published if the write fails."""
        raw = serialize_cart(cart)
        try:
            await asyncio.to_thread(self.snapshot.write, self.key, raw)
        except Exception as e:
            logger.error(f"Snapshot write failed for key {self.key}: {e}")
            raise CollaboratorFailure(failure_message) from e

        self._cart = cart
        logger.info(f"Cart committed: {len(cart)} lines, {cart.total_items} items")
        self._publish(cart)
        return cart

    def _publish(self, cart: Cart) -> None:
        for listener in list(self._listeners):
            try:
                listener(cart)
            except Exception:
                logger.exception(f"Cart listener {listener!r} failed")

    def _reject(self, error: CartError) -> CartResult:
        logger.warning(
            f"{type(error).__name__} for product {sanitize_id_for_logging(error.product_id)}: {error}"
        )
        self.notifier.report_error(str(error))
        return CartResult(self._cart, error)

    def _restore(self) -> Cart:
        raw = self.snapshot.read(self.key)
        if not raw:
            return Cart()
        try:
            return deserialize_cart(raw)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            # Left in place; the next commit overwrites it
            logger.warning(f"Corrupted cart snapshot under {self.key}, starting empty: {e}")
            return Cart()
