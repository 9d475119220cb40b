"""Cart models with Decimal-based pricing.

Both classes are immutable: every mutation builds a new Cart, so a published
cart can be handed to listeners without copying.
"""
import json
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Iterator, Optional

from cartsync.services.models import Product
from cartsync.services.money import line_total, parse_price, round_money

# Keys owned by CartLine; anything else in a record travels in ``extra``
_LINE_KEYS = ("id", "title", "price", "image", "amount")


@dataclass(frozen=True)
class CartLine:
    """One product in the cart with its quantity."""
    product_id: int
    title: str
    price: Decimal
    amount: int
    image: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.amount, bool) or not isinstance(self.amount, int) or self.amount < 1:
            raise ValueError(f"amount must be a positive integer, got {self.amount!r}")
        object.__setattr__(self, "price", parse_price(self.price))

    @classmethod
    def from_product(cls, product: Product, amount: int = 1) -> "CartLine":
        """Build a line carrying the whole product record."""
        return cls(
            product_id=product.id,
            title=product.title,
            price=product.price,
            image=product.image,
            amount=amount,
            extra=dict(product.model_extra or {}),
        )

    @property
    def subtotal(self) -> Decimal:
        """Total price for all units."""
        return line_total(self.price, self.amount)

    def with_amount(self, amount: int) -> "CartLine":
        return replace(self, amount=amount)

    def to_dict(self) -> dict:
        """Product record plus amount, the snapshot shape of a line."""
        data = dict(self.extra)
        data.update({
            "id": self.product_id,
            "title": self.title,
            "price": str(self.price),
            "image": self.image,
            "amount": self.amount,
        })
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        """Create from a snapshot entry. Raises KeyError/TypeError/ValueError on bad data."""
        return cls(
            product_id=int(data["id"]),
            title=str(data["title"]),
            price=data.get("price"),
            image=data.get("image"),
            amount=data["amount"],
            extra={k: v for k, v in data.items() if k not in _LINE_KEYS},
        )


@dataclass(frozen=True)
class Cart:
    """Ordered cart lines, at most one per product id."""
    lines: tuple[CartLine, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "lines", tuple(self.lines))
        ids = [line.product_id for line in self.lines]
        if len(ids) != len(set(ids)):
            raise ValueError("cart contains duplicate product ids")

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def product_ids(self) -> list[int]:
        return [line.product_id for line in self.lines]

    @property
    def total_items(self) -> int:
        """Total number of units in the cart."""
        return sum(line.amount for line in self.lines)

    @property
    def subtotal(self) -> Decimal:
        return round_money(sum((line.subtotal for line in self.lines), Decimal("0")))

    def find(self, product_id: int) -> Optional[CartLine]:
        return next((line for line in self.lines if line.product_id == product_id), None)

    def amount_of(self, product_id: int) -> int:
        """Quantity of ``product_id`` in the cart, 0 when absent."""
        line = self.find(product_id)
        return line.amount if line else 0

    def appended(self, line: CartLine) -> "Cart":
        return Cart(self.lines + (line,))

    def with_amount(self, product_id: int, amount: int) -> "Cart":
        """Replace one line's amount; other lines and order are untouched."""
        return Cart(tuple(
            line.with_amount(amount) if line.product_id == product_id else line
            for line in self.lines
        ))

    def without(self, product_id: int) -> "Cart":
        return Cart(tuple(line for line in self.lines if line.product_id != product_id))

    def to_list(self) -> list[dict]:
        return [line.to_dict() for line in self.lines]

    @classmethod
    def from_list(cls, data: list) -> "Cart":
        if not isinstance(data, list):
            raise TypeError(f"cart snapshot must be a list, got {type(data).__name__}")
        return cls(tuple(CartLine.from_dict(item) for item in data))


def serialize_cart(cart: Cart) -> str:
    """Snapshot form of a cart: a JSON list of line objects."""
    return json.dumps(cart.to_list(), ensure_ascii=False)


def deserialize_cart(raw: str) -> Cart:
    """
    Parse a snapshot.

    Raises:
        ValueError: invalid JSON, invalid line or duplicate ids
        TypeError/KeyError: wrong shape
    """
    return Cart.from_list(json.loads(raw))
