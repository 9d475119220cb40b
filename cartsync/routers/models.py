"""
Cart API Pydantic Models
"""
from pydantic import BaseModel


class AddToCartRequest(BaseModel):
    product_id: int


class UpdateCartItemRequest(BaseModel):
    # 0 is accepted here and rejected by the store as out of stock
    amount: int


class CartLineResponse(BaseModel):
    id: int
    title: str
    image: str | None = None
    price: float
    amount: int
    subtotal: float


class CartResponse(BaseModel):
    items: list[CartLineResponse]
    total_items: int
    total: float
