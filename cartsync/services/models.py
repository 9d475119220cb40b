"""API payload models - Pydantic models for product and stock records."""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from cartsync.services.money import parse_price


class Product(BaseModel):
    """Product record returned by the catalog.

    Unknown attributes are kept: a cart line carries the whole record, so a
    field added to the API shows up in the cart without a code change.
    """
    model_config = ConfigDict(extra="allow")

    id: int
    title: str
    price: Decimal
    image: Optional[str] = None

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return parse_price(v)


class Stock(BaseModel):
    """Stock record: how many units of a product can be bought."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    amount: Optional[int] = None
