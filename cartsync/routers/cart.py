"""
Cart Router

HTTP surface over the session CartStore. Every mutation answers with the
current cart; a rejected mutation answers with the reported message and a
status derived from the error type.
"""
from fastapi import APIRouter, Depends, HTTPException

from cartsync.cart import Cart, CartResult, CartStore
from cartsync.errors import CollaboratorFailure, LineNotFound, StockUnavailable
from cartsync.services.money import to_float
from .deps import get_cart_store
from .models import AddToCartRequest, CartLineResponse, CartResponse, UpdateCartItemRequest

router = APIRouter(tags=["cart"])

ERROR_STATUS = {
    StockUnavailable: 409,
    LineNotFound: 404,
    CollaboratorFailure: 502,
}


def _format_cart_response(cart: Cart) -> CartResponse:
    return CartResponse(
        items=[
            CartLineResponse(
                id=line.product_id,
                title=line.title,
                image=line.image,
                price=to_float(line.price),
                amount=line.amount,
                subtotal=to_float(line.subtotal),
            )
            for line in cart
        ],
        total_items=cart.total_items,
        total=to_float(cart.subtotal),
    )


def _unwrap(result: CartResult) -> CartResponse:
    if result.error is not None:
        status = ERROR_STATUS.get(type(result.error), 500)
        raise HTTPException(status_code=status, detail=str(result.error))
    return _format_cart_response(result.cart)


@router.get("/cart", response_model=CartResponse)
async def get_cart(store: CartStore = Depends(get_cart_store)):
    """Current cart with totals."""
    return _format_cart_response(store.cart)


@router.post("/cart/items", response_model=CartResponse)
async def add_cart_item(request: AddToCartRequest, store: CartStore = Depends(get_cart_store)):
    """Add one unit of a product."""
    return _unwrap(await store.add_product(request.product_id))


@router.patch("/cart/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: int,
    request: UpdateCartItemRequest,
    store: CartStore = Depends(get_cart_store),
):
    """Set the quantity of a line already in the cart."""
    return _unwrap(await store.update_product_amount(product_id, request.amount))


@router.delete("/cart/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(product_id: int, store: CartStore = Depends(get_cart_store)):
    """Remove a line from the cart."""
    return _unwrap(await store.remove_product(product_id))
