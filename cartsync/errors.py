"""
Cart errors and user-facing messages.

Two families live here:
- ApiError and subclasses: raised by the product/stock HTTP client.
- CartError and subclasses: the typed outcome of a rejected cart operation.
  The cart store never raises these to its callers; it returns them in a
  CartResult and reports ``str(error)`` to the notifier.
"""

# User-facing messages
MSG_OUT_OF_STOCK = "Requested quantity is out of stock"
MSG_ADD_FAILED = "Failed to add product"
MSG_REMOVE_FAILED = "Failed to remove product"
MSG_UPDATE_FAILED = "Failed to update product quantity"


# ==================== COLLABORATOR ERRORS ====================

class ApiError(Exception):
    """Product/stock API call failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(ApiError):
    """The API has no record for the requested id (HTTP 404)."""


class NetworkError(ApiError):
    """Transport failure, timeout, unexpected status or malformed payload."""


# ==================== CART ERRORS ====================

class CartError(Exception):
    """Base class for rejected cart operations. ``str(err)`` is the user message."""

    def __init__(self, message: str, product_id: int | None = None):
        super().__init__(message)
        self.message = message
        self.product_id = product_id


class StockUnavailable(CartError):
    """Requested amount exceeds reported stock, or stock is zero/absent."""

    def __init__(self, product_id: int | None = None, message: str = MSG_OUT_OF_STOCK):
        super().__init__(message, product_id)


class LineNotFound(CartError):
    """The product targeted by remove/update is not in the cart."""


class CollaboratorFailure(CartError):
    """Catalog, stock or snapshot store call failed."""
