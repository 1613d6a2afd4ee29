"""Domain errors shared by the catalog, cart, order and account services.

Every error carries a stable ``kind`` string so callers can tell failure
reasons apart without matching on message text.
"""

from typing import Optional


class StoreError(Exception):
    kind = "error"
    default_message = "Request could not be completed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class ValidationError(StoreError):
    kind = "validation"
    default_message = "Invalid input"


class NotFoundError(StoreError):
    kind = "not_found"
    default_message = "Not found"


class InvalidStateError(StoreError):
    kind = "invalid_state"
    default_message = "Operation not allowed in the current state"


class EmptyCartError(StoreError):
    kind = "empty_cart"
    default_message = "Cart is empty"


class InsufficientStockError(StoreError):
    kind = "insufficient_stock"

    def __init__(self, product_id, product_name: Optional[str] = None, message: Optional[str] = None) -> None:
        self.product_id = product_id
        self.product_name = product_name
        label = product_name or f"product {product_id}"
        super().__init__(message or f"Insufficient stock for {label}")
