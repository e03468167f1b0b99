"""
Exception hierarchy for stock and product operations.

Every error carries a stable ``code`` for programmatic handling and the HTTP
``status_code`` the API layer answers with. Catch ``InventoryError`` to handle
any failure raised by the service layer.
"""

from typing import Any


class InventoryError(Exception):
    """Base exception for all inventory errors."""

    code: str = "inventory_error"
    status_code: int = 500

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = "An unspecified inventory error occurred."
        self.message = message
        super().__init__(message)


class InvalidQuantity(InventoryError):
    """
    Raised when an adjustment quantity is not a positive whole number.

    Detected before the store is touched, so nothing is ever mutated.
    """

    code: str = "invalid_quantity"
    status_code: int = 400

    def __init__(self, quantity: Any = None) -> None:
        self.quantity = quantity
        super().__init__("Quantity must be a positive number")


class ProductNotFound(InventoryError):
    code: str = "not_found"
    status_code: int = 404

    def __init__(self, product_id: Any) -> None:
        self.product_id = product_id
        super().__init__("Product not found")


class InsufficientStock(InventoryError):
    """
    Raised when a decrease would take the stock count below zero.

    ``available`` is the stock observed when the failure was classified,
    ``requested`` is the quantity the caller asked to remove.
    """

    code: str = "insufficient_stock"
    status_code: int = 400

    def __init__(self, product_id: Any, available: int, requested: int) -> None:
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock. Available: {available}, Requested: {requested}"
        )


class StoreUnavailable(InventoryError):
    """
    Raised when the underlying record store fails.

    The message stays generic; the underlying exception is chained for the logs.
    """

    code: str = "store_unavailable"
    status_code: int = 500

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Internal server error")


class StockLimitExceeded(InventoryError):
    """
    Raised when an increase would push the stock count past the largest value
    the counter column can hold. Nothing is mutated.
    """

    code: str = "stock_limit_exceeded"
    status_code: int = 400

    def __init__(self, product_id: Any, available: int, requested: int, limit: int) -> None:
        self.product_id = product_id
        self.available = available
        self.requested = requested
        self.limit = limit
        super().__init__(
            f"Stock limit exceeded. Available: {available}, Requested: {requested}, Maximum: {limit}"
        )


class InvalidDirection(InventoryError):
    code: str = "invalid_direction"
    status_code: int = 400

    def __init__(self, direction: Any) -> None:
        self.direction = direction
        super().__init__("Direction must be 'increase' or 'decrease'")
