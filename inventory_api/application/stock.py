"""
Race-free stock adjustment.

Each adjustment is exactly one atomic store call. An adjustment that matches
no row is followed by one read whose only job is to tell the caller why; the
read never decides whether anything gets written.
"""

import math
from dataclasses import dataclass
from typing import Any, Union

from inventory_api.core import get_logger
from inventory_api.domain.errors import (
    InsufficientStock,
    InvalidDirection,
    InvalidQuantity,
    ProductNotFound,
    StockLimitExceeded,
)
from inventory_api.domain.models import MAX_STOCK_QUANTITY, Product, StockDirection
from inventory_api.infrastructure.ledger_store import LedgerStore

logger = get_logger(__name__)

STOCK_FIELD = "stock_quantity"


def validate_quantity(quantity: Any) -> int:
    """Return ``quantity`` as an int in 1..MAX_STOCK_QUANTITY or raise ``InvalidQuantity``."""
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
        raise InvalidQuantity(quantity)
    if isinstance(quantity, float):
        if not math.isfinite(quantity) or not quantity.is_integer():
            raise InvalidQuantity(quantity)
        quantity = int(quantity)
    if quantity <= 0 or quantity > MAX_STOCK_QUANTITY:
        raise InvalidQuantity(quantity)
    return quantity


def validate_direction(direction: Union[StockDirection, str]) -> StockDirection:
    try:
        return StockDirection(direction)
    except ValueError:
        raise InvalidDirection(direction) from None


@dataclass(frozen=True)
class StockAdjustment:
    product: Product
    direction: StockDirection
    quantity: int

    @property
    def message(self) -> str:
        return f"Stock {self.direction.value}d by {self.quantity}"


class StockAdjuster:
    def __init__(self, store: LedgerStore):
        self.store = store

    def increase(self, product_id: int, quantity: Any) -> Product:
        return self.adjust(product_id, quantity, StockDirection.INCREASE)

    def decrease(self, product_id: int, quantity: Any) -> Product:
        return self.adjust(product_id, quantity, StockDirection.DECREASE)

    def adjust(self, product_id: int, quantity: Any, direction: Union[StockDirection, str]) -> Product:
        return self.apply(product_id, quantity, direction).product

    def apply(self, product_id: int, quantity: Any, direction: Union[StockDirection, str]) -> StockAdjustment:
        """
        Apply ``quantity`` to the product's stock in the given direction.

        Raises InvalidQuantity or InvalidDirection before touching the store,
        ProductNotFound when the id does not resolve, InsufficientStock when a
        decrease would go below zero, StockLimitExceeded when an increase would
        overflow the counter and StoreUnavailable when the store itself fails.
        """
        delta = validate_quantity(quantity)
        direction = validate_direction(direction)

        if direction is StockDirection.INCREASE:
            product = self.store.conditional_increment(product_id, STOCK_FIELD, delta)
        else:
            product = self.store.conditional_decrement(product_id, STOCK_FIELD, delta)
        if product is None:
            self._reject(self._classify_failure(product_id, delta, direction), direction, delta)

        logger.info(
            f"Stock {direction.value}d by {delta} for product {product_id}",
            extra={'extra_fields': {
                'product_id': product_id,
                'direction': direction.value,
                'quantity': delta,
                'stock_quantity': product.stock_quantity,
            }},
        )
        if direction is StockDirection.DECREASE and product.is_low_stock:
            logger.warning(
                f"Low stock for product '{product.name}' (ID: {product.id}): "
                f"{product.stock_quantity} below threshold {product.low_stock_threshold}",
                extra={'extra_fields': {
                    'product_id': product.id,
                    'stock_quantity': product.stock_quantity,
                    'low_stock_threshold': product.low_stock_threshold,
                }},
            )
        return StockAdjustment(product, direction, delta)

    def _classify_failure(self, product_id: int, delta: int, direction: StockDirection) -> Exception:
        current = self.store.find_by_id(product_id)
        if current is None:
            return ProductNotFound(product_id)
        # Stock may have moved since the update was evaluated; the adjustment
        # still failed and is reported against what is there now.
        if direction is StockDirection.INCREASE:
            return StockLimitExceeded(
                product_id, available=current.stock_quantity, requested=delta, limit=MAX_STOCK_QUANTITY
            )
        return InsufficientStock(product_id, available=current.stock_quantity, requested=delta)

    def _reject(self, error: Exception, direction: StockDirection, delta: int):
        logger.info(
            f"Stock {direction.value} rejected: {error}",
            extra={'extra_fields': {
                'product_id': getattr(error, 'product_id', None),
                'direction': direction.value,
                'quantity': delta,
                'reason': getattr(error, 'code', type(error).__name__),
            }},
        )
        raise error
