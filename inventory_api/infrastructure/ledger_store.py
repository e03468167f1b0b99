"""
SQL implementation of the Ledger Store.

Every stock mutation is a single ``UPDATE ... RETURNING`` statement, so the
database serializes concurrent adjustments of the same row and the guard
``stock_quantity >= :delta`` (or the overflow guard on increase) is evaluated
against the value being written.
"""

from typing import Optional, Protocol

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_api.core import get_logger
from inventory_api.domain.errors import StoreUnavailable
from inventory_api.domain.models import MAX_STOCK_QUANTITY, Product

logger = get_logger(__name__)

# Integer counter columns that may be adjusted in place
COUNTER_FIELDS = frozenset({"stock_quantity"})


class LedgerStore(Protocol):
    """
    Minimal store interface the stock adjuster depends on.

    Implementations must make both conditional operations atomic per record.
    """
    def find_by_id(self, product_id: int) -> Optional[Product]: ...
    def conditional_increment(self, product_id: int, field: str, delta: int) -> Optional[Product]: ...
    def conditional_decrement(self, product_id: int, field: str, delta: int) -> Optional[Product]: ...


class SqlLedgerStore:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, product_id: int) -> Optional[Product]:
        try:
            product = self.db.execute(
                select(Product)
                .where(Product.id == product_id)
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
            self.db.commit()
            return product
        except SQLAlchemyError as e:
            self._fail("find_by_id", product_id, e)

    def conditional_increment(self, product_id: int, field: str, delta: int) -> Optional[Product]:
        column = self._counter(field)
        stmt = (
            update(Product)
            .where(Product.id == product_id, column <= MAX_STOCK_QUANTITY - delta)
            .values({field: column + delta, "updated_at": func.now()})
        )
        return self._apply(stmt, "conditional_increment", product_id)

    def conditional_decrement(self, product_id: int, field: str, delta: int) -> Optional[Product]:
        column = self._counter(field)
        stmt = (
            update(Product)
            .where(Product.id == product_id, column >= delta)
            .values({field: column - delta, "updated_at": func.now()})
        )
        return self._apply(stmt, "conditional_decrement", product_id)

    def _counter(self, field: str):
        if field not in COUNTER_FIELDS:
            raise ValueError(f"'{field}' is not an adjustable counter field")
        return getattr(Product, field)

    def _apply(self, stmt, operation: str, product_id: int) -> Optional[Product]:
        try:
            product = self.db.execute(
                stmt.returning(Product).execution_options(
                    synchronize_session="fetch", populate_existing=True
                )
            ).scalar_one_or_none()
            self.db.commit()
            return product
        except (SQLAlchemyError, OverflowError) as e:
            self._fail(operation, product_id, e)

    def _fail(self, operation: str, product_id: int, error: Exception):
        self.db.rollback()
        logger.error(
            f"Ledger store {operation} failed for product {product_id}",
            exc_info=True,
            extra={'extra_fields': {'operation': operation, 'product_id': product_id}},
        )
        raise StoreUnavailable() from error
