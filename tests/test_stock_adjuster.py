import math
from types import SimpleNamespace

import pytest

from inventory_api.application.stock import StockAdjuster, StockAdjustment, validate_quantity
from inventory_api.domain.errors import (
    InsufficientStock,
    InvalidDirection,
    InvalidQuantity,
    ProductNotFound,
    StockLimitExceeded,
    StoreUnavailable,
)
from inventory_api.domain.models import MAX_STOCK_QUANTITY, StockDirection


class FakeLedgerStore:
    """In-memory store recording every call the adjuster makes."""

    def __init__(self, products=None):
        self.products = products or {}
        self.calls = []

    def _snapshot(self, product_id):
        row = self.products[product_id]
        return SimpleNamespace(
            id=product_id,
            name=row["name"],
            stock_quantity=row["stock_quantity"],
            low_stock_threshold=row["low_stock_threshold"],
            is_low_stock=row["stock_quantity"] < row["low_stock_threshold"],
        )

    def find_by_id(self, product_id):
        self.calls.append(("find_by_id", product_id))
        if product_id not in self.products:
            return None
        return self._snapshot(product_id)

    def conditional_increment(self, product_id, field, delta):
        self.calls.append(("conditional_increment", product_id, field, delta))
        if product_id not in self.products or self.products[product_id][field] > MAX_STOCK_QUANTITY - delta:
            return None
        self.products[product_id][field] += delta
        return self._snapshot(product_id)

    def conditional_decrement(self, product_id, field, delta):
        self.calls.append(("conditional_decrement", product_id, field, delta))
        if product_id not in self.products or self.products[product_id][field] < delta:
            return None
        self.products[product_id][field] -= delta
        return self._snapshot(product_id)


class BrokenStore(FakeLedgerStore):
    def conditional_decrement(self, product_id, field, delta):
        raise StoreUnavailable()


@pytest.fixture
def store():
    return FakeLedgerStore({
        1: {"name": "Widget", "stock_quantity": 100, "low_stock_threshold": 20},
        2: {"name": "Empty", "stock_quantity": 0, "low_stock_threshold": 10},
    })


@pytest.fixture
def adjuster(store):
    return StockAdjuster(store)


def test_increase_adds_quantity(adjuster, store):
    product = adjuster.increase(1, 50)
    assert product.stock_quantity == 150
    assert store.calls == [("conditional_increment", 1, "stock_quantity", 50)]


def test_increase_from_zero(adjuster):
    assert adjuster.increase(2, 25).stock_quantity == 25


def test_large_increase(adjuster):
    assert adjuster.increase(1, 10000).stock_quantity == 10100


def test_decrease_subtracts_quantity(adjuster, store):
    product = adjuster.decrease(1, 30)
    assert product.stock_quantity == 70
    # No disambiguating read on success
    assert [c[0] for c in store.calls] == ["conditional_decrement"]


def test_decrease_to_zero(adjuster):
    assert adjuster.decrease(1, 100).stock_quantity == 0


def test_increase_then_decrease_restores_stock(adjuster):
    adjuster.increase(1, 42)
    assert adjuster.decrease(1, 42).stock_quantity == 100


def test_insufficient_stock_reports_available_and_requested(adjuster, store):
    with pytest.raises(InsufficientStock) as excinfo:
        adjuster.decrease(1, 150)

    assert excinfo.value.available == 100
    assert excinfo.value.requested == 150
    assert str(excinfo.value) == "Insufficient stock. Available: 100, Requested: 150"
    assert store.products[1]["stock_quantity"] == 100
    assert [c[0] for c in store.calls] == ["conditional_decrement", "find_by_id"]


def test_decrease_from_empty_stock(adjuster):
    with pytest.raises(InsufficientStock) as excinfo:
        adjuster.decrease(2, 1)
    assert excinfo.value.available == 0


@pytest.mark.parametrize("direction", [StockDirection.INCREASE, StockDirection.DECREASE])
def test_missing_product_is_not_found(adjuster, direction):
    with pytest.raises(ProductNotFound):
        adjuster.adjust(999, 10, direction)


@pytest.mark.parametrize("quantity", [0, -10, None, "10", "abc", True, 2.5, math.nan, math.inf, [], {}])
def test_invalid_quantity_never_touches_store(adjuster, store, quantity):
    with pytest.raises(InvalidQuantity):
        adjuster.decrease(1, quantity)
    with pytest.raises(InvalidQuantity):
        adjuster.increase(1, quantity)
    assert store.calls == []
    assert store.products[1]["stock_quantity"] == 100


def test_integral_float_is_accepted():
    assert validate_quantity(5.0) == 5
    assert isinstance(validate_quantity(5.0), int)


def test_direction_accepts_plain_strings(adjuster):
    assert adjuster.adjust(1, 5, "decrease").stock_quantity == 95
    assert adjuster.adjust(1, 5, "increase").stock_quantity == 100


def test_store_failure_propagates(store):
    broken = BrokenStore(store.products)
    with pytest.raises(StoreUnavailable):
        StockAdjuster(broken).decrease(1, 10)


def test_sequential_decreases_of_60_and_40(adjuster):
    assert adjuster.decrease(1, 60).stock_quantity == 40
    assert adjuster.decrease(1, 40).stock_quantity == 0


def test_low_stock_warning_after_decrease(adjuster, caplog):
    caplog.set_level("WARNING", logger="inventory_api.application.stock")
    adjuster.decrease(1, 85)
    assert any("Low stock" in record.getMessage() for record in caplog.records)


def test_no_low_stock_warning_above_threshold(adjuster, caplog):
    caplog.set_level("WARNING", logger="inventory_api.application.stock")
    adjuster.decrease(1, 10)
    assert not any("Low stock" in record.getMessage() for record in caplog.records)


@pytest.mark.parametrize("quantity", [MAX_STOCK_QUANTITY + 1, 2**63 - 1, 2**70, float(2**70)])
def test_quantity_above_counter_range_is_invalid(adjuster, store, quantity):
    with pytest.raises(InvalidQuantity):
        adjuster.increase(1, quantity)
    assert store.calls == []


def test_increase_past_counter_limit_is_rejected(adjuster, store):
    with pytest.raises(StockLimitExceeded) as excinfo:
        adjuster.increase(1, MAX_STOCK_QUANTITY - 99)

    assert excinfo.value.available == 100
    assert excinfo.value.limit == MAX_STOCK_QUANTITY
    assert excinfo.value.status_code == 400
    assert store.products[1]["stock_quantity"] == 100
    assert [c[0] for c in store.calls] == ["conditional_increment", "find_by_id"]


def test_increase_up_to_counter_limit(adjuster):
    assert adjuster.increase(1, MAX_STOCK_QUANTITY - 100).stock_quantity == MAX_STOCK_QUANTITY


def test_unknown_direction_is_rejected_before_store(adjuster, store):
    with pytest.raises(InvalidDirection) as excinfo:
        adjuster.adjust(1, 5, "sideways")
    assert excinfo.value.status_code == 400
    assert store.calls == []


def test_apply_reports_validated_quantity(adjuster):
    result = adjuster.apply(1, 5.0, StockDirection.INCREASE)
    assert isinstance(result, StockAdjustment)
    assert result.quantity == 5
    assert isinstance(result.quantity, int)
    assert result.message == "Stock increased by 5"
    assert result.product.stock_quantity == 105
    assert adjuster.apply(1, 5, "decrease").message == "Stock decreased by 5"
