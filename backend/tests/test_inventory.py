# Overview: Pytest coverage for stock adjustments and stock counters.

import pytest

from retailpos.domain.ledger import CATEGORY_ADJUSTMENT, DEBIT
from retailpos.policy import StorePolicy
from retailpos.services.catalog_service import low_stock_products, stock_value_cents
from retailpos.services.inventory_service import apply_stock_delta
from retailpos.validation import InvalidArgumentError, NotFoundError


def test_damaged_adjustment_records_cost(processor):
    """stock 20, cost 10.00, adjust -5 Damaged: stock 15, cost_amount 50.00."""
    product = processor.state.product("p-1")
    product.stock = 20
    product.cost_price_cents = 1000

    adjustment = processor.add_stock_adjustment({"product_id": "p-1", "quantity": -5, "reason": "Damaged"})

    assert processor.state.product("p-1").stock == 15
    assert adjustment.cost_amount_cents == 5000
    assert adjustment.quantity == -5
    assert adjustment.product_name == "Widget"
    assert processor.state.stock_adjustments == [adjustment]

    loss, = processor.state.ledger
    assert (loss.type, loss.amount_cents) == (DEBIT, 5000)
    assert (loss.account_id, loss.account_name, loss.category) == (
        "SHRINKAGE", "Inventory Loss/Shrinkage", CATEGORY_ADJUSTMENT,
    )
    assert loss.reference_id == adjustment.id


def test_positive_adjustment_posts_nothing(processor):
    adjustment = processor.add_stock_adjustment({"product_id": "p-1", "quantity": 4, "reason": "Correction"})
    assert processor.state.product("p-1").stock == 14
    assert adjustment.cost_amount_cents == 4 * 2000
    assert processor.state.ledger == []


def test_adjustment_may_go_negative(processor):
    processor.add_stock_adjustment({"product_id": "p-1", "quantity": -15, "reason": "Theft"})
    assert processor.state.product("p-1").stock == -5


def test_strict_policy_blocks_negative_adjustment(strict_processor):
    with pytest.raises(InvalidArgumentError):
        strict_processor.add_stock_adjustment({"product_id": "p-1", "quantity": -15, "reason": "Theft"})
    assert strict_processor.state.product("p-1").stock == 10
    assert strict_processor.state.stock_adjustments == []


@pytest.mark.parametrize("data", [
    {"product_id": "p-1", "quantity": 0, "reason": "Damaged"},
    {"product_id": "p-1", "quantity": "2.5", "reason": "Damaged"},
    {"product_id": "p-1", "quantity": "1e3", "reason": "Damaged"},
    {"product_id": "p-1", "quantity": -1, "reason": "Lost in space"},
    {"quantity": -1, "reason": "Damaged"},
])
def test_bad_adjustments_rejected(processor, data):
    with pytest.raises(InvalidArgumentError):
        processor.add_stock_adjustment(data)
    assert processor.state.stock_adjustments == []


def test_unknown_product(processor):
    with pytest.raises(NotFoundError):
        processor.add_stock_adjustment({"product_id": "p-404", "quantity": -1, "reason": "Damaged"})


class TestStockCounters:
    def test_variant_delta_leaves_product_counter(self, state):
        product = state.product("p-2")
        assert apply_stock_delta(product, -2, variant_id="v-2l", policy=StorePolicy()) == 1
        assert product.stock == 0

    def test_unknown_variant(self, state):
        with pytest.raises(NotFoundError):
            apply_stock_delta(state.product("p-2"), 1, variant_id="v-404", policy=StorePolicy())

    def test_strict_policy_allows_increase_from_negative(self, state):
        product = state.product("p-1")
        product.stock = -3
        assert apply_stock_delta(product, 1, policy=StorePolicy(allow_negative_stock=False)) == -2

    def test_low_stock(self, state):
        assert [p.id for p in low_stock_products(state)] == ["p-2"]
        state.product("p-1").stock = 3
        assert [p.id for p in low_stock_products(state)] == ["p-1", "p-2"]

    def test_stock_value_prefers_lot_costs(self, state):
        assert stock_value_cents(state.product("p-1")) == 10 * 2000
        vitamins = state.product("p-3")
        vitamins.lots[0].cost_price_cents = 450
        assert stock_value_cents(vitamins) == 10 * 450
