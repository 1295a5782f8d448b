# Overview: Pytest coverage for the purchase lifecycle.

"""
Purchase Lifecycle Tests

Ordered -> Partial -> Completed is derived from received vs ordered totals;
INVOICE purchases land Received at creation; terminal states never regress.
"""

import pytest

from retailpos.domain.ledger import CATEGORY_PURCHASE, CREDIT, DEBIT
from retailpos.services.catalog_service import lots_in_sync
from retailpos.validation import InvalidArgumentError, NotFoundError

pytestmark = pytest.mark.purchases


def order(processor, quantity=100, cost=100, product_id="p-1", **extra):
    data = {
        "supplier_id": "s-1",
        "type": "ORDER",
        "items": [{"product_id": product_id, "quantity": quantity, "cost_cents": cost}],
    }
    data.update(extra)
    return processor.record_purchase(data)


class TestRecordPurchase:
    def test_order_books_supplier_liability(self, processor):
        purchase = order(processor)

        assert purchase.status == "Ordered"
        assert purchase.total_cents == 10000
        assert purchase.items[0].product_name == "Widget"
        assert processor.state.supplier("s-1").balance_cents == 10000
        assert processor.state.product("p-1").stock == 10

        entry, = processor.state.ledger
        assert (entry.type, entry.amount_cents, entry.account_id, entry.category) == (
            CREDIT, 10000, "s-1", CATEGORY_PURCHASE,
        )

    def test_explicit_total_wins(self, processor):
        purchase = order(processor, total_cents=9500)
        assert purchase.total_cents == 9500
        assert processor.state.supplier("s-1").balance_cents == 9500

    def test_invoice_type_is_received_at_creation(self, processor):
        purchase = processor.record_purchase({
            "supplier_id": "s-1",
            "type": "INVOICE",
            "items": [
                {"product_id": "p-1", "quantity": 5, "cost_cents": 1000},
                {"product_id": "p-2", "quantity": 2, "cost_cents": 800},
            ],
        })

        assert purchase.status == "Received"
        assert [i.received_quantity for i in purchase.items] == [5, 2]
        assert len(purchase.received_history) == 1
        assert processor.state.product("p-1").stock == 15
        assert processor.state.product("p-2").stock == 2

    def test_unknown_supplier(self, processor):
        with pytest.raises(NotFoundError):
            processor.record_purchase({"supplier_id": "s-404", "items": [{"product_id": "p-1", "quantity": 1, "cost_cents": 1}]})
        assert processor.state.purchases == []

    def test_unknown_type(self, processor):
        with pytest.raises(InvalidArgumentError):
            order(processor, type="LOAN")

    def test_lines_required(self, processor):
        with pytest.raises(InvalidArgumentError):
            processor.record_purchase({"supplier_id": "s-1", "items": []})


class TestReceiving:
    def test_partial_then_completed(self, processor):
        """100 ordered: receive 60 -> Partial, receive 40 -> Completed."""
        purchase = order(processor)

        processor.receive_purchase_items(purchase.id, [{"product_id": "p-1", "quantity": 60}])
        assert purchase.items[0].received_quantity == 60
        assert purchase.status == "Partial"
        assert processor.state.product("p-1").stock == 70

        processor.receive_purchase_items(purchase.id, [{"product_id": "p-1", "quantity": 40}])
        assert purchase.items[0].received_quantity == 100
        assert purchase.status == "Completed"
        assert processor.state.product("p-1").stock == 110
        assert len(purchase.received_history) == 2

    def test_single_receipt_can_complete(self, processor):
        purchase = order(processor, quantity=10)
        processor.receive_purchase_items(purchase.id, [{"product_id": "p-1", "quantity": 10}])
        assert purchase.status == "Completed"

    def test_receiving_does_not_move_balance(self, processor):
        purchase = order(processor, quantity=10)
        ledger_size = len(processor.state.ledger)
        processor.receive_purchase_items(purchase.id, [{"product_id": "p-1", "quantity": 4}])
        assert processor.state.supplier("s-1").balance_cents == 1000
        assert len(processor.state.ledger) == ledger_size

    def test_completed_never_regresses(self, processor):
        purchase = order(processor, quantity=10)
        processor.receive_purchase_items(purchase.id, [{"product_id": "p-1", "quantity": 10}])
        processor.receive_purchase_items(purchase.id, [{"product_id": "p-1", "quantity": 2}])
        assert purchase.status == "Completed"
        assert purchase.items[0].received_quantity == 12

    def test_over_receive_allowed_by_default(self, processor):
        purchase = order(processor, quantity=10)
        processor.receive_purchase_items(purchase.id, [{"product_id": "p-1", "quantity": 15}])
        assert purchase.status == "Completed"
        assert processor.state.product("p-1").stock == 25

    def test_over_receive_rejected_when_disallowed(self, strict_processor):
        purchase = order(strict_processor, quantity=10)
        with pytest.raises(InvalidArgumentError):
            strict_processor.receive_purchase_items(purchase.id, [
                {"product_id": "p-1", "quantity": 6},
                {"product_id": "p-1", "quantity": 6},
            ])
        restored = strict_processor.state.purchase(purchase.id)
        assert restored.items[0].received_quantity == 0
        assert restored.received_history == []
        assert strict_processor.state.product("p-1").stock == 10

    def test_batch_tracked_product_receives_through_lot(self, processor):
        purchase = order(processor, quantity=5, cost=450, product_id="p-3")
        processor.receive_purchase_items(purchase.id, [
            {"product_id": "p-3", "quantity": 5, "batch_no": "B-200", "expiry_date": "2028-01-31"},
        ])

        product = processor.state.product("p-3")
        assert product.stock == 15
        assert [l.lot_number for l in product.lots] == ["A-100", "B-200"]
        assert product.lots[-1].cost_price_cents == 450
        assert product.lots[-1].expiry_date == "2028-01-31"
        assert lots_in_sync(product)

    def test_product_not_on_purchase(self, processor):
        purchase = order(processor)
        with pytest.raises(InvalidArgumentError):
            processor.receive_purchase_items(purchase.id, [{"product_id": "p-2", "quantity": 1}])

    def test_unknown_purchase(self, processor):
        with pytest.raises(NotFoundError):
            processor.receive_purchase_items("PUR-404", [{"product_id": "p-1", "quantity": 1}])

    def test_note_is_kept_on_history(self, processor):
        purchase = order(processor, quantity=3)
        processor.receive_purchase_items(purchase.id, [{"product_id": "p-1", "quantity": 3}], note="dock 2")
        assert purchase.received_history[0].note == "dock 2"


class TestSupplierReturns:
    def _invoice(self, processor):
        return processor.record_purchase({
            "supplier_id": "s-1",
            "type": "INVOICE",
            "items": [{"product_id": "p-1", "quantity": 5, "cost_cents": 1000}],
        })

    def test_return_reduces_balance_and_stock(self, processor):
        purchase = self._invoice(processor)
        assert processor.state.supplier("s-1").balance_cents == 5000

        entry = processor.return_purchase(purchase.id, [
            {"product_id": "p-1", "quantity": 3, "refund_amount_cents": 3000, "reason": "Damaged"},
        ])

        assert processor.state.product("p-1").stock == 12
        assert processor.state.supplier("s-1").balance_cents == 2000
        assert purchase.return_history == [entry]

        last = processor.state.ledger[-1]
        assert (last.type, last.amount_cents, last.account_id) == (DEBIT, 3000, "s-1")

    def test_return_stock_clamped_at_zero(self, processor):
        purchase = self._invoice(processor)
        processor.return_purchase(purchase.id, [
            {"product_id": "p-1", "quantity": 50, "refund_amount_cents": 0},
        ])
        assert processor.state.product("p-1").stock == 0

    def test_return_for_deleted_supplier(self, processor):
        purchase = self._invoice(processor)
        processor.delete_entity("suppliers", "s-1")
        with pytest.raises(NotFoundError):
            processor.return_purchase(purchase.id, [{"product_id": "p-1", "quantity": 1, "refund_amount_cents": 100}])
        assert processor.state.product("p-1").stock == 15
