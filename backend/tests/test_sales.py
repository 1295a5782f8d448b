# Overview: Pytest coverage for sale recording.

"""
Sale Recording Tests

Covers the fan-out of one sale across register shift, customer loyalty,
ledger, stock and borrowed-goods supplier debt, plus all-or-nothing rollback.
"""

import pytest

from retailpos.domain.ledger import CATEGORY_PURCHASE, CATEGORY_SALES, CREDIT, DEBIT
from retailpos.services import sales_service
from retailpos.time_utils import today_iso
from retailpos.validation import ConflictError, InvalidArgumentError, NotFoundError

pytestmark = pytest.mark.sales


def cash_sale(total_cents=5000, **extra):
    data = {
        "total_cents": total_cents,
        "payment_method": "Cash",
        "items": [{"product_id": "p-1", "name": "Widget", "quantity": 1, "price_cents": total_cents}],
    }
    data.update(extra)
    return data


class TestRegisterEffects:
    def test_cash_sale_grows_expected_balance(self, processor):
        """Open with 100.00, sell 50.00 cash: expected 150.00, float DEBIT then sale CREDIT."""
        processor.open_register(10000)
        processor.record_sale(cash_sale(5000))

        session = processor.state.register_session
        assert session.expected_balance_cents == 15000
        assert session.sales_count == 1
        assert session.total_sales_cents == 5000

        opening, sale = processor.state.ledger
        assert (opening.type, opening.amount_cents, opening.account_name) == (DEBIT, 10000, "Cash Drawer")
        assert (sale.type, sale.amount_cents, sale.account_name) == (CREDIT, 5000, "Walk-in Sales")
        assert sale.category == CATEGORY_SALES

    def test_split_payment_counts_cash_portion_only(self, processor):
        processor.open_register(0)
        processor.record_sale(cash_sale(
            10000,
            payment_method="Multiple",
            payment_splits=[
                {"method": "Cash", "amount_cents": 6000},
                {"method": "Card", "amount_cents": 4000},
            ],
        ))

        session = processor.state.register_session
        assert session.expected_balance_cents == 6000
        assert session.total_sales_cents == 10000
        # The ledger still records the full sale
        assert processor.state.ledger[-1].amount_cents == 10000

    def test_card_sale_leaves_drawer_alone(self, processor):
        processor.open_register(2000)
        processor.record_sale(cash_sale(5000, payment_method="Card"))
        assert processor.state.register_session.expected_balance_cents == 2000
        assert processor.state.register_session.sales_count == 1

    def test_sale_without_open_shift(self, processor):
        invoice = processor.record_sale(cash_sale())
        assert processor.state.register_session is None
        assert processor.state.invoices == [invoice]


class TestCustomerEffects:
    def test_known_customer_earns_points(self, processor):
        invoice = processor.record_sale(cash_sale(12345, customer_id="c-1"))

        customer = processor.state.customer("c-1")
        assert customer.loyalty_points == 123
        assert customer.total_purchases_cents == 12345
        assert customer.last_visit == today_iso()
        assert invoice.loyalty_points_earned == 123
        assert processor.state.ledger[-1].account_id == "c-1"

    def test_points_used_are_deducted(self, processor):
        processor.state.customer("c-1").loyalty_points = 40
        processor.record_sale(cash_sale(5000, customer_id="c-1", loyalty_points_used=30))
        assert processor.state.customer("c-1").loyalty_points == 40 + 50 - 30

    def test_customer_matched_by_name(self, processor):
        invoice = processor.record_sale(cash_sale(2000, customer_name="Alice"))
        assert invoice.customer_id == "c-1"
        assert processor.state.customer("c-1").loyalty_points == 20

    def test_unknown_customer_name_is_walk_in(self, processor):
        processor.record_sale(cash_sale(2000, customer_name="Stranger"))
        assert processor.state.ledger[-1].account_id == "WALK_IN"
        assert processor.state.customer("c-1").loyalty_points == 0

    def test_unknown_customer_id_rejected(self, processor):
        with pytest.raises(NotFoundError):
            processor.record_sale(cash_sale(customer_id="c-404"))
        assert processor.state.invoices == []
        assert processor.state.ledger == []
        assert processor.state.product("p-1").stock == 10


class TestStockEffects:
    def test_variant_sale_moves_only_variant(self, processor):
        processor.record_sale({
            "total_cents": 6000,
            "items": [{"product_id": "p-2", "variant_id": "v-2s", "name": "Gadget", "quantity": 2, "price_cents": 3000}],
        })
        product = processor.state.product("p-2")
        assert product.find_variant("v-2s").stock == 3
        assert product.find_variant("v-2l").stock == 3
        assert product.stock == 0

    def test_negative_stock_is_preserved(self, processor):
        processor.record_sale({
            "total_cents": 60000,
            "items": [{"product_id": "p-1", "name": "Widget", "quantity": 12, "price_cents": 5000}],
        })
        assert processor.state.product("p-1").stock == -2

    def test_strict_policy_rejects_oversell(self, strict_processor):
        with pytest.raises(InvalidArgumentError):
            strict_processor.record_sale({
                "total_cents": 60000,
                "items": [
                    {"product_id": "p-1", "name": "Widget", "quantity": 6, "price_cents": 5000},
                    {"product_id": "p-1", "name": "Widget", "quantity": 6, "price_cents": 5000},
                ],
            })
        assert strict_processor.state.product("p-1").stock == 10
        assert strict_processor.state.invoices == []

    def test_custom_line_touches_no_stock(self, processor):
        processor.record_sale({
            "total_cents": 700,
            "items": [{"product_id": "custom-1", "name": "Gift wrap", "quantity": 1, "price_cents": 700, "is_custom": True}],
        })
        assert [p.stock for p in processor.state.products] == [10, 0, 10]

    def test_unknown_product_rejected(self, processor):
        with pytest.raises(NotFoundError):
            processor.record_sale({"total_cents": 100, "items": [{"product_id": "p-404", "quantity": 1}]})

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2.5", True])
    def test_bad_quantity_rejected(self, processor, quantity):
        with pytest.raises(InvalidArgumentError):
            processor.record_sale({"total_cents": 100, "items": [{"product_id": "p-1", "quantity": quantity}]})

    def test_negative_total_rejected(self, processor):
        with pytest.raises(InvalidArgumentError):
            processor.record_sale(cash_sale(-1))


class TestBorrowedLines:
    def test_borrowed_line_creates_supplier_debt(self, processor):
        """Borrowed 3 @ 5.00 from s-1: balance +15.00, stock untouched, PURCHASE CREDIT."""
        invoice = processor.record_sale({
            "total_cents": 4500,
            "items": [{
                "product_id": "p-1", "name": "Widget", "quantity": 3, "price_cents": 1500,
                "borrowed_supplier_id": "s-1", "borrowed_cost_cents": 500,
            }],
        })

        assert processor.state.supplier("s-1").balance_cents == 1500
        assert processor.state.product("p-1").stock == 10

        debt = [e for e in processor.state.ledger if e.account_id == "s-1"]
        assert len(debt) == 1
        assert (debt[0].type, debt[0].amount_cents, debt[0].category) == (CREDIT, 1500, CATEGORY_PURCHASE)

        auto, = processor.state.purchases
        assert auto.id.startswith("AUTO-PUR-")
        assert auto.status == "Received"
        assert auto.total_cents == 1500
        assert auto.invoice_number == f"AUTO-REF-{invoice.id}"

    def test_borrowed_from_unknown_supplier(self, processor):
        with pytest.raises(NotFoundError):
            processor.record_sale({
                "total_cents": 100,
                "items": [{"product_id": "p-1", "quantity": 1, "borrowed_supplier_id": "s-404", "borrowed_cost_cents": 50}],
            })
        assert processor.state.ledger == []


class TestInvoiceIds:
    def test_ids_are_numbered(self, processor):
        first = processor.record_sale(cash_sale())
        second = processor.record_sale(cash_sale())
        assert first.id == "INV-000001"
        assert second.id == "INV-000002"

    def test_duplicate_id_conflicts(self, processor):
        processor.record_sale(cash_sale(id="INV-A"))
        with pytest.raises(ConflictError):
            processor.record_sale(cash_sale(id="INV-A"))
        assert len(processor.state.invoices) == 1


def test_failure_mid_sale_rolls_everything_back(processor, monkeypatch):
    processor.open_register(1000)

    def boom(state, invoice):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(sales_service, "_record_borrowed_lines", boom)

    with pytest.raises(RuntimeError):
        processor.record_sale(cash_sale(5000, customer_id="c-1"))

    state = processor.state
    assert state.product("p-1").stock == 10
    assert state.invoices == []
    assert len(state.ledger) == 1
    assert state.register_session.expected_balance_cents == 1000
    assert state.customer("c-1").loyalty_points == 0
