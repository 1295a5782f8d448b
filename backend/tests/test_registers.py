# Overview: Pytest coverage for register shift tracking.

import pytest

from retailpos.domain.ledger import CATEGORY_ADJUSTMENT, DEBIT
from retailpos.validation import ConflictError, InvalidArgumentError, NotFoundError

pytestmark = pytest.mark.registers


def test_open_books_float(processor):
    session = processor.open_register(10000)

    assert session.status == "OPEN"
    assert session.opening_balance_cents == 10000
    assert session.expected_balance_cents == 10000
    assert session.opened_at.endswith("Z")

    entry, = processor.state.ledger
    assert entry.description == "Shift Opening Float"
    assert (entry.type, entry.amount_cents, entry.category) == (DEBIT, 10000, CATEGORY_ADJUSTMENT)
    assert (entry.account_id, entry.account_name) == ("CASH", "Cash Drawer")
    assert entry.reference_id == session.id


def test_second_open_conflicts(processor):
    first = processor.open_register(10000)
    with pytest.raises(ConflictError):
        processor.open_register(500)
    assert processor.state.register_session.id == first.id
    assert len(processor.state.ledger) == 1


def test_close_records_discrepancy(processor):
    processor.open_register(10000)
    processor.record_sale({"total_cents": 5000, "payment_method": "Cash",
                           "items": [{"product_id": "p-1", "quantity": 1, "price_cents": 5000}]})

    session = processor.close_register(14950)

    assert session.status == "CLOSED"
    assert session.actual_balance_cents == 14950
    assert session.discrepancy_cents == -50
    assert session.closed_at is not None


def test_close_is_idempotent(processor):
    processor.open_register(10000)
    closed = processor.close_register(10000)
    before = closed.to_dict()

    again = processor.close_register(99999)

    assert again.to_dict() == before
    assert again.discrepancy_cents == 0


def test_close_without_any_session(processor):
    with pytest.raises(NotFoundError):
        processor.close_register(0)


def test_sales_after_close_do_not_count(processor):
    processor.open_register(1000)
    closed = processor.close_register(1000)
    processor.record_sale({"total_cents": 5000, "payment_method": "Cash",
                           "items": [{"product_id": "p-1", "quantity": 1}]})
    assert closed.sales_count == 0
    assert closed.expected_balance_cents == 1000


def test_reopen_after_close(processor):
    first = processor.open_register(1000)
    processor.close_register(1000)
    second = processor.open_register(2000)
    assert second.id != first.id
    assert processor.state.register_session is second


@pytest.mark.parametrize("amount", [-1, "ten", None, 10.5])
def test_bad_float_rejected(processor, amount):
    with pytest.raises(InvalidArgumentError):
        processor.open_register(amount)
    assert processor.state.register_session is None
