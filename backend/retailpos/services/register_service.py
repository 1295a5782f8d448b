"""
Register and Shift Management Service

WHY: Cash accountability for the single cash drawer. Each shift tracks
opening float, expected cash (opening + cash portion of sales) and the
actual count at close.

DESIGN PRINCIPLES:
- At most one OPEN session at a time
- Sessions are immutable once closed
- Expected balance moves only by the cash-method portion of a payment;
  card/online tenders are reconciled through the ledger, not the drawer
"""

from __future__ import annotations

from ..domain import Invoice, RegisterSession, StoreState
from ..domain.documents import PAYMENT_CASH
from ..domain.ledger import CASH_DRAWER, CATEGORY_ADJUSTMENT, DEBIT
from ..domain.registers import SESSION_CLOSED, SESSION_OPEN
from ..validation import ConflictError, NotFoundError, coerce_cents
from retailpos.time_utils import to_utc_z, utcnow
from .document_service import next_document_number
from .ledger_service import append_ledger_entry


def cash_portion_cents(invoice: Invoice) -> int:
    """
    Cash part of a payment.

    Sum of Cash splits when splits are given; otherwise the whole total
    if the invoice was paid in Cash; otherwise nothing.
    """
    if invoice.payment_splits:
        return sum(s.amount_cents for s in invoice.payment_splits if s.method == PAYMENT_CASH)
    if invoice.payment_method == PAYMENT_CASH:
        return invoice.total_cents
    return 0


def get_open_session(state: StoreState) -> RegisterSession | None:
    session = state.register_session
    if session is not None and session.is_open:
        return session
    return None


def open_register(state: StoreState, amount_cents) -> RegisterSession:
    """
    Open a new shift with an opening float.

    Raises:
        ConflictError: if a shift is already open
    """
    amount = coerce_cents(amount_cents, "amount_cents")

    existing = get_open_session(state)
    if existing is not None:
        raise ConflictError(f"Register already has open shift (session {existing.id})")

    session = RegisterSession(
        id=next_document_number(state, "REGISTER_SESSION", "REG"),
        opened_at=to_utc_z(utcnow()),
        opening_balance_cents=amount,
        expected_balance_cents=amount,  # Initially same as opening cash
        status=SESSION_OPEN,
    )
    state.register_session = session

    append_ledger_entry(
        state,
        description="Shift Opening Float",
        entry_type=DEBIT,
        amount_cents=amount,
        account=CASH_DRAWER,
        category=CATEGORY_ADJUSTMENT,
        reference_id=session.id,
    )
    return session


def close_register(state: StoreState, actual_amount_cents) -> RegisterSession:
    """
    Close the shift and calculate the cash discrepancy.

    Closing an already closed session is a no-op that returns it unchanged.

    Raises:
        NotFoundError: if no session was ever opened
    """
    actual = coerce_cents(actual_amount_cents, "actual_amount_cents")

    session = state.register_session
    if session is None:
        raise NotFoundError("RegisterSession", None)
    if session.status == SESSION_CLOSED:
        return session

    session.status = SESSION_CLOSED
    session.closed_at = to_utc_z(utcnow())
    session.actual_balance_cents = actual
    session.discrepancy_cents = actual - session.expected_balance_cents
    return session


def apply_sale(state: StoreState, invoice: Invoice) -> RegisterSession | None:
    """Count a sale against the open shift, if any."""
    session = get_open_session(state)
    if session is None:
        return None
    session.sales_count += 1
    session.total_sales_cents += invoice.total_cents
    session.expected_balance_cents += cash_portion_cents(invoice)
    return session


def apply_cash_refund(state: StoreState, invoice: Invoice, refund_cents: int) -> RegisterSession | None:
    """Cash refunds on Cash invoices leave the drawer during the open shift."""
    session = get_open_session(state)
    if session is None or invoice.payment_method != PAYMENT_CASH:
        return None
    session.expected_balance_cents -= refund_cents
    return session
