# Overview: Service-layer operations for the financial ledger.

from __future__ import annotations

from typing import Optional

from ..domain import LedgerEntry, StoreState
from ..domain.ledger import CATEGORIES, ENTRY_TYPES
from ..validation import InvalidArgumentError
from retailpos.time_utils import today_iso
from .document_service import next_document_number
"""
Ledger Invariants (authoritative)

- Append-only: entries are written, never updated or deleted.
- No domain logic here; callers decide which legs an event produces.
- Each entry records the acting user (or "System") at write time.
- date is business date; entries are kept in write order.
"""


def append_ledger_entry(
    state: StoreState,
    *,
    description: str,
    entry_type: str,
    amount_cents: int,
    account: tuple[str, str],
    category: str,
    reference_id: Optional[str] = None,
    date: Optional[str] = None,
) -> LedgerEntry:
    """
    Append one DEBIT or CREDIT leg.

    Args:
        account: (account_id, account_name), e.g. ledger.CASH_DRAWER
        amount_cents: non-negative; the direction is carried by entry_type
    """
    if entry_type not in ENTRY_TYPES:
        raise InvalidArgumentError(f"Invalid ledger entry type {entry_type!r}")
    if category not in CATEGORIES:
        raise InvalidArgumentError(f"Invalid ledger category {category!r}")
    if amount_cents < 0:
        raise InvalidArgumentError("Ledger amount must be non-negative")

    account_id, account_name = account
    user = state.current_user

    entry = LedgerEntry(
        id=next_document_number(state, "LEDGER", "L"),
        date=date or today_iso(),
        description=description,
        type=entry_type,
        amount_cents=amount_cents,
        account_id=account_id,
        account_name=account_name,
        category=category,
        reference_id=reference_id,
        user_id=user.id if user else "sys",
        user_name=user.name if user else "System",
    )
    state.ledger.append(entry)
    return entry


def entries_for_reference(state: StoreState, reference_id: str) -> list[LedgerEntry]:
    return [e for e in state.ledger if e.reference_id == reference_id]


def entries_for_account(state: StoreState, account_id: str) -> list[LedgerEntry]:
    return [e for e in state.ledger if e.account_id == account_id]


def account_balance_cents(state: StoreState, account_id: str, as_of: Optional[str] = None) -> int:
    """
    Debit-positive balance of one account.

    As-of filtering is inclusive: date <= as_of (ISO dates compare lexically).
    """
    total = 0
    for entry in state.ledger:
        if entry.account_id != account_id:
            continue
        if as_of is not None and entry.date > as_of:
            continue
        total += entry.signed_amount_cents
    return total


def totals_by_category(state: StoreState) -> dict[str, dict[str, int]]:
    """{category: {"DEBIT": cents, "CREDIT": cents}} over the whole ledger."""
    totals: dict[str, dict[str, int]] = {}
    for entry in state.ledger:
        bucket = totals.setdefault(entry.category, {t: 0 for t in ENTRY_TYPES})
        bucket[entry.type] += entry.amount_cents
    return totals
