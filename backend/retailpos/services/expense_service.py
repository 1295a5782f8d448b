# Overview: Store expenses and their ledger postings.

from __future__ import annotations

from typing import Any, Mapping

from ..domain import Expense, StoreState
from ..domain.documents import EXPENSE_STATUSES
from ..domain.ledger import CASH_DRAWER, CATEGORY_EXPENSE, CREDIT, DEBIT
from ..validation import ConflictError, coerce_cents, optional_date, optional_str, require_choice, require_str
from retailpos.time_utils import today_iso
from .document_service import ensure_unique_id
from .ledger_service import append_ledger_entry


def record_expense(state: StoreState, data: Mapping[str, Any]) -> Expense:
    """
    Store an expense. A Paid expense books two legs: DEBIT to the expense
    category, CREDIT out of the cash drawer. Pending ones post nothing yet.
    """
    expense_id = optional_str(data, "id")
    if expense_id and any(e.id == expense_id for e in state.expenses):
        raise ConflictError(f"Expense {expense_id!r} already exists")

    expense = Expense(
        id=ensure_unique_id((e.id for e in state.expenses), expense_id, state, "EXPENSE", "EXP"),
        title=require_str(data, "title"),
        category=require_str(data, "category"),
        amount_cents=coerce_cents(data.get("amount_cents"), "amount_cents"),
        date=optional_date(data, "date") or today_iso(),
        status=require_choice(data.get("status", "Paid"), "status", EXPENSE_STATUSES),
    )
    state.expenses.append(expense)

    if expense.status == "Paid":
        append_ledger_entry(
            state,
            description=f"Expense: {expense.title}",
            entry_type=DEBIT,
            amount_cents=expense.amount_cents,
            account=("EXPENSE", expense.category),
            category=CATEGORY_EXPENSE,
            reference_id=expense.id,
        )
        append_ledger_entry(
            state,
            description=f"Payment for {expense.title}",
            entry_type=CREDIT,
            amount_cents=expense.amount_cents,
            account=CASH_DRAWER,
            category=CATEGORY_EXPENSE,
            reference_id=expense.id,
        )
    return expense
