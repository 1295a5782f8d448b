"""
Ledger Invariants (authoritative)

- Append-only: entries are never updated or deleted once written.
- Every entry is a single DEBIT or CREDIT leg against one named account.
- date is the business date (YYYY-MM-DD); referenceId links the entry to
  the invoice / purchase / adjustment that produced it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .base import Record

DEBIT = "DEBIT"
CREDIT = "CREDIT"
ENTRY_TYPES = (DEBIT, CREDIT)

CATEGORY_SALES = "SALES"
CATEGORY_PURCHASE = "PURCHASE"
CATEGORY_EXPENSE = "EXPENSE"
CATEGORY_PAYMENT = "PAYMENT"
CATEGORY_ADJUSTMENT = "ADJUSTMENT"
CATEGORIES = (
    CATEGORY_SALES,
    CATEGORY_PURCHASE,
    CATEGORY_EXPENSE,
    CATEGORY_PAYMENT,
    CATEGORY_ADJUSTMENT,
)

# Well-known accounts: (account_id, account_name)
CASH_DRAWER = ("CASH", "Cash Drawer")
WALK_IN_SALES = ("WALK_IN", "Walk-in Sales")
SALES_RETURN = ("SALES_RETURN", "Sales Return")
INVENTORY_SHRINKAGE = ("SHRINKAGE", "Inventory Loss/Shrinkage")
EXPENSES = ("EXPENSE", "Expenses")


@dataclass(frozen=True)
class LedgerEntry(Record):
    id: str
    date: str
    description: str
    type: str
    amount_cents: int
    account_id: str
    account_name: str
    category: str
    reference_id: Optional[str] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None

    @property
    def signed_amount_cents(self) -> int:
        """Debit-positive amount, for account balance folds."""
        return self.amount_cents if self.type == DEBIT else -self.amount_cents
