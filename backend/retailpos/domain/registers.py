from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .base import Record

SESSION_OPEN = "OPEN"
SESSION_CLOSED = "CLOSED"


@dataclass
class RegisterSession(Record):
    """
    One cash-drawer shift.

    LIFECYCLE:
    - OPEN: expected_balance_cents grows with the cash portion of each sale
    - CLOSED: actual count recorded, discrepancy = actual - expected

    Once closed the session is never modified again; a new one is opened instead.
    """
    id: str
    opened_at: str
    opening_balance_cents: int
    expected_balance_cents: int
    status: str = SESSION_OPEN
    sales_count: int = 0
    total_sales_cents: int = 0
    closed_at: Optional[str] = None
    actual_balance_cents: Optional[int] = None
    discrepancy_cents: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.status == SESSION_OPEN
