"""
Business documents: invoices, purchases, expenses and stock adjustments.

Invoices and purchases never have their totals rewritten. Returns and receipts
are appended as history entries that reference the document.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .base import Record

# Invoice statuses
INVOICE_PAID = "Paid"
INVOICE_PENDING = "Pending"
INVOICE_RETURNED = "Returned"
INVOICE_PARTIAL_REFUND = "Partial Refund"
INVOICE_STATUSES = (INVOICE_PAID, INVOICE_PENDING, INVOICE_RETURNED, INVOICE_PARTIAL_REFUND)

PAYMENT_CASH = "Cash"
PAYMENT_METHODS = ("Cash", "Card", "Online", "Multiple", "Balance", "Loan", "Store Credit")

# Purchase types
PURCHASE_INVOICE = "INVOICE"  # instant, full receipt at creation
PURCHASE_ORDER = "ORDER"      # awaiting delivery
PURCHASE_TYPES = (PURCHASE_INVOICE, PURCHASE_ORDER)

# Purchase statuses
STATUS_ORDERED = "Ordered"
STATUS_PENDING = "Pending"
STATUS_PARTIAL = "Partial"
STATUS_COMPLETED = "Completed"
STATUS_RECEIVED = "Received"
PURCHASE_STATUSES = (STATUS_ORDERED, STATUS_PENDING, STATUS_PARTIAL, STATUS_COMPLETED, STATUS_RECEIVED)

ADJUSTMENT_REASONS = ("Damaged", "Expired", "Theft", "Correction", "Gift")
EXPENSE_STATUSES = ("Paid", "Pending")


@dataclass
class PaymentSplit(Record):
    method: str
    amount_cents: int


@dataclass
class CartItem(Record):
    """A sold line, snapshotted onto the invoice at sale time."""
    product_id: str
    name: str
    quantity: int
    price_cents: int = 0
    variant_id: Optional[str] = None
    variant_name: Optional[str] = None
    item_discount_cents: int = 0
    is_custom: bool = False
    borrowed_supplier_id: Optional[str] = None
    borrowed_cost_cents: int = 0
    returned_quantity: int = 0

    @property
    def is_borrowed(self) -> bool:
        return bool(self.borrowed_supplier_id)

    @property
    def consumes_stock(self) -> bool:
        return not (self.is_custom or self.is_borrowed)


@dataclass
class ReturnItem(Record):
    product_id: str
    quantity: int
    refund_amount_cents: int
    product_name: str = ""
    reason: str = ""
    variant_id: Optional[str] = None


@dataclass
class ReturnHistoryEntry(Record):
    id: str
    date: str
    total_refund_cents: int
    items: list = field(default_factory=list)
    note: Optional[str] = None

    _nested = {"items": ReturnItem}


@dataclass
class Invoice(Record):
    id: str
    total_cents: int
    customer_name: str = ""
    customer_id: Optional[str] = None
    date: Optional[str] = None
    status: str = INVOICE_PAID
    payment_method: Optional[str] = None
    payment_splits: list = field(default_factory=list)
    items: list = field(default_factory=list)
    loyalty_points_used: int = 0
    loyalty_points_earned: int = 0
    returns: list = field(default_factory=list)

    _nested = {"items": CartItem, "payment_splits": PaymentSplit, "returns": ReturnHistoryEntry}

    def find_line(self, product_id: str, variant_id: Optional[str] = None) -> CartItem | None:
        """
        Line sold as (product_id, variant_id).

        Without a variant_id the product alone identifies the line, but only
        when the invoice has exactly one line for that product.
        """
        exact = next((i for i in self.items if i.product_id == product_id and i.variant_id == variant_id), None)
        if exact is not None or variant_id is not None:
            return exact
        candidates = [i for i in self.items if i.product_id == product_id]
        return candidates[0] if len(candidates) == 1 else None

    @property
    def total_refunded_cents(self) -> int:
        return sum(r.total_refund_cents for r in self.returns)


@dataclass
class PurchaseItem(Record):
    product_id: str
    quantity: int
    cost_cents: int
    product_name: str = ""
    received_quantity: int = 0
    batch_no: Optional[str] = None
    expiry_date: Optional[str] = None

    @property
    def remaining_quantity(self) -> int:
        return max(0, self.quantity - self.received_quantity)


@dataclass
class ReceiptItem(Record):
    product_id: str
    quantity: int
    product_name: str = ""
    batch_no: Optional[str] = None
    expiry_date: Optional[str] = None


@dataclass
class ReceiptEntry(Record):
    """Immutable record of exactly what arrived in one receiving event."""
    id: str
    date: str
    items: list = field(default_factory=list)
    note: Optional[str] = None

    _nested = {"items": ReceiptItem}


@dataclass
class Purchase(Record):
    id: str
    supplier_id: str
    type: str = PURCHASE_ORDER
    supplier_name: str = ""
    invoice_number: str = ""
    date: Optional[str] = None
    items: list = field(default_factory=list)
    total_cents: int = 0
    status: str = STATUS_ORDERED
    received_history: list = field(default_factory=list)
    return_history: list = field(default_factory=list)

    _nested = {"items": PurchaseItem, "received_history": ReceiptEntry, "return_history": ReturnHistoryEntry}

    def find_line(self, product_id: str) -> PurchaseItem | None:
        return next((i for i in self.items if i.product_id == product_id), None)

    @property
    def ordered_quantity(self) -> int:
        return sum(i.quantity for i in self.items)

    @property
    def received_quantity(self) -> int:
        return sum(i.received_quantity for i in self.items)


@dataclass
class Expense(Record):
    id: str
    title: str
    category: str
    amount_cents: int
    date: Optional[str] = None
    status: str = "Paid"


@dataclass(frozen=True)
class StockAdjustment(Record):
    """Append-only audit record, always paired with a stock mutation."""
    id: str
    date: str
    product_id: str
    product_name: str
    quantity: int
    reason: str
    cost_amount_cents: int
    lot_id: Optional[str] = None
