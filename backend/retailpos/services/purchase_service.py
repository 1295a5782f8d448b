# Overview: Purchase lifecycle: creation, partial receiving and supplier returns.

"""
Purchase Lifecycle

WHY: Supplier orders arrive in pieces. Each purchase line tracks ordered vs
received quantity, and the purchase status is derived from those totals.

LIFECYCLE:
1. Ordered / Pending: ORDER created, nothing received yet
2. Partial: some but not all of the ordered quantity has arrived
3. Completed: sum(received_quantity) >= sum(quantity) across all lines
- Received: terminal state of an INVOICE purchase (instant, full receipt)

Status is never set directly and never moves backward. Every receiving event
appends an immutable received_history entry describing exactly what arrived.

BALANCES: the supplier balance moves on creation (+total) and on return
(-refund). Receiving moves stock only.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..domain import (
    Lot,
    Purchase,
    PurchaseItem,
    ReceiptEntry,
    ReceiptItem,
    ReturnHistoryEntry,
    ReturnItem,
    StoreState,
)
from ..domain.documents import (
    PURCHASE_INVOICE,
    PURCHASE_ORDER,
    PURCHASE_TYPES,
    STATUS_COMPLETED,
    STATUS_ORDERED,
    STATUS_PARTIAL,
    STATUS_PENDING,
    STATUS_RECEIVED,
)
from ..domain.ledger import CATEGORY_PURCHASE, CREDIT, DEBIT
from ..policy import StorePolicy
from ..validation import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    coerce_cents,
    coerce_int,
    optional_date,
    optional_str,
    require_choice,
    require_str,
)
from retailpos.time_utils import to_utc_z, today_iso, utcnow
from .catalog_service import add_lot, new_lot_id
from .document_service import ensure_unique_id, next_document_number
from .inventory_service import apply_stock_delta
from .ledger_service import append_ledger_entry

TERMINAL_STATUSES = {STATUS_COMPLETED, STATUS_RECEIVED}


def derive_status(purchase: Purchase) -> str:
    """Completed iff received >= ordered, else Partial; terminal states stay put."""
    if purchase.status in TERMINAL_STATUSES:
        return purchase.status
    if purchase.received_quantity >= purchase.ordered_quantity:
        return STATUS_COMPLETED
    return STATUS_PARTIAL


def _parse_lines(raw_items: Any) -> list[PurchaseItem]:
    if not isinstance(raw_items, list) or not raw_items:
        raise InvalidArgumentError("items required")

    lines = []
    for raw in raw_items:
        if not isinstance(raw, Mapping):
            raw = PurchaseItem.from_dict(raw).to_dict()
        lines.append(PurchaseItem(
            product_id=require_str(raw, "product_id"),
            product_name=optional_str(raw, "product_name") or "",
            quantity=coerce_int(raw.get("quantity"), "quantity", minimum=1),
            cost_cents=coerce_cents(raw.get("cost_cents"), "cost_cents"),
            batch_no=optional_str(raw, "batch_no"),
            expiry_date=optional_date(raw, "expiry_date"),
        ))
    return lines


def _receive_into_stock(
    state: StoreState,
    product_id: str,
    quantity: int,
    *,
    cost_cents: int,
    batch_no: str | None,
    expiry_date: str | None,
    policy: StorePolicy,
) -> None:
    """
    Put received units on hand.

    A batch number opens a new lot on a batch-tracked product. Without one the
    units go through apply_stock_delta, which tops up the newest lot when the
    product has lots, so product.stock == sum(lots) keeps holding.
    """
    product = state.product(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)

    if product.has_batch and batch_no:
        add_lot(product, Lot(
            id=new_lot_id(state),
            lot_number=batch_no,
            quantity=quantity,
            cost_price_cents=cost_cents,
            expiry_date=expiry_date,
            received_date=today_iso(),
        ))
    else:
        apply_stock_delta(product, quantity, policy=policy)


def record_purchase(state: StoreState, data: Mapping[str, Any], *, policy: StorePolicy) -> Purchase:
    """
    Create a purchase and book the supplier liability.

    INVOICE purchases arrive in full at creation: every line is received,
    stock grows, one received_history entry is written and status is Received.
    ORDER purchases start at Ordered (or Pending when asked) with nothing received.
    """
    supplier_id = require_str(data, "supplier_id")
    purchase_type = require_choice(data.get("type", PURCHASE_ORDER), "type", PURCHASE_TYPES)
    lines = _parse_lines(data.get("items"))

    supplier = state.supplier(supplier_id)
    if supplier is None:
        raise NotFoundError("Supplier", supplier_id)
    for line in lines:
        if state.product(line.product_id) is None:
            raise NotFoundError("Product", line.product_id)
        if not line.product_name:
            line.product_name = state.product(line.product_id).name

    purchase_id = optional_str(data, "id")
    if purchase_id and state.purchase(purchase_id) is not None:
        raise ConflictError(f"Purchase {purchase_id!r} already exists")
    purchase_id = ensure_unique_id((p.id for p in state.purchases), purchase_id, state, "PURCHASE", "PUR")

    if data.get("total_cents") is not None:
        total = coerce_cents(data["total_cents"], "total_cents")
    else:
        total = sum(line.quantity * line.cost_cents for line in lines)

    initial_status = STATUS_PENDING if data.get("status") == STATUS_PENDING else STATUS_ORDERED
    purchase = Purchase(
        id=purchase_id,
        type=purchase_type,
        supplier_id=supplier.id,
        supplier_name=optional_str(data, "supplier_name") or supplier.display_name,
        invoice_number=optional_str(data, "invoice_number") or f"PO-{purchase_id}",
        date=optional_date(data, "date") or today_iso(),
        items=lines,
        total_cents=total,
        status=initial_status,
    )

    if purchase_type == PURCHASE_INVOICE:
        for line in lines:
            _receive_into_stock(
                state,
                line.product_id,
                line.quantity,
                cost_cents=line.cost_cents,
                batch_no=line.batch_no,
                expiry_date=line.expiry_date,
                policy=policy,
            )
            line.received_quantity = line.quantity
        purchase.received_history.append(ReceiptEntry(
            id=next_document_number(state, "RECEIPT", "RECV"),
            date=to_utc_z(utcnow()),
            items=[
                ReceiptItem(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    batch_no=line.batch_no,
                    expiry_date=line.expiry_date,
                )
                for line in lines
            ],
        ))
        purchase.status = STATUS_RECEIVED

    supplier.balance_cents += total
    state.purchases.append(purchase)

    append_ledger_entry(
        state,
        description=f"Purchase Invoice {purchase.invoice_number}",
        entry_type=CREDIT,
        amount_cents=total,
        account=(supplier.id, purchase.supplier_name),
        category=CATEGORY_PURCHASE,
        reference_id=purchase.id,
    )
    return purchase


def receive_purchase_items(
    state: StoreState,
    purchase_id: str,
    receipts: Iterable[Mapping[str, Any]],
    *,
    policy: StorePolicy,
    note: str | None = None,
) -> Purchase:
    """
    Receive a delivery against an existing purchase.

    Each receipt is {product_id, quantity, batch_no?, expiry_date?}. Stock and the
    matching line's received_quantity grow by quantity; status is re-derived.

    Receipts above a line's remaining quantity are accepted unless
    policy.allow_over_receive is off.
    """
    purchase = state.purchase(purchase_id)
    if purchase is None:
        raise NotFoundError("Purchase", purchase_id)

    receipts = list(receipts or [])
    if not receipts:
        raise InvalidArgumentError("receipts required")

    parsed: list[tuple[PurchaseItem, ReceiptItem]] = []
    incoming: dict[str, int] = {}
    for raw in receipts:
        if not isinstance(raw, Mapping):
            raise InvalidArgumentError("each receipt must be an object")
        product_id = require_str(raw, "product_id")
        quantity = coerce_int(raw.get("quantity"), "quantity", minimum=1)
        line = purchase.find_line(product_id)
        if line is None:
            raise InvalidArgumentError(f"Product {product_id!r} is not on purchase {purchase.id!r}")
        if state.product(product_id) is None:
            raise NotFoundError("Product", product_id)

        incoming[product_id] = incoming.get(product_id, 0) + quantity
        if not policy.allow_over_receive and incoming[product_id] > line.remaining_quantity:
            raise InvalidArgumentError(
                f"Cannot receive {incoming[product_id]} of {product_id!r}: only {line.remaining_quantity} outstanding"
            )

        parsed.append((line, ReceiptItem(
            product_id=product_id,
            product_name=line.product_name,
            quantity=quantity,
            batch_no=optional_str(raw, "batch_no"),
            expiry_date=optional_date(raw, "expiry_date"),
        )))

    for line, item in parsed:
        _receive_into_stock(
            state,
            item.product_id,
            item.quantity,
            cost_cents=line.cost_cents,
            batch_no=item.batch_no,
            expiry_date=item.expiry_date,
            policy=policy,
        )
        line.received_quantity += item.quantity

    purchase.received_history.append(ReceiptEntry(
        id=next_document_number(state, "RECEIPT", "RECV"),
        date=to_utc_z(utcnow()),
        items=[item for _, item in parsed],
        note=note,
    ))
    purchase.status = derive_status(purchase)
    return purchase


def return_purchase(
    state: StoreState,
    purchase_id: str,
    items: Iterable[Mapping[str, Any]],
    *,
    policy: StorePolicy,
) -> ReturnHistoryEntry:
    """
    Send goods back to the supplier.

    Supplier balance drops by the total refund; product stock drops by the
    returned quantity but never below zero. Lot-tracked products give the
    units up from their lots, FIFO by expiry.
    """
    purchase = state.purchase(purchase_id)
    if purchase is None:
        raise NotFoundError("Purchase", purchase_id)

    supplier = state.supplier(purchase.supplier_id)
    if supplier is None:
        raise NotFoundError("Supplier", purchase.supplier_id)

    returned = parse_return_items(items)
    for item in returned:
        if state.product(item.product_id) is None:
            raise NotFoundError("Product", item.product_id)
        if not item.product_name:
            line = purchase.find_line(item.product_id)
            item.product_name = line.product_name if line else state.product(item.product_id).name

    total_refund = sum(i.refund_amount_cents for i in returned)

    for item in returned:
        product = state.product(item.product_id)
        removed = min(item.quantity, max(0, product.stock))
        if removed:
            apply_stock_delta(product, -removed, policy=policy)

    entry = ReturnHistoryEntry(
        id=next_document_number(state, "PURCHASE_RETURN", "RET"),
        date=to_utc_z(utcnow()),
        items=returned,
        total_refund_cents=total_refund,
    )
    purchase.return_history.append(entry)
    supplier.balance_cents -= total_refund

    append_ledger_entry(
        state,
        description=f"Purchase Return for #{purchase.invoice_number}",
        entry_type=DEBIT,
        amount_cents=total_refund,
        account=(supplier.id, purchase.supplier_name),
        category=CATEGORY_PURCHASE,
        reference_id=purchase.id,
    )
    return entry


def parse_return_items(items: Iterable[Mapping[str, Any]]) -> list[ReturnItem]:
    """Shared by purchase and sales returns."""
    items = list(items or [])
    if not items:
        raise InvalidArgumentError("items required")

    parsed = []
    for raw in items:
        if not isinstance(raw, Mapping):
            raise InvalidArgumentError("each return item must be an object")
        parsed.append(ReturnItem(
            product_id=require_str(raw, "product_id"),
            product_name=optional_str(raw, "product_name") or "",
            quantity=coerce_int(raw.get("quantity"), "quantity", minimum=1),
            reason=optional_str(raw, "reason") or "",
            refund_amount_cents=coerce_cents(raw.get("refund_amount_cents"), "refund_amount_cents"),
            variant_id=optional_str(raw, "variant_id"),
        ))
    return parsed
