"""
Sales Service - sale recording and customer returns

WHY: A single sale touches up to five aggregates at once: the register shift,
customer loyalty, the ledger, product/variant stock and, for borrowed goods,
supplier balances. This module applies all of them for one invoice.

BORROWED ITEMS: a line carrying borrowed_supplier_id was sold from inventory
the store does not own. It creates a supplier liability instead of consuming
stock.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..domain import (
    CartItem,
    Customer,
    Invoice,
    PaymentSplit,
    Purchase,
    PurchaseItem,
    ReturnHistoryEntry,
    StoreState,
)
from ..domain.documents import (
    INVOICE_PAID,
    INVOICE_RETURNED,
    INVOICE_STATUSES,
    PAYMENT_METHODS,
    PURCHASE_INVOICE,
    STATUS_RECEIVED,
)
from ..domain.ledger import CATEGORY_PURCHASE, CATEGORY_SALES, CREDIT, DEBIT, SALES_RETURN, WALK_IN_SALES
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
from . import register_service
from .document_service import ensure_unique_id, next_document_number
from .inventory_service import apply_stock_delta
from .ledger_service import append_ledger_entry
from .purchase_service import parse_return_items

# One loyalty point per whole currency unit spent
CENTS_PER_LOYALTY_POINT = 100


def loyalty_points_for(amount_cents: int) -> int:
    return max(0, amount_cents) // CENTS_PER_LOYALTY_POINT


def _parse_cart_items(raw_items: Any) -> list[CartItem]:
    if raw_items is None:
        return []
    if not isinstance(raw_items, list):
        raise InvalidArgumentError("items must be a list")

    items = []
    for raw in raw_items:
        if not isinstance(raw, Mapping):
            raise InvalidArgumentError("each item must be an object")
        borrowed_cost = raw.get("borrowed_cost_cents")
        items.append(CartItem(
            product_id=require_str(raw, "product_id"),
            name=optional_str(raw, "name") or "",
            quantity=coerce_int(raw.get("quantity"), "quantity", minimum=1),
            price_cents=coerce_cents(raw.get("price_cents", 0), "price_cents"),
            variant_id=optional_str(raw, "variant_id"),
            variant_name=optional_str(raw, "variant_name"),
            item_discount_cents=coerce_cents(raw.get("item_discount_cents", 0), "item_discount_cents"),
            is_custom=bool(raw.get("is_custom", False)),
            borrowed_supplier_id=optional_str(raw, "borrowed_supplier_id"),
            borrowed_cost_cents=coerce_cents(borrowed_cost, "borrowed_cost_cents") if borrowed_cost else 0,
        ))
    return items


def _parse_splits(raw_splits: Any) -> list[PaymentSplit]:
    if not raw_splits:
        return []
    if not isinstance(raw_splits, list):
        raise InvalidArgumentError("payment_splits must be a list")
    splits = []
    for raw in raw_splits:
        if not isinstance(raw, Mapping):
            raise InvalidArgumentError("each payment split must be an object")
        splits.append(PaymentSplit(
            method=require_choice(raw.get("method"), "payment method", PAYMENT_METHODS),
            amount_cents=coerce_cents(raw.get("amount_cents"), "amount_cents"),
        ))
    return splits


def resolve_customer(state: StoreState, invoice: Invoice) -> Customer | None:
    """Match by customer_id first, then by exact name; None means walk-in."""
    if invoice.customer_id:
        return state.customer(invoice.customer_id)
    if invoice.customer_name:
        return state.customer_by_name(invoice.customer_name)
    return None


def build_invoice(state: StoreState, data: Mapping[str, Any]) -> Invoice:
    """Validate sale input into an Invoice without touching state."""
    invoice_id = optional_str(data, "id")
    if invoice_id and state.invoice(invoice_id) is not None:
        raise ConflictError(f"Invoice {invoice_id!r} already exists")

    payment_method = data.get("payment_method")
    if payment_method is not None:
        require_choice(payment_method, "payment_method", PAYMENT_METHODS)

    status = data.get("status") or INVOICE_PAID
    invoice = Invoice(
        id=ensure_unique_id((i.id for i in state.invoices), invoice_id, state, "INVOICE", "INV"),
        total_cents=coerce_cents(data.get("total_cents"), "total_cents"),
        customer_name=optional_str(data, "customer_name") or "",
        customer_id=optional_str(data, "customer_id"),
        date=optional_date(data, "date") or today_iso(),
        status=require_choice(status, "status", INVOICE_STATUSES),
        payment_method=payment_method,
        payment_splits=_parse_splits(data.get("payment_splits")),
        items=_parse_cart_items(data.get("items")),
        loyalty_points_used=coerce_int(data.get("loyalty_points_used", 0), "loyalty_points_used", minimum=0),
    )

    if invoice.customer_id and state.customer(invoice.customer_id) is None:
        raise NotFoundError("Customer", invoice.customer_id)

    for item in invoice.items:
        if item.is_borrowed:
            if state.supplier(item.borrowed_supplier_id) is None:
                raise NotFoundError("Supplier", item.borrowed_supplier_id)
            continue
        if item.is_custom:
            continue
        product = state.product(item.product_id)
        if product is None:
            raise NotFoundError("Product", item.product_id)
        if item.variant_id and product.find_variant(item.variant_id) is None:
            raise NotFoundError("Variant", item.variant_id)
        if not item.name:
            item.name = product.name

    return invoice


def _record_borrowed_lines(state: StoreState, invoice: Invoice) -> None:
    """
    Book borrowed lines as supplier debt.

    Per supplier, one auto-generated INVOICE purchase documents the goods
    (already Received, balance NOT re-applied). Per line, the supplier balance
    grows by borrowed_cost * quantity with one CREDIT ledger leg.
    """
    by_supplier: dict[str, list[CartItem]] = {}
    for item in invoice.items:
        if item.is_borrowed:
            by_supplier.setdefault(item.borrowed_supplier_id, []).append(item)

    for supplier_id, items in by_supplier.items():
        supplier = state.supplier(supplier_id)
        purchase = Purchase(
            id=next_document_number(state, "AUTO_PURCHASE", "AUTO-PUR"),
            type=PURCHASE_INVOICE,
            supplier_id=supplier.id,
            supplier_name=supplier.display_name,
            invoice_number=f"AUTO-REF-{invoice.id}",
            date=invoice.date,
            items=[
                PurchaseItem(
                    product_id=i.product_id,
                    product_name=i.name,
                    quantity=i.quantity,
                    received_quantity=i.quantity,
                    cost_cents=i.borrowed_cost_cents,
                )
                for i in items
            ],
            total_cents=sum(i.quantity * i.borrowed_cost_cents for i in items),
            status=STATUS_RECEIVED,
        )
        state.purchases.append(purchase)

        for item in items:
            debt = item.borrowed_cost_cents * item.quantity
            supplier.balance_cents += debt
            append_ledger_entry(
                state,
                description=f"Borrowed Items for Sale #{invoice.id}",
                entry_type=CREDIT,
                amount_cents=debt,
                account=(supplier.id, supplier.display_name),
                category=CATEGORY_PURCHASE,
                reference_id=purchase.id,
            )


def record_sale(state: StoreState, data: Mapping[str, Any], *, policy: StorePolicy) -> Invoice:
    """
    Record a completed sale.

    Effects, in order:
    - open register shift: sales_count, total_sales, expected cash
    - known customer: loyalty (earned - used), total purchases, last visit
    - one CREDIT ledger leg for the total (customer account or Walk-in Sales)
    - each line: borrowed -> supplier debt; custom -> nothing; else stock decrement
    - invoice appended to the invoice collection
    """
    invoice = build_invoice(state, data)
    customer = resolve_customer(state, invoice)

    # Validate every line before anything moves. Lots never go negative,
    # so lot-tracked holders are bounded by their lots under either policy.
    needed: dict[tuple[str, str | None], int] = {}
    for item in invoice.items:
        if item.consumes_stock:
            key = (item.product_id, item.variant_id)
            needed[key] = needed.get(key, 0) + item.quantity
    for (product_id, variant_id), quantity in needed.items():
        product = state.product(product_id)
        holder = product.find_variant(variant_id) if variant_id else product
        if holder.lots:
            on_hand = sum(l.quantity for l in holder.lots)
        elif not policy.allow_negative_stock:
            on_hand = holder.stock
        else:
            continue
        if on_hand < quantity:
            raise InvalidArgumentError(
                f"Insufficient stock for {product_id!r}: on hand {on_hand}, requested {quantity}"
            )

    register_service.apply_sale(state, invoice)

    if customer is not None:
        earned = loyalty_points_for(invoice.total_cents)
        customer.loyalty_points += earned - invoice.loyalty_points_used
        customer.total_purchases_cents += invoice.total_cents
        customer.last_visit = today_iso()
        invoice.loyalty_points_earned = earned
        invoice.customer_id = customer.id
        invoice.customer_name = customer.name
        account = (customer.id, customer.name)
    else:
        account = WALK_IN_SALES

    append_ledger_entry(
        state,
        description=f"Sale Invoice #{invoice.id}",
        entry_type=CREDIT,
        amount_cents=invoice.total_cents,
        account=account,
        category=CATEGORY_SALES,
        reference_id=invoice.id,
        date=invoice.date,
    )

    for item in invoice.items:
        if item.consumes_stock:
            apply_stock_delta(
                state.product(item.product_id),
                -item.quantity,
                variant_id=item.variant_id,
                policy=policy,
            )
    _record_borrowed_lines(state, invoice)

    state.invoices.append(invoice)
    return invoice


def process_sales_return(
    state: StoreState,
    invoice_id: str,
    items: Iterable[Mapping[str, Any]],
    *,
    policy: StorePolicy,
) -> ReturnHistoryEntry:
    """
    Take goods back from a customer.

    Ordinary lines go back on hand (uncapped); borrowed and custom lines were
    never store stock and are not restocked. The invoice total is untouched:
    the return is appended to invoice.returns and the status becomes Returned.
    """
    invoice = state.invoice(invoice_id)
    if invoice is None:
        raise NotFoundError("Invoice", invoice_id)

    returned = parse_return_items(items)
    lines = []
    for item in returned:
        line = invoice.find_line(item.product_id, item.variant_id)
        if line is None:
            what = f"{item.product_id!r}" + (f" (variant {item.variant_id!r})" if item.variant_id else "")
            raise InvalidArgumentError(f"Product {what} is not a single line on invoice {invoice.id!r}")
        item.variant_id = line.variant_id
        lines.append(line)
        if line.consumes_stock and state.product(item.product_id) is None:
            raise NotFoundError("Product", item.product_id)
        if not item.product_name:
            item.product_name = line.name

    total_refund = sum(i.refund_amount_cents for i in returned)

    for item, line in zip(returned, lines):
        if line.consumes_stock:
            apply_stock_delta(
                state.product(item.product_id),
                item.quantity,
                variant_id=line.variant_id,
                policy=policy,
            )
        line.returned_quantity += item.quantity

    entry = ReturnHistoryEntry(
        id=next_document_number(state, "SALES_RETURN", "RET-SALE"),
        date=to_utc_z(utcnow()),
        items=returned,
        total_refund_cents=total_refund,
    )
    invoice.returns.append(entry)
    invoice.status = INVOICE_RETURNED

    append_ledger_entry(
        state,
        description=f"Sales Refund for #{invoice.id}",
        entry_type=DEBIT,
        amount_cents=total_refund,
        account=SALES_RETURN,
        category=CATEGORY_SALES,
        reference_id=invoice.id,
    )

    customer = resolve_customer(state, invoice)
    if customer is not None:
        customer.loyalty_points = max(0, customer.loyalty_points - loyalty_points_for(total_refund))

    register_service.apply_cash_refund(state, invoice, total_refund)
    return entry


def return_invoice(state: StoreState, invoice_id: str, *, policy: StorePolicy) -> ReturnHistoryEntry:
    """Return everything still outstanding on an invoice at the sold price."""
    invoice = state.invoice(invoice_id)
    if invoice is None:
        raise NotFoundError("Invoice", invoice_id)

    items = []
    for line in invoice.items:
        remaining = line.quantity - line.returned_quantity
        if remaining <= 0:
            continue
        items.append({
            "product_id": line.product_id,
            "variant_id": line.variant_id,
            "product_name": line.name,
            "quantity": remaining,
            "reason": "Full Return",
            "refund_amount_cents": line.price_cents * remaining,
        })

    if not items:
        raise InvalidArgumentError(f"Invoice {invoice.id!r} has nothing left to return")
    return process_sales_return(state, invoice.id, items, policy=policy)
