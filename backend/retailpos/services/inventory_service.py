# Overview: Stock counters and stock adjustments.

"""
Inventory Invariants (authoritative)

- product.stock and variant.stock are independent counters. A variant sale
  moves only the variant; the product's own stock is never derived from it.
- Stock has no lower bound unless StorePolicy.allow_negative_stock is off.
  Negative stock is preserved, never silently clamped.
- A counter with lots is the exception: every move also moves its lots
  (catalog_service.draw_from_lots / restore_to_lots), and lots cannot go
  negative, so it never drops below the units its lots hold.
- Every stock adjustment is paired with exactly one audit record:
    stock_after == stock_before + adjustment.quantity
    cost_amount == abs(quantity) * product.cost_price_cents (before the change)
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..domain import Product, StockAdjustment, StoreState
from ..domain.documents import ADJUSTMENT_REASONS
from ..domain.ledger import CATEGORY_ADJUSTMENT, DEBIT, INVENTORY_SHRINKAGE
from ..policy import StorePolicy
from ..validation import InvalidArgumentError, NotFoundError, coerce_int, optional_str, require_choice, require_str
from retailpos.time_utils import to_utc_z, utcnow
from .catalog_service import draw_from_lots, restore_to_lots
from .document_service import next_document_number
from .ledger_service import append_ledger_entry


def apply_stock_delta(
    product: Product,
    quantity_delta: int,
    *,
    variant_id: Optional[str] = None,
    lot_id: Optional[str] = None,
    policy: StorePolicy,
) -> int:
    """
    Move the product's (or one variant's) stock counter by quantity_delta.

    When the counter has lots, the same delta is drawn from them FIFO by
    expiry (or from lot_id) on the way out and added back to the newest lot
    (or lot_id) on the way in.

    Returns the new stock value of the counter that moved.
    """
    target = product
    if variant_id is not None:
        target = product.find_variant(variant_id)
        if target is None:
            raise NotFoundError("Variant", variant_id)

    new_stock = target.stock + quantity_delta
    if new_stock < 0 and quantity_delta < 0 and not policy.allow_negative_stock:
        raise InvalidArgumentError(
            f"Insufficient stock for {product.id!r}: on hand {target.stock}, requested {-quantity_delta}"
        )
    if target.lots or lot_id is not None:
        if quantity_delta < 0:
            draw_from_lots(target, -quantity_delta, lot_id)
        elif quantity_delta > 0:
            restore_to_lots(target, quantity_delta, lot_id)
    target.stock = new_stock
    return new_stock


def add_stock_adjustment(state: StoreState, data: Mapping[str, Any], *, policy: StorePolicy) -> StockAdjustment:
    """
    Record a signed stock correction (loss, theft, gift, recount).

    A loss (negative quantity) also books its cost as shrinkage expense.
    """
    product_id = require_str(data, "product_id")
    quantity = coerce_int(data.get("quantity"), "quantity")
    if quantity == 0:
        raise InvalidArgumentError("quantity must be non-zero")
    reason = require_choice(data.get("reason"), "reason", ADJUSTMENT_REASONS)
    lot_id = optional_str(data, "lot_id")

    product = state.product(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)

    cost_amount = abs(quantity) * product.cost_price_cents

    adjustment = StockAdjustment(
        id=next_document_number(state, "ADJUSTMENT", "ADJ"),
        date=to_utc_z(utcnow()),
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        reason=reason,
        cost_amount_cents=cost_amount,
        lot_id=lot_id,
    )

    apply_stock_delta(product, quantity, lot_id=lot_id, policy=policy)
    state.stock_adjustments.append(adjustment)

    if quantity < 0:
        append_ledger_entry(
            state,
            description=f"Stock Adj: {reason} ({product.name})",
            entry_type=DEBIT,
            amount_cents=cost_amount,
            account=INVENTORY_SHRINKAGE,
            category=CATEGORY_ADJUSTMENT,
            reference_id=adjustment.id,
        )

    return adjustment
