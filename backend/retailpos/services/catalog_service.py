# Overview: Lot bookkeeping for products, variants and catalog items.

"""
Catalog & Lot Invariants (authoritative)

- A lot holder is a Product, a Variant or a CatalogItem.
- Whenever a holder has lots: holder.stock == sum(lot.quantity for lot in holder.lots).
- Every lot add/update/delete applies its exact quantity delta to holder.stock
  in the same step. Stock is never recomputed from the lots.
- Stock moves on a holder with lots (sales, returns, adjustments, receipts
  without a batch) go through draw_from_lots / restore_to_lots, so the sum
  keeps holding. Lot quantities never go below zero.
- Lot status (Active/Expired/Depleted) is descriptive. A lot reaching
  quantity 0 is NOT moved to Depleted automatically.
- Attributes (Color/Size) are metadata and never touch stock.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from ..domain import CatalogItem, Lot, Product, StoreState, Variant
from ..domain.catalog import LOT_ACTIVE, LOT_EXPIRED, LOT_STATUSES
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
from retailpos.time_utils import today_iso
from .document_service import ensure_unique_id

LotHolder = Union[Product, Variant, CatalogItem]


def find_lot_holder(
    state: StoreState,
    *,
    product_id: Optional[str] = None,
    variant_id: Optional[str] = None,
    catalog_id: Optional[str] = None,
    item_id: Optional[str] = None,
) -> LotHolder:
    """Resolve a product, a product variant, or a catalog item."""
    if catalog_id is not None:
        catalog = state.catalog(catalog_id)
        if catalog is None:
            raise NotFoundError("Catalog", catalog_id)
        if item_id is None:
            raise InvalidArgumentError("item_id required with catalog_id")
        item = catalog.find_item(item_id)
        if item is None:
            raise NotFoundError("CatalogItem", item_id)
        return item

    if product_id is None:
        raise InvalidArgumentError("product_id or catalog_id required")
    product = state.product(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    if variant_id is None:
        return product
    variant = product.find_variant(variant_id)
    if variant is None:
        raise NotFoundError("Variant", variant_id)
    return variant


def lots_in_sync(holder: LotHolder) -> bool:
    if not holder.lots:
        return True
    return holder.stock == sum(lot.quantity for lot in holder.lots)


def _find_lot(holder: LotHolder, lot_id: str) -> Lot:
    lot = next((l for l in holder.lots if l.id == lot_id), None)
    if lot is None:
        raise NotFoundError("Lot", lot_id)
    return lot


def new_lot_id(state: StoreState, proposed: Optional[str] = None) -> str:
    """Lot ids are unique across every holder in the store."""
    taken = {l.id for holder in iter_lot_holders(state) for l in holder.lots}
    if proposed and proposed in taken:
        raise ConflictError(f"Lot {proposed!r} already exists")
    return ensure_unique_id(taken, proposed, state, "LOT", "LOT")


def build_lot(state: StoreState, holder: LotHolder, data: Mapping[str, Any]) -> Lot:
    """Validate lot input; cost defaults to the holder's cost price."""
    cost = data.get("cost_price_cents")
    status = data.get("status") or LOT_ACTIVE
    return Lot(
        id=new_lot_id(state, optional_str(data, "id")),
        lot_number=require_str(data, "lot_number"),
        quantity=coerce_int(data.get("quantity"), "quantity", minimum=0),
        cost_price_cents=coerce_cents(cost, "cost_price_cents") if cost else holder.cost_price_cents,
        expiry_date=optional_date(data, "expiry_date"),
        manufacturing_date=optional_date(data, "manufacturing_date"),
        received_date=optional_date(data, "received_date") or today_iso(),
        location=optional_str(data, "location"),
        status=require_choice(status, "status", LOT_STATUSES),
    )


def add_lot(holder: LotHolder, lot: Lot) -> Lot:
    if any(l.id == lot.id for l in holder.lots):
        raise InvalidArgumentError(f"Lot {lot.id!r} already exists")
    holder.lots.append(lot)
    holder.stock += lot.quantity
    return lot


def update_lot(holder: LotHolder, lot_id: str, changes: Mapping[str, Any]) -> Lot:
    """Apply field changes to a lot; a quantity change moves holder.stock by new - old."""
    lot = _find_lot(holder, lot_id)
    old_quantity = lot.quantity

    if "lot_number" in changes:
        lot.lot_number = require_str(changes, "lot_number")
    if "quantity" in changes:
        lot.quantity = coerce_int(changes["quantity"], "quantity", minimum=0)
    if "cost_price_cents" in changes:
        lot.cost_price_cents = coerce_cents(changes["cost_price_cents"], "cost_price_cents")
    if "expiry_date" in changes:
        lot.expiry_date = optional_date(changes, "expiry_date")
    if "manufacturing_date" in changes:
        lot.manufacturing_date = optional_date(changes, "manufacturing_date")
    if "location" in changes:
        lot.location = optional_str(changes, "location")
    if "status" in changes:
        lot.status = require_choice(changes["status"], "status", LOT_STATUSES)

    holder.stock += lot.quantity - old_quantity
    return lot


def fifo_lots(holder: LotHolder) -> list[Lot]:
    """Lots with quantity on hand, earliest expiry first; undated lots last."""
    stocked = [l for l in holder.lots if l.quantity > 0]
    return sorted(stocked, key=lambda l: (l.expiry_date is None, l.expiry_date or ""))


def draw_from_lots(holder: LotHolder, quantity: int, lot_id: Optional[str] = None) -> None:
    """
    Take quantity out of the holder's lots, from a named lot or FIFO by expiry.

    Only lot quantities move; the caller moves holder.stock.
    """
    if lot_id is not None:
        lot = _find_lot(holder, lot_id)
        if lot.quantity < quantity:
            raise InvalidArgumentError(
                f"Lot {lot.id!r} holds {lot.quantity}, cannot take {quantity}"
            )
        lot.quantity -= quantity
        return

    available = sum(l.quantity for l in holder.lots)
    if available < quantity:
        raise InvalidArgumentError(
            f"Lots of {holder.id!r} hold {available}, cannot take {quantity}"
        )
    remaining = quantity
    for lot in fifo_lots(holder):
        take = min(lot.quantity, remaining)
        lot.quantity -= take
        remaining -= take
        if remaining == 0:
            break


def restore_to_lots(holder: LotHolder, quantity: int, lot_id: Optional[str] = None) -> None:
    """Put quantity back into a named lot, or the most recently added one."""
    lot = _find_lot(holder, lot_id) if lot_id is not None else holder.lots[-1]
    lot.quantity += quantity


def delete_lot(holder: LotHolder, lot_id: str) -> Lot:
    lot = _find_lot(holder, lot_id)
    holder.lots = [l for l in holder.lots if l.id != lot_id]
    holder.stock -= lot.quantity
    return lot


def mark_expired_lots(state: StoreState, as_of: Optional[str] = None) -> list[Lot]:
    """Flag Active lots whose expiry_date is before as_of. Quantities are untouched."""
    cutoff = optional_date({"as_of": as_of}, "as_of") or today_iso()
    marked = []
    for holder in iter_lot_holders(state):
        for lot in holder.lots:
            if lot.status == LOT_ACTIVE and lot.expiry_date and lot.expiry_date < cutoff:
                lot.status = LOT_EXPIRED
                marked.append(lot)
    return marked


def iter_lot_holders(state: StoreState):
    for product in state.products:
        yield product
        yield from product.variants
    for catalog in state.catalogs:
        yield from catalog.items


def low_stock_products(state: StoreState) -> list[Product]:
    return [p for p in state.products if p.is_low_stock]


def stock_value_cents(holder: LotHolder) -> int:
    """On-hand value; lot costs win over the holder's cost when lots exist."""
    if holder.lots:
        return sum(l.quantity * l.cost_price_cents for l in holder.lots)
    return holder.stock * holder.cost_price_cents
