"""
Catalog & lot records.

Stock truth lives in three kinds of holder: Product, Variant and CatalogItem.
Each has its own `stock` counter; a variant's stock is NOT folded into its
product's. When a holder has lots, its stock equals the sum of lot quantities
(maintained by catalog_service, never recomputed here).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .base import Record

LOT_ACTIVE = "Active"
LOT_EXPIRED = "Expired"
LOT_DEPLETED = "Depleted"
LOT_STATUSES = (LOT_ACTIVE, LOT_EXPIRED, LOT_DEPLETED)


@dataclass
class Lot(Record):
    id: str
    lot_number: str
    quantity: int
    cost_price_cents: int = 0
    expiry_date: Optional[str] = None
    manufacturing_date: Optional[str] = None
    received_date: Optional[str] = None
    location: Optional[str] = None
    status: str = LOT_ACTIVE


@dataclass
class Variant(Record):
    id: str
    name: str = ""
    sku: str = ""
    price_cents: int = 0
    cost_price_cents: int = 0
    stock: int = 0
    lots: list = field(default_factory=list)

    _nested = {"lots": Lot}


@dataclass
class Product(Record):
    id: str
    name: str
    sku: str = ""
    category: str = ""
    brand: Optional[str] = None
    price_cents: int = 0
    cost_price_cents: int = 0
    stock: int = 0
    min_stock_level: int = 0
    unit: Optional[str] = None
    location: Optional[str] = None
    supplier: Optional[str] = None
    has_batch: bool = False
    variants: list = field(default_factory=list)
    lots: list = field(default_factory=list)

    _nested = {"variants": Variant, "lots": Lot}

    def find_variant(self, variant_id: str) -> Variant | None:
        return next((v for v in self.variants if v.id == variant_id), None)

    @property
    def is_low_stock(self) -> bool:
        return self.stock <= self.min_stock_level


@dataclass
class Attribute(Record):
    """Descriptive option set (Color, Size); never part of stock math."""
    id: str
    name: str
    values: list = field(default_factory=list)


@dataclass
class CatalogItem(Record):
    id: str
    catalog_id: str
    name: str
    sku: str = ""
    price_cents: int = 0
    cost_price_cents: int = 0
    stock: int = 0
    location: Optional[str] = None
    lots: list = field(default_factory=list)

    _nested = {"lots": Lot}


@dataclass
class Catalog(Record):
    id: str
    name: str
    brand: Optional[str] = None
    category: Optional[str] = None
    items: list = field(default_factory=list)
    attributes: list = field(default_factory=list)

    _nested = {"items": CatalogItem, "attributes": Attribute}

    def find_item(self, item_id: str) -> CatalogItem | None:
        return next((i for i in self.items if i.id == item_id), None)

    @property
    def total_stock(self) -> int:
        return sum(i.stock for i in self.items)
