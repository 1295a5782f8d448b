from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .base import Record


@dataclass
class Supplier(Record):
    """balance_cents is signed: positive is what the store owes the supplier."""
    id: str
    name: str
    business_name: str = ""
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    balance_cents: int = 0

    @property
    def display_name(self) -> str:
        return self.business_name or self.name


@dataclass
class Customer(Record):
    id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    total_purchases_cents: int = 0
    last_visit: Optional[str] = None
    loyalty_points: int = 0


@dataclass
class User(Record):
    id: str
    name: str
    email: str
    role: str = "Cashier"
    phone: Optional[str] = None
    status: str = "Active"
    pin_hash: Optional[str] = None

    def to_public_dict(self) -> dict:
        data = self.to_dict()
        data.pop("pin_hash", None)
        data["has_pin"] = self.pin_hash is not None
        return data


@dataclass
class Role(Record):
    id: str
    name: str
    permissions: list = field(default_factory=list)
