# Overview: Generic add/update/delete for collections without cross-aggregate effects.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from ..domain import Catalog, Customer, Product, Record, Role, StoreState, Supplier, User
from ..validation import ConflictError, InvalidArgumentError, NotFoundError
from .catalog_service import iter_lot_holders, lots_in_sync
from .document_service import ensure_unique_id


class CollectionKind(str, Enum):
    PRODUCTS = "products"
    CATALOGS = "catalogs"
    SUPPLIERS = "suppliers"
    CUSTOMERS = "customers"
    USERS = "users"
    ROLES = "roles"


@dataclass(frozen=True)
class CollectionEntry:
    attribute: str       # StoreState attribute holding the list
    record_type: type    # Record subclass stored in it
    id_prefix: str


COLLECTIONS: dict[CollectionKind, CollectionEntry] = {
    CollectionKind.PRODUCTS: CollectionEntry("products", Product, "P"),
    CollectionKind.CATALOGS: CollectionEntry("catalogs", Catalog, "CAT"),
    CollectionKind.SUPPLIERS: CollectionEntry("suppliers", Supplier, "S"),
    CollectionKind.CUSTOMERS: CollectionEntry("customers", Customer, "C"),
    CollectionKind.USERS: CollectionEntry("users", User, "U"),
    CollectionKind.ROLES: CollectionEntry("roles", Role, "R"),
}


def parse_kind(value: Any) -> CollectionKind:
    try:
        return CollectionKind(value)
    except ValueError:
        allowed = ", ".join(k.value for k in CollectionKind)
        raise InvalidArgumentError(f"Invalid collection kind {value!r}. Must be one of: {allowed}")


def _collection(state: StoreState, kind: CollectionKind) -> tuple[CollectionEntry, list]:
    entry = COLLECTIONS[kind]
    return entry, getattr(state, entry.attribute)


def _as_input(kind: CollectionKind, data: Mapping[str, Any] | Record) -> dict:
    if isinstance(data, Record):
        data = data.to_dict()
    if not isinstance(data, Mapping):
        raise InvalidArgumentError("record must be an object")
    data = dict(data)
    if kind is CollectionKind.USERS:
        data.pop("pin_hash", None)
    return data


def _build(entry: CollectionEntry, data: Mapping[str, Any] | Record) -> Record:
    record = entry.record_type.from_dict(data)
    if isinstance(record, (Product, Catalog)):
        holders = [record, *record.variants] if isinstance(record, Product) else list(record.items)
        for holder in holders:
            if not lots_in_sync(holder):
                raise InvalidArgumentError(
                    f"stock of {holder.id!r} ({holder.stock}) does not match its lots "
                    f"({sum(l.quantity for l in holder.lots)})"
                )
    return record


def add_entity(state: StoreState, kind: CollectionKind, data: Mapping[str, Any] | Record) -> Record:
    entry, items = _collection(state, kind)
    data = _as_input(kind, data)

    proposed = data.get("id")
    if proposed and any(i.id == proposed for i in items):
        raise ConflictError(f"{entry.record_type.__name__} {proposed!r} already exists")
    data["id"] = ensure_unique_id((i.id for i in items), proposed, state, kind.name, entry.id_prefix)

    record = _build(entry, data)
    items.append(record)
    return record


def update_entity(state: StoreState, kind: CollectionKind, data: Mapping[str, Any] | Record) -> Record:
    """Replace a record by id (whole-record replacement, not a merge)."""
    entry, items = _collection(state, kind)
    data = _as_input(kind, data)
    record = _build(entry, data)

    for index, existing in enumerate(items):
        if existing.id == record.id:
            if kind is CollectionKind.USERS:
                # PINs change only through auth_service
                record.pin_hash = existing.pin_hash
            items[index] = record
            return record
    raise NotFoundError(entry.record_type.__name__, record.id)


def delete_entity(state: StoreState, kind: CollectionKind, entity_id: str) -> Record:
    entry, items = _collection(state, kind)
    for index, existing in enumerate(items):
        if existing.id == entity_id:
            del items[index]
            if kind is CollectionKind.USERS and state.current_user_id == entity_id:
                state.current_user_id = None
            return existing
    raise NotFoundError(entry.record_type.__name__, entity_id)


def lot_invariant_violations(state: StoreState) -> list[str]:
    """Ids of every lot holder whose stock disagrees with its lots."""
    return [h.id for h in iter_lot_holders(state) if not lots_in_sync(h)]
