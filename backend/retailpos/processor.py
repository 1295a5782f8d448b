# Overview: The single writer over StoreState; every command is all-or-nothing.

"""
Commerce Event Processor

WHY: Sales, returns, purchases, receipts, adjustments and register shifts
each touch several aggregates at once (stock, ledger, register session,
customer loyalty, supplier balance). The processor applies one command at a
time against the whole store and either commits all of its effects or none.

DESIGN:
- One RLock serializes commands (Flask's threaded server can overlap requests)
- Before a command the state is serialized; any exception restores it and re-raises
- After success the full state goes to the persistence gate (if any)
- Services raise InvalidArgumentError / NotFoundError / ConflictError; the
  processor never translates them
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterable, Mapping, Optional

from flask import current_app

from .domain import StoreState
from .policy import StorePolicy
from .services import (
    auth_service,
    catalog_service,
    entity_service,
    expense_service,
    inventory_service,
    purchase_service,
    register_service,
    sales_service,
    settings_service,
)
from .services.concurrency import serialized
from .services.snapshot_service import SnapshotGate

logger = logging.getLogger(__name__)

EXTENSION_KEY = "retailpos.processor"
_init_lock = threading.Lock()


class CommerceEventProcessor:
    def __init__(
        self,
        state: Optional[StoreState] = None,
        policy: Optional[StorePolicy] = None,
        gate: Optional[SnapshotGate] = None,
    ):
        self.state = state if state is not None else StoreState.initial()
        self.policy = policy or StorePolicy()
        self.gate = gate
        self._lock = threading.RLock()

    # -- plumbing ------------------------------------------------------------

    @serialized
    def _apply(self, name: str, command: Callable[[StoreState], Any]) -> Any:
        backup = self.state.to_dict()
        try:
            result = command(self.state)
            if self.gate is not None:
                self.gate.save(self.state)
        except Exception as exc:
            self.state = StoreState.from_dict(backup)
            logger.warning("%s rolled back: %s", name, exc)
            raise
        logger.info("%s applied", name)
        return result

    @serialized
    def query(self, reader: Callable[[StoreState], Any]) -> Any:
        """Run a read-only function against the current state under the lock."""
        return reader(self.state)

    @serialized
    def snapshot(self) -> dict:
        """Detached, JSON-ready copy of the full state."""
        return self.state.to_dict()

    @serialized
    def replace_state(self, state: StoreState) -> None:
        self.state = state
        if self.gate is not None:
            self.gate.save(state)
        logger.info("state replaced")

    # -- sales ---------------------------------------------------------------

    def record_sale(self, invoice: Mapping[str, Any]):
        return self._apply(
            "record_sale",
            lambda s: sales_service.record_sale(s, invoice, policy=self.policy),
        )

    def process_sales_return(self, invoice_id: str, items: Iterable[Mapping[str, Any]]):
        return self._apply(
            "process_sales_return",
            lambda s: sales_service.process_sales_return(s, invoice_id, items, policy=self.policy),
        )

    def return_invoice(self, invoice_id: str):
        return self._apply(
            "return_invoice",
            lambda s: sales_service.return_invoice(s, invoice_id, policy=self.policy),
        )

    # -- purchases -----------------------------------------------------------

    def record_purchase(self, purchase: Mapping[str, Any]):
        return self._apply(
            "record_purchase",
            lambda s: purchase_service.record_purchase(s, purchase, policy=self.policy),
        )

    def receive_purchase_items(self, purchase_id: str, receipts, note: Optional[str] = None):
        return self._apply(
            "receive_purchase_items",
            lambda s: purchase_service.receive_purchase_items(
                s, purchase_id, receipts, policy=self.policy, note=note
            ),
        )

    def return_purchase(self, purchase_id: str, items):
        return self._apply(
            "return_purchase",
            lambda s: purchase_service.return_purchase(s, purchase_id, items, policy=self.policy),
        )

    # -- inventory & lots ----------------------------------------------------

    def add_stock_adjustment(self, adjustment: Mapping[str, Any]):
        return self._apply(
            "add_stock_adjustment",
            lambda s: inventory_service.add_stock_adjustment(s, adjustment, policy=self.policy),
        )

    def add_lot(self, lot: Mapping[str, Any], **holder_ids):
        def command(s):
            holder = catalog_service.find_lot_holder(s, **holder_ids)
            return catalog_service.add_lot(holder, catalog_service.build_lot(s, holder, lot))
        return self._apply("add_lot", command)

    def update_lot(self, lot_id: str, changes: Mapping[str, Any], **holder_ids):
        def command(s):
            holder = catalog_service.find_lot_holder(s, **holder_ids)
            return catalog_service.update_lot(holder, lot_id, changes)
        return self._apply("update_lot", command)

    def delete_lot(self, lot_id: str, **holder_ids):
        def command(s):
            holder = catalog_service.find_lot_holder(s, **holder_ids)
            return catalog_service.delete_lot(holder, lot_id)
        return self._apply("delete_lot", command)

    def mark_expired_lots(self, as_of: Optional[str] = None):
        return self._apply(
            "mark_expired_lots",
            lambda s: catalog_service.mark_expired_lots(s, as_of),
        )

    # -- register ------------------------------------------------------------

    def open_register(self, amount_cents):
        return self._apply(
            "open_register",
            lambda s: register_service.open_register(s, amount_cents),
        )

    def close_register(self, actual_amount_cents):
        return self._apply(
            "close_register",
            lambda s: register_service.close_register(s, actual_amount_cents),
        )

    # -- entities ------------------------------------------------------------

    def add_entity(self, kind, record):
        kind = entity_service.parse_kind(kind)
        return self._apply(
            f"add_entity[{kind.value}]",
            lambda s: entity_service.add_entity(s, kind, record),
        )

    def update_entity(self, kind, record):
        kind = entity_service.parse_kind(kind)
        return self._apply(
            f"update_entity[{kind.value}]",
            lambda s: entity_service.update_entity(s, kind, record),
        )

    def delete_entity(self, kind, entity_id: str):
        kind = entity_service.parse_kind(kind)
        return self._apply(
            f"delete_entity[{kind.value}]",
            lambda s: entity_service.delete_entity(s, kind, entity_id),
        )

    # -- misc ----------------------------------------------------------------

    def record_expense(self, expense: Mapping[str, Any]):
        return self._apply(
            "record_expense",
            lambda s: expense_service.record_expense(s, expense),
        )

    def update_settings(self, **changes):
        return self._apply(
            "update_settings",
            lambda s: settings_service.update_settings(s, changes),
        )

    def register_user(self, email: str, pin: str):
        return self._apply(
            "register_user",
            lambda s: auth_service.register_user(s, email, pin),
        )

    def login(self, email: str, pin: str):
        return self._apply("login", lambda s: auth_service.login(s, email, pin))

    def logout(self) -> None:
        self._apply("logout", auth_service.logout)


def build_processor(app) -> CommerceEventProcessor:
    """Load the stored snapshot (or a fresh store) for this app."""
    gate = SnapshotGate(app.config["SNAPSHOT_KEY"])
    state = gate.load()
    if state is None:
        state = StoreState.demo() if app.config.get("SEED_DEMO_DATA") else StoreState.initial()
        app.logger.info("No stored snapshot; starting from %s state",
                        "demo" if app.config.get("SEED_DEMO_DATA") else "initial")
    return CommerceEventProcessor(state, StorePolicy.from_config(app.config), gate)


def get_processor() -> CommerceEventProcessor:
    """The app-wide processor, created on first use."""
    app = current_app._get_current_object()
    processor = app.extensions.get(EXTENSION_KEY)
    if processor is None:
        with _init_lock:
            processor = app.extensions.get(EXTENSION_KEY)
            if processor is None:
                processor = build_processor(app)
                app.extensions[EXTENSION_KEY] = processor
    return processor
