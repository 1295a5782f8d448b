# Overview: Persistence gate; full-state snapshot load/save over store_snapshots.

"""
Persistence Gate

WHY: The store keeps one JSON blob per key. The processor hands the gate
the whole state after every successful command; the gate writes it in full.
At startup the gate reads it back in full.

DESIGN:
- The gate only reads state to serialize it, never mutates it
- Upsert on the snapshot key; version_id gives optimistic locking
- Commits go through run_with_retry (locked SQLite, stale version)
"""

from __future__ import annotations

import logging

from ..domain import StoreState
from ..domain.state import SNAPSHOT_VERSION
from ..extensions import db
from ..models import StoreSnapshot
from .concurrency import run_with_retry

logger = logging.getLogger(__name__)


class SnapshotGate:
    def __init__(self, key: str):
        self.key = key

    def load(self) -> StoreState | None:
        """Return the stored state, or None when nothing was saved under the key yet."""
        row = db.session.get(StoreSnapshot, self.key)
        if row is None:
            logger.debug("No snapshot stored under %s", self.key)
            return None
        logger.debug("Loaded snapshot %s (version %s)", self.key, row.version_id)
        return StoreState.from_dict(row.payload)

    def save(self, state: StoreState) -> StoreSnapshot:
        payload = state.to_dict()

        def _write():
            row = db.session.get(StoreSnapshot, self.key)
            if row is None:
                row = StoreSnapshot(key=self.key, payload=payload, schema_version=SNAPSHOT_VERSION)
                db.session.add(row)
            else:
                row.payload = payload
                row.schema_version = SNAPSHOT_VERSION
            db.session.commit()
            return row

        row = run_with_retry(_write)
        logger.debug("Saved snapshot %s (version %s)", self.key, row.version_id)
        return row

    def clear(self) -> bool:
        row = db.session.get(StoreSnapshot, self.key)
        if row is None:
            return False
        db.session.delete(row)
        db.session.commit()
        logger.debug("Cleared snapshot %s", self.key)
        return True
