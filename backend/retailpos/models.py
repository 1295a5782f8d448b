# backend/retailpos/models.py
from __future__ import annotations
from .extensions import db
from retailpos.time_utils import to_utc_z


class StoreSnapshot(db.Model):
    """
    Key-value blob holding the full store state.

    WHY: The store is a full-snapshot store, not a log. One row per key,
    rewritten in full after every mutating command and read in full at startup.

    version_id gives optimistic locking, so a second writer on the same key
    fails with StaleDataError instead of silently overwriting.
    """
    __tablename__ = "store_snapshots"

    key = db.Column(db.String(64), primary_key=True)
    payload = db.Column(db.JSON, nullable=False)
    schema_version = db.Column(db.Integer, nullable=False, default=1)
    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "schema_version": self.schema_version,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<StoreSnapshot key={self.key!r} version={self.version_id}>"
