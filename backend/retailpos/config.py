# backend/retailpos/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/retailpos.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///retailpos.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Key of the single full-state row in store_snapshots
    SNAPSHOT_KEY = os.environ.get("SNAPSHOT_KEY", "POS_DATA_V1")

    # Stock may go below zero (backorders) and receipts may exceed the ordered quantity
    ALLOW_NEGATIVE_STOCK = _env_flag("ALLOW_NEGATIVE_STOCK", True)
    ALLOW_OVER_RECEIVE = _env_flag("ALLOW_OVER_RECEIVE", True)

    SEED_DEMO_DATA = _env_flag("SEED_DEMO_DATA", False)
