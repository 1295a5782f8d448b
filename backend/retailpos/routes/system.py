# backend/retailpos/routes/system.py
"""
System health and snapshot endpoints.
"""

import time

from flask import Blueprint, jsonify, current_app

from ..extensions import db
from ..models import StoreSnapshot
from ..processor import get_processor
from ..services.entity_service import lot_invariant_violations
from ..validation import NotFoundError
from . import error_response, json_body

system_bp = Blueprint("system", __name__, url_prefix="/api/system")


def check_database_health() -> dict:
    """
    Check database connectivity and the snapshot row.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        row = db.session.get(StoreSnapshot, current_app.config["SNAPSHOT_KEY"])
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"snapshot": row.to_dict() if row else None},
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


def check_store_health() -> dict:
    """Lot sums must match holder stock everywhere."""
    violations = get_processor().query(lot_invariant_violations)
    if violations:
        return {"status": "degraded", "warning": "Lot totals out of sync", "holders": violations}
    return {"status": "healthy"}


@system_bp.get("/health")
def health():
    database_health = check_database_health()
    store_health = check_store_health()

    statuses = {database_health["status"], store_health["status"]}
    if "unhealthy" in statuses:
        overall, code = "unhealthy", 503
    elif "degraded" in statuses:
        overall, code = "degraded", 200
    else:
        overall, code = "healthy", 200

    return jsonify({
        "status": overall,
        "checks": {"database": database_health, "store": store_health},
    }), code


@system_bp.get("/snapshot")
def snapshot():
    state = get_processor().snapshot()
    for user in state["users"]:
        user.pop("pin_hash", None)
    return jsonify(state), 200


@system_bp.put("/settings")
def update_settings_route():
    try:
        settings = get_processor().update_settings(**json_body())
        return jsonify({"settings": settings.to_dict()}), 200
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update settings")
        return jsonify({"error": "Internal server error"}), 500
