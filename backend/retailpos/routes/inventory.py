# Overview: Flask API routes for stock adjustments, lots and low-stock reporting.

from flask import Blueprint, request, jsonify, current_app

from ..processor import get_processor
from ..services import catalog_service
from ..validation import NotFoundError
from . import error_response, holder_ids, json_body

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.post("/adjustments")
def add_adjustment_route():
    """
    Signed stock correction.

    Request body:
    {
        "product_id": "p-1",
        "quantity": -2,
        "reason": "Damaged"     (Damaged | Expired | Theft | Correction | Gift)
    }
    """
    try:
        adjustment = get_processor().add_stock_adjustment(json_body())
        return jsonify({"adjustment": adjustment.to_dict()}), 201
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add stock adjustment")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.get("/adjustments")
def list_adjustments_route():
    items = get_processor().query(lambda s: [a.to_dict() for a in s.stock_adjustments])
    return jsonify({"items": items}), 200


@inventory_bp.get("/low-stock")
def low_stock_route():
    def _report(state):
        return [
            {
                "product_id": p.id,
                "name": p.name,
                "stock": p.stock,
                "min_stock_level": p.min_stock_level,
                "stock_value_cents": catalog_service.stock_value_cents(p),
            }
            for p in catalog_service.low_stock_products(state)
        ]

    return jsonify({"items": get_processor().query(_report)}), 200


# =============================================================================
# LOTS
# =============================================================================

@inventory_bp.post("/lots")
def add_lot_route():
    """
    Add a lot to a product, variant or catalog item; the holder's stock grows by its quantity.

    Request body:
    {
        "product_id": "p-1", "variant_id": "v-1"      (or "catalog_id" + "item_id")
        "lot": {"lot_number": "L-2027", "quantity": 12, "expiry_date": "2027-03-01"}
    }
    """
    try:
        data = json_body()
        lot = get_processor().add_lot(data.get("lot") or {}, **holder_ids(data))
        return jsonify({"lot": lot.to_dict()}), 201
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add lot")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.put("/lots/<lot_id>")
def update_lot_route(lot_id):
    try:
        data = json_body()
        lot = get_processor().update_lot(lot_id, data.get("changes") or {}, **holder_ids(data))
        return jsonify({"lot": lot.to_dict()}), 200
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update lot")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.delete("/lots/<lot_id>")
def delete_lot_route(lot_id):
    try:
        lot = get_processor().delete_lot(lot_id, **holder_ids(request.args))
        return jsonify({"lot": lot.to_dict()}), 200
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete lot")
        return jsonify({"error": "Internal server error"}), 500


@inventory_bp.post("/lots/mark-expired")
def mark_expired_route():
    try:
        data = json_body()
        lots = get_processor().mark_expired_lots(data.get("as_of"))
        return jsonify({"items": [l.to_dict() for l in lots], "count": len(lots)}), 200
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to mark expired lots")
        return jsonify({"error": "Internal server error"}), 500
