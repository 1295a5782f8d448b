# Overview: Flask API routes for supplier purchases, receiving and supplier returns.

from flask import Blueprint, jsonify, current_app

from ..processor import get_processor
from ..validation import NotFoundError
from . import error_response, json_body

purchases_bp = Blueprint("purchases", __name__, url_prefix="/api/purchases")


@purchases_bp.post("")
def record_purchase_route():
    """
    Create a purchase (ORDER) or a fully received purchase invoice (INVOICE).

    Request body:
    {
        "supplier_id": "s-1",
        "type": "ORDER",
        "items": [{"product_id": "p-1", "quantity": 10, "cost_cents": 500}],
        "total_cents": 5000     (optional; computed from lines when omitted)
    }
    """
    try:
        purchase = get_processor().record_purchase(json_body())
        return jsonify({"purchase": purchase.to_dict()}), 201
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record purchase")
        return jsonify({"error": "Internal server error"}), 500


@purchases_bp.get("")
def list_purchases_route():
    purchases = get_processor().query(lambda s: [p.to_dict() for p in s.purchases])
    return jsonify({"items": purchases}), 200


@purchases_bp.get("/<purchase_id>")
def get_purchase_route(purchase_id):
    purchase = get_processor().query(lambda s: s.purchase(purchase_id))
    if purchase is None:
        return jsonify({"error": "Purchase not found"}), 404
    return jsonify({"purchase": purchase.to_dict()}), 200


@purchases_bp.post("/<purchase_id>/receive")
def receive_purchase_route(purchase_id):
    """
    Receive a delivery.

    Request body:
    {
        "receipts": [{"product_id": "p-1", "quantity": 4, "batch_no": "B1", "expiry_date": "2027-01-01"}],
        "note": "first pallet"    (optional)
    }
    """
    try:
        data = json_body()
        purchase = get_processor().receive_purchase_items(
            purchase_id, data.get("receipts"), note=data.get("note")
        )
        return jsonify({"purchase": purchase.to_dict()}), 200
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to receive purchase")
        return jsonify({"error": "Internal server error"}), 500


@purchases_bp.post("/<purchase_id>/returns")
def return_purchase_route(purchase_id):
    try:
        data = json_body()
        entry = get_processor().return_purchase(purchase_id, data.get("items"))
        return jsonify({"return": entry.to_dict()}), 201
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to return purchase")
        return jsonify({"error": "Internal server error"}), 500
