# Overview: Flask API routes for sales and sales returns; parses input and returns JSON responses.

"""
Sales API Routes

DESIGN:
- POST /api/sales records a completed sale (stock, ledger, loyalty, register)
- Returns are appended to the invoice; invoice totals are never rewritten
- Money in integer cents throughout
"""

from flask import Blueprint, jsonify, current_app

from ..processor import get_processor
from ..validation import NotFoundError
from . import error_response, json_body

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
def record_sale_route():
    """
    Record a sale.

    Request body:
    {
        "total_cents": 10000,
        "customer_id": "c-1",            (optional; walk-in when omitted)
        "payment_method": "Cash",
        "payment_splits": [{"method": "Cash", "amount_cents": 6000}, ...],
        "items": [{"product_id": "p-1", "name": "Widget", "quantity": 2, "price_cents": 5000}]
    }
    """
    try:
        invoice = get_processor().record_sale(json_body())
        return jsonify({"invoice": invoice.to_dict()}), 201
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("")
def list_sales_route():
    invoices = get_processor().query(lambda s: [i.to_dict() for i in s.invoices])
    return jsonify({"items": invoices}), 200


@sales_bp.get("/<invoice_id>")
def get_sale_route(invoice_id):
    invoice = get_processor().query(lambda s: s.invoice(invoice_id))
    if invoice is None:
        return jsonify({"error": "Invoice not found"}), 404
    return jsonify({"invoice": invoice.to_dict()}), 200


@sales_bp.post("/<invoice_id>/returns")
def sales_return_route(invoice_id):
    """
    Return some lines of a sale.

    Request body:
    {
        "items": [{"product_id": "p-1", "quantity": 1, "refund_amount_cents": 5000, "reason": "Damaged"}]
    }
    """
    try:
        data = json_body()
        entry = get_processor().process_sales_return(invoice_id, data.get("items"))
        return jsonify({"return": entry.to_dict()}), 201
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to process sales return")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.post("/<invoice_id>/return-all")
def return_invoice_route(invoice_id):
    try:
        entry = get_processor().return_invoice(invoice_id)
        return jsonify({"return": entry.to_dict()}), 201
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to return invoice")
        return jsonify({"error": "Internal server error"}), 500
