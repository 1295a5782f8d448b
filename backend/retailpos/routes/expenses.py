# Overview: Flask API routes for store expenses.

from flask import Blueprint, jsonify, current_app

from ..processor import get_processor
from ..validation import NotFoundError
from . import error_response, json_body

expenses_bp = Blueprint("expenses", __name__, url_prefix="/api/expenses")


@expenses_bp.post("")
def record_expense_route():
    """
    Request body:
    {
        "title": "Electricity",
        "category": "Utilities",
        "amount_cents": 12000,
        "status": "Paid"       (Paid | Pending)
    }
    """
    try:
        expense = get_processor().record_expense(json_body())
        return jsonify({"expense": expense.to_dict()}), 201
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to record expense")
        return jsonify({"error": "Internal server error"}), 500


@expenses_bp.get("")
def list_expenses_route():
    items = get_processor().query(lambda s: [e.to_dict() for e in s.expenses])
    return jsonify({"items": items}), 200
