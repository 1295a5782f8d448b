# Overview: Flask API routes for ledger reads; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..domain.ledger import CATEGORIES
from ..processor import get_processor
from ..services import ledger_service
from ..validation import InvalidArgumentError, optional_date
from . import error_response

"""
Time semantics:
- Entries carry a business date (YYYY-MM-DD).
- as_of filtering is inclusive: date <= as_of.
"""

ledger_bp = Blueprint("ledger", __name__, url_prefix="/api/ledger")


@ledger_bp.get("")
def list_ledger_entries_route():
    category = request.args.get("category")
    account_id = request.args.get("account_id")
    reference_id = request.args.get("reference_id")

    if category is not None and category not in CATEGORIES:
        return jsonify({"error": f"Invalid category. Must be one of: {', '.join(CATEGORIES)}"}), 400

    limit = request.args.get("limit", default=100, type=int)
    limit = max(1, min(limit, 500))

    def _select(state):
        entries = state.ledger
        if category:
            entries = [e for e in entries if e.category == category]
        if account_id:
            entries = [e for e in entries if e.account_id == account_id]
        if reference_id:
            entries = [e for e in entries if e.reference_id == reference_id]
        # Newest first
        return [e.to_dict() for e in reversed(entries[-limit:])]

    return jsonify({"items": get_processor().query(_select), "limit": limit}), 200


@ledger_bp.get("/summary")
def ledger_summary_route():
    totals = get_processor().query(ledger_service.totals_by_category)
    return jsonify({"categories": totals}), 200


@ledger_bp.get("/accounts/<account_id>/balance")
def account_balance_route(account_id):
    try:
        as_of = optional_date(request.args, "as_of")
    except InvalidArgumentError as e:
        return error_response(e)

    balance = get_processor().query(
        lambda s: ledger_service.account_balance_cents(s, account_id, as_of)
    )
    return jsonify({"account_id": account_id, "as_of": as_of, "balance_cents": balance}), 200
