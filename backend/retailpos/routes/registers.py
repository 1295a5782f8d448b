# Overview: Flask API routes for register shifts; parses input and returns JSON responses.

"""
Register Shift API Routes

WHY: Cash accountability for the drawer.

DESIGN:
- One shift at a time: open -> close
- Closing a closed shift returns it unchanged
- Expected cash counts only the cash portion of sales
"""

from flask import Blueprint, jsonify, current_app

from ..processor import get_processor
from ..validation import NotFoundError
from . import error_response, json_body

registers_bp = Blueprint("registers", __name__, url_prefix="/api/registers")


@registers_bp.post("/open")
def open_register_route():
    """
    Open a shift.

    Request body:
    {
        "amount_cents": 10000      (opening float)
    }
    """
    try:
        data = json_body()
        session = get_processor().open_register(data.get("amount_cents"))
        return jsonify({"session": session.to_dict()}), 201
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to open register")
        return jsonify({"error": "Internal server error"}), 500


@registers_bp.post("/close")
def close_register_route():
    """
    Close the current shift with the counted cash.

    Request body:
    {
        "actual_amount_cents": 14950
    }
    """
    try:
        data = json_body()
        session = get_processor().close_register(data.get("actual_amount_cents"))
        return jsonify({"session": session.to_dict()}), 200
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to close register")
        return jsonify({"error": "Internal server error"}), 500


@registers_bp.get("/current")
def current_register_route():
    session = get_processor().query(lambda s: s.register_session)
    if session is None:
        return jsonify({"session": None}), 200
    return jsonify({"session": session.to_dict()}), 200
