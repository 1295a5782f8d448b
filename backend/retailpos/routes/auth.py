# Overview: Flask API routes for PIN login; parses input and returns JSON responses.

from flask import Blueprint, jsonify, current_app

from ..processor import get_processor
from ..services.auth_service import AuthenticationError
from ..validation import NotFoundError
from . import error_response, json_body

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    """
    Set a PIN for an existing user, or create a Cashier.

    Request body:
    {
        "email": "staff@pos.local",
        "pin": "1234"
    }
    """
    try:
        data = json_body()
        user = get_processor().register_user(data.get("email"), data.get("pin"))
        return jsonify({"user": user.to_public_dict()}), 201
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    try:
        data = json_body()
        user = get_processor().login(data.get("email"), data.get("pin"))
        return jsonify({"user": user.to_public_dict()}), 200
    except AuthenticationError as e:
        return jsonify({"error": str(e)}), 401
    except ValueError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Login failed")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    get_processor().logout()
    return jsonify({"status": "logged_out"}), 200


@auth_bp.get("/me")
def me_route():
    user = get_processor().query(lambda s: s.current_user)
    if user is None:
        return jsonify({"user": None}), 200
    return jsonify({"user": user.to_public_dict()}), 200
