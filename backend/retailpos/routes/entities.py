# Overview: Flask API routes for plain collections (products, catalogs, suppliers, customers, users, roles).

from flask import Blueprint, jsonify, current_app

from ..domain import User
from ..processor import get_processor
from ..services.entity_service import COLLECTIONS, parse_kind
from ..validation import NotFoundError
from . import error_response, json_body

entities_bp = Blueprint("entities", __name__, url_prefix="/api/entities")


def _serialize(record) -> dict:
    if isinstance(record, User):
        return record.to_public_dict()
    return record.to_dict()


@entities_bp.get("/<kind>")
def list_entities_route(kind):
    try:
        entry = COLLECTIONS[parse_kind(kind)]
    except ValueError as e:
        return error_response(e)
    items = get_processor().query(lambda s: [_serialize(r) for r in getattr(s, entry.attribute)])
    return jsonify({"items": items}), 200


@entities_bp.post("/<kind>")
def add_entity_route(kind):
    try:
        record = get_processor().add_entity(kind, json_body())
        return jsonify({"record": _serialize(record)}), 201
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add %s", kind)
        return jsonify({"error": "Internal server error"}), 500


@entities_bp.put("/<kind>")
def update_entity_route(kind):
    """Whole-record replacement; the body must carry the record id."""
    try:
        record = get_processor().update_entity(kind, json_body())
        return jsonify({"record": _serialize(record)}), 200
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update %s", kind)
        return jsonify({"error": "Internal server error"}), 500


@entities_bp.delete("/<kind>/<entity_id>")
def delete_entity_route(kind, entity_id):
    try:
        record = get_processor().delete_entity(kind, entity_id)
        return jsonify({"record": _serialize(record)}), 200
    except (NotFoundError, ValueError) as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete %s", kind)
        return jsonify({"error": "Internal server error"}), 500
