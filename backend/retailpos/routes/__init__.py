# Overview: Shared helpers for the API blueprints.

from flask import jsonify, request

from ..validation import ConflictError, InvalidArgumentError, NotFoundError


def json_body() -> dict:
    """Request JSON as a dict; anything else is a 400."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgumentError("JSON object body required")
    return data


def error_response(exc: Exception):
    """Map domain errors to status codes: 404 / 409 / 400."""
    if isinstance(exc, NotFoundError):
        return jsonify({"error": str(exc)}), 404
    if isinstance(exc, ConflictError):
        return jsonify({"error": str(exc)}), 409
    return jsonify({"error": str(exc)}), 400


def holder_ids(source) -> dict:
    """Lot holder identifiers from a body or query string."""
    keys = ("product_id", "variant_id", "catalog_id", "item_id")
    return {k: source.get(k) for k in keys if source.get(k) is not None}
