from __future__ import annotations

from typing import Any, Iterable, Mapping

from retailpos.time_utils import parse_iso_date


# Maximum amount: 9,999,999.99 (999,999,999 cents)
# This prevents nonsensical prices and totals from entering the snapshot
MAX_AMOUNT_CENTS = 999_999_999


class InvalidArgumentError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate invoice id)."""


class NotFoundError(LookupError):
    """404-level reference to an entity that does not exist."""

    def __init__(self, kind: str, entity_id: Any):
        super().__init__(f"{kind} {entity_id!r} not found")
        self.kind = kind
        self.entity_id = entity_id


def coerce_int(value: Any, field: str, *, minimum: int | None = None) -> int:
    """
    Strict integer coercion.

    Accepts ints and plain digit strings. Rejects bools, floats, decimals and
    scientific notation so that "12.5" or 1e3 never silently become stock.
    """
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{field} must be an integer")

    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise InvalidArgumentError(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if "e" in stripped.lower():
            raise InvalidArgumentError(f"{field} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if "." in stripped:
            raise InvalidArgumentError(f"{field} must be an integer (no decimals)")
        try:
            result = int(stripped)
        except ValueError:
            raise InvalidArgumentError(f"{field} must be an integer")
    elif isinstance(value, float):
        raise InvalidArgumentError(f"{field} must be an integer, not a decimal")
    else:
        raise InvalidArgumentError(f"{field} must be an integer")

    if minimum is not None and result < minimum:
        raise InvalidArgumentError(f"{field} must be >= {minimum}")
    return result


def coerce_cents(value: Any, field: str, *, allow_negative: bool = False) -> int:
    cents = coerce_int(value, field, minimum=None if allow_negative else 0)
    if abs(cents) > MAX_AMOUNT_CENTS:
        raise InvalidArgumentError(f"{field} exceeds maximum of {MAX_AMOUNT_CENTS} cents")
    return cents


def require_str(data: Mapping[str, Any], field: str) -> str:
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{field} required")
    return value.strip()


def optional_str(data: Mapping[str, Any], field: str) -> str | None:
    value = data.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{field} must be a string")
    return value.strip() or None


def optional_date(data: Mapping[str, Any], field: str) -> str | None:
    """Validate an optional YYYY-MM-DD field, returning the normalized string."""
    raw = optional_str(data, field)
    if raw is None:
        return None
    try:
        parsed = parse_iso_date(raw)
    except ValueError:
        raise InvalidArgumentError(f"{field} must be an ISO date (YYYY-MM-DD)")
    return parsed.isoformat() if parsed else None


def require_choice(value: Any, field: str, choices: Iterable[str]) -> str:
    allowed = tuple(choices)
    if value not in allowed:
        raise InvalidArgumentError(f"Invalid {field}. Must be one of: {', '.join(allowed)}")
    return value
