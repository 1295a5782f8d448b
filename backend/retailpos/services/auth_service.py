# Overview: Service-layer operations for auth; PIN login for store users.

"""
PIN Authentication

WHY: Every ledger entry records who acted. The current user is part of the
snapshot so a restart keeps the same operator signed in.

SECURITY NOTES:
- PINs hashed with bcrypt; the hash never leaves the store through the API
- PIN must be 4-8 digits
"""

import re

import bcrypt

from ..domain import StoreState, User
from ..validation import InvalidArgumentError, require_str
from .document_service import ensure_unique_id


class AuthenticationError(Exception):
    """Raised when an email/PIN pair does not match an active user."""
    pass


def validate_pin(pin: str) -> None:
    if not isinstance(pin, str) or not re.fullmatch(r"\d{4,8}", pin):
        raise InvalidArgumentError("PIN must be 4-8 digits")


def hash_pin(pin: str) -> str:
    """Hash a PIN with bcrypt. PIN format is validated before hashing."""
    validate_pin(pin)
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(pin.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_pin(pin: str, pin_hash: str) -> bool:
    try:
        return bcrypt.checkpw(pin.encode('utf-8'), pin_hash.encode('utf-8'))
    except ValueError:
        return False


def _find_by_email(state: StoreState, email: str) -> User | None:
    email = email.strip().lower()
    return next((u for u in state.users if u.email.lower() == email), None)


def register_user(state: StoreState, email: str, pin: str) -> User:
    """
    Set the PIN for an existing user, or create a Cashier with it.

    New users are named after the local part of their email.
    """
    email = require_str({"email": email}, "email")
    pin_hash = hash_pin(pin)

    user = _find_by_email(state, email)
    if user is not None:
        user.pin_hash = pin_hash
        return user

    user = User(
        id=ensure_unique_id((u.id for u in state.users), None, state, "USERS", "U"),
        name=email.split("@")[0],
        email=email,
        role="Cashier",
        status="Active",
        pin_hash=pin_hash,
    )
    state.users.append(user)
    return user


def login(state: StoreState, email: str, pin: str) -> User:
    user = _find_by_email(state, email or "")
    if user is None or user.status != "Active" or not user.pin_hash:
        raise AuthenticationError("Invalid email or PIN")
    if not verify_pin(pin or "", user.pin_hash):
        raise AuthenticationError("Invalid email or PIN")
    state.current_user_id = user.id
    return user


def logout(state: StoreState) -> None:
    state.current_user_id = None
