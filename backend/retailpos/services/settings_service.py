# Overview: Shop-wide settings updates.

from __future__ import annotations

from dataclasses import fields
from typing import Any, Mapping

from ..domain import Settings, StoreState
from ..validation import InvalidArgumentError, require_choice

THEME_MODES = ("light", "dark")
ACCENT_COLORS = ("indigo", "emerald", "rose", "amber", "blue", "violet")


def update_settings(state: StoreState, changes: Mapping[str, Any]) -> Settings:
    """Merge known keys into settings; unknown keys are rejected."""
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise InvalidArgumentError(f"Unknown settings: {', '.join(unknown)}")

    if "theme_mode" in changes:
        require_choice(changes["theme_mode"], "theme_mode", THEME_MODES)
    if "accent_color" in changes:
        require_choice(changes["accent_color"], "accent_color", ACCENT_COLORS)
    if "tax_rate" in changes:
        rate = changes["tax_rate"]
        if isinstance(rate, bool) or not isinstance(rate, (int, float)) or rate < 0:
            raise InvalidArgumentError("tax_rate must be a non-negative number")

    for key, value in changes.items():
        setattr(state.settings, key, value)
    return state.settings
