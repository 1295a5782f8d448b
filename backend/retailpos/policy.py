from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class StorePolicy:
    """
    Permissiveness switches for invariants the store does not enforce by default.

    allow_negative_stock: sales and adjustments may drive stock below zero
        (callers use this to represent backorders).
    allow_over_receive: a purchase line may receive more than was ordered.
    """
    allow_negative_stock: bool = True
    allow_over_receive: bool = True

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "StorePolicy":
        return cls(
            allow_negative_stock=bool(config.get("ALLOW_NEGATIVE_STOCK", True)),
            allow_over_receive=bool(config.get("ALLOW_OVER_RECEIVE", True)),
        )
