# shipquote/services/shipping_quote/free_shipping.py
"""
Per-zone free-shipping rule.

Applied after option pricing: once the order value reaches the zone's
threshold every available option costs nothing. The undiscounted
base_shipping_cost is still reported.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .types import _dec, money

DEFAULT_THRESHOLDS: Dict[str, Decimal] = {
    "A": Decimal("499"),
    "B": Decimal("699"),
    "C": Decimal("999"),
    "D": Decimal("1499"),
    "E": Decimal("2499"),
}
FALLBACK_THRESHOLD = Decimal("1499")


@dataclass(frozen=True)
class FreeShippingRule:
    enabled: bool = False
    thresholds: Mapping[str, Decimal] = field(default_factory=lambda: dict(DEFAULT_THRESHOLDS))
    zones: Optional[Sequence[str]] = None
    fallback_threshold: Decimal = FALLBACK_THRESHOLD

    @classmethod
    def from_settings(cls, settings: Any) -> "FreeShippingRule":
        return cls(
            enabled=bool(settings.SHIPQUOTE_FREE_SHIPPING_ENABLED),
            thresholds={str(k).upper(): _dec(v) for k, v in settings.SHIPQUOTE_FREE_SHIPPING_THRESHOLDS.items()},
            zones=settings.SHIPQUOTE_FREE_SHIPPING_ZONES,
        )

    def threshold_for(self, zone: str) -> Decimal:
        return _dec(self.thresholds.get(zone, self.fallback_threshold))

    def enabled_for(self, zone: str) -> bool:
        if not self.enabled:
            return False
        return self.zones is None or zone in self.zones

    def qualifies(self, zone: str, order_value: Any) -> bool:
        return self.enabled_for(zone) and _dec(order_value) >= self.threshold_for(zone)


def apply_free_shipping(options: List[Dict[str, Any]]) -> None:
    """Zero every option's total in place, keeping the waived amount as an adjustment."""
    for o in options:
        cost = o["cost"]
        waived = money(_dec(cost["total_cost"]))
        cost["adjustments"].append({"type": "free_shipping", "amount": float(-waived)})
        cost["total_cost"] = 0.0
        o["is_free_shipping"] = True
