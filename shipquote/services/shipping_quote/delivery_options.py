# shipquote/services/shipping_quote/delivery_options.py
"""
Delivery-option eligibility, cost and delivery window.

Eligibility is a short-circuit AND, evaluated in a fixed order so ``explain``
always names the same first failing rule:

    1. is_active
    2. availability_zones (empty = every zone)
    3. min_order_value
    4. restricted_days (0 = Sunday .. 6 = Saturday, on the order date)
    5. cutoff_time (order_time strictly after cutoff -> not offered today)
    6. eligibility conditions
"""
from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from .conditions import apply_pricing, first_failed_condition
from .snapshot import ConfigSource
from .types import DeliveryOptionInfo, QuoteContext, ZoneEntry, _dec, is_weekend, money, sunday_weekday

REASON_INACTIVE = "inactive"
REASON_ZONE = "zone_not_allowed"
REASON_MIN_ORDER = "below_min_order_value"
REASON_RESTRICTED_DAY = "restricted_day"
REASON_PAST_CUTOFF = "past_cutoff"


def window_label(min_days: int, max_days: int) -> str:
    if min_days == max_days:
        return "1 business day" if min_days == 1 else f"{min_days} business days"
    return f"{min_days}-{max_days} business days"


class DeliveryOptionResolver:
    def __init__(self, source: ConfigSource) -> None:
        self.source = source

    # ---------------- eligibility ----------------

    def explain(
        self, option: DeliveryOptionInfo, zone: str, order_value: Any, ctx: QuoteContext
    ) -> Optional[str]:
        """First failed rule for ``option``, or None when it is available."""
        value = _dec(order_value)

        if not option.is_active:
            return REASON_INACTIVE
        if option.availability_zones and zone not in option.availability_zones:
            return REASON_ZONE
        if option.min_order_value is not None and value < option.min_order_value:
            return REASON_MIN_ORDER
        if option.restricted_days and sunday_weekday(ctx.order_date) in option.restricted_days:
            return REASON_RESTRICTED_DAY
        if option.cutoff_time is not None and ctx.order_time > option.cutoff_time:
            return REASON_PAST_CUTOFF

        failed = first_failed_condition(option.conditions, zone=zone, order_value=value, ctx=ctx)
        if failed:
            return f"condition_failed:{failed}"
        return None

    def is_available(self, option: DeliveryOptionInfo, zone: str, order_value: Any, ctx: QuoteContext) -> bool:
        return self.explain(option, zone, order_value, ctx) is None

    # ---------------- cost ----------------

    def calculate_cost(
        self, option: DeliveryOptionInfo, base_cost: Any, order_value: Any, ctx: QuoteContext
    ) -> Dict[str, Any]:
        base = _dec(base_cost)
        adjusted = base * option.price_multiplier
        surcharge = option.fixed_surcharge
        total, adjustments = apply_pricing(
            option.conditions, adjusted + surcharge, order_value=_dec(order_value), ctx=ctx
        )
        total = max(total, Decimal("0"))
        return {
            "base_cost": float(money(base)),
            "multiplier_adjusted_cost": float(money(adjusted)),
            "surcharge": float(money(surcharge)),
            "adjustments": [{"type": a["type"], "amount": round(a["amount"], 2)} for a in adjustments],
            "total_cost": float(money(total)),
        }

    # ---------------- window / dates ----------------

    def get_delivery_window(self, option: DeliveryOptionInfo, zone_entry: Optional[ZoneEntry]) -> Dict[str, Any]:
        floor = int(zone_entry.expected_delivery_days) if zone_entry is not None else 0
        min_days = max(int(option.delivery_days_min), floor)
        max_days = max(int(option.delivery_days_max), floor)
        return {"min_days": min_days, "max_days": max_days, "label": window_label(min_days, max_days)}

    def _add_days(
        self, option: DeliveryOptionInfo, start: date, days: int, business_days_only: bool
    ) -> Optional[date]:
        def counts(d: date) -> bool:
            if option.restricted_days and sunday_weekday(d) in option.restricted_days:
                return False
            if business_days_only and is_weekend(d):
                return False
            return True

        # every weekday blocked: no date can ever be reached
        if not any(counts(start + timedelta(days=i)) for i in range(1, 8)):
            return None

        d = start
        added = 0
        while added < days:
            d += timedelta(days=1)
            if counts(d):
                added += 1
        return d

    def estimate_dates(
        self,
        option: DeliveryOptionInfo,
        window: Dict[str, Any],
        order_date: date,
        business_days_only: bool = False,
    ) -> Dict[str, Optional[str]]:
        lo = self._add_days(option, order_date, int(window["min_days"]), business_days_only)
        hi = self._add_days(option, order_date, int(window["max_days"]), business_days_only)
        return {
            "min_date": lo.isoformat() if lo else None,
            "max_date": hi.isoformat() if hi else None,
        }

    # ---------------- listing ----------------

    def get_available_options(
        self,
        zone: str,
        order_value: Any,
        base_cost: Any,
        ctx: QuoteContext,
        zone_entry: Optional[ZoneEntry] = None,
        options: Optional[Sequence[DeliveryOptionInfo]] = None,
    ) -> List[Dict[str, Any]]:
        pool = self.source.delivery_options() if options is None else options
        survivors = [o for o in pool if self.is_available(o, zone, order_value, ctx)]
        survivors.sort(key=lambda o: (o.sort_order, o.name))

        cod = bool(zone_entry.cod_available) if zone_entry is not None else False
        out: List[Dict[str, Any]] = []
        for o in survivors:
            window = self.get_delivery_window(o, zone_entry)
            out.append(
                {
                    "id": o.id,
                    "code": o.code,
                    "name": o.name,
                    "description": o.description,
                    "delivery_window": window,
                    "estimated_delivery": self.estimate_dates(o, window, ctx.order_date, ctx.business_days_only),
                    "cost": self.calculate_cost(o, base_cost, order_value, ctx),
                    "cod_available": cod,
                    "is_free_shipping": False,
                }
            )
        return out
