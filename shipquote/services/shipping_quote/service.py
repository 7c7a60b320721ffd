# shipquote/services/shipping_quote/service.py
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from shipquote.core.config import get_settings
from shipquote.metrics import QUOTE_LAT, QUOTES

from .delivery_options import DeliveryOptionResolver
from .errors import ConfigurationMissingError, NoOptionsAvailableError, ValidationError, ZoneNotFoundError
from .free_shipping import FreeShippingRule, apply_free_shipping
from .slabs import WeightSlabResolver
from .snapshot import ConfigSource, DbConfigSource
from .types import QuoteContext, QuoteRequest, ZoneEntry, _dec, money, norm_pincode, zone_name
from .weight import ChargeableWeightCalculator
from .zones import ZoneRegistry

log = logging.getLogger("shipquote.quote")

PAYMENT_MODES = ("prepaid", "cod")

JsonObject = Dict[str, Any]


def _empty_result(req: QuoteRequest, courier: str) -> JsonObject:
    return {
        "ok": True,
        "deliverable": False,
        "failure_code": None,
        "failure_reason": None,
        "courier": courier,
        "payment_mode": req.payment_mode,
        "zone": None,
        "zone_name": None,
        "zone_info": None,
        "chargeable_weight": None,
        "weight": {},
        "slab": None,
        "base_shipping_cost": None,
        "cod_charge": None,
        "free_shipping_enabled": False,
        "free_shipping_threshold": None,
        "is_free_shipping": False,
        "available_options": [],
        "reasons": [],
    }


class ShippingQuoteService:
    """
    Quote = zone lookup + chargeable weight + slab rate + eligible delivery options.

    Missing configuration and empty option lists come back as
    ``deliverable=False`` with a failure_code; only malformed input raises.
    """

    def __init__(
        self,
        source: ConfigSource,
        *,
        dim_divisor: Optional[float] = None,
        default_courier: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
        free_shipping: Optional[FreeShippingRule] = None,
    ) -> None:
        settings = get_settings()
        self.source = source
        self.zones = ZoneRegistry(source)
        self.weights = ChargeableWeightCalculator(
            dim_divisor if dim_divisor is not None else settings.SHIPQUOTE_DIM_DIVISOR
        )
        self.slabs = WeightSlabResolver(source)
        self.options = DeliveryOptionResolver(source)
        self.default_courier = default_courier or settings.SHIPQUOTE_DEFAULT_COURIER
        self.clock = clock or datetime.now
        self.free_shipping = free_shipping or FreeShippingRule.from_settings(settings)

    @classmethod
    def for_session(cls, db: Session, **kw: Any) -> "ShippingQuoteService":
        return cls(DbConfigSource(db), **kw)

    # ---------------- input ----------------

    def _validate(self, req: QuoteRequest) -> QuoteRequest:
        """Normalised copy of ``req``; the caller's request is left as it was."""
        delivery = norm_pincode(req.delivery_pincode, "delivery_pincode")
        pickup = req.pickup_pincode
        if pickup:
            # single origin: accepted and checked, not used for zone resolution
            pickup = norm_pincode(pickup, "pickup_pincode")
        if req.order_value is None or _dec(req.order_value) < 0:
            raise ValidationError(
                "order_value must be >= 0",
                code="INVALID_ORDER_VALUE",
                context={"order_value": req.order_value},
            )
        mode = (req.payment_mode or "prepaid").strip().lower()
        if mode not in PAYMENT_MODES:
            raise ValidationError(
                f"payment_mode must be one of {', '.join(PAYMENT_MODES)}",
                code="INVALID_PAYMENT_MODE",
                context={"payment_mode": req.payment_mode},
            )
        return replace(req, delivery_pincode=delivery, pickup_pincode=pickup, payment_mode=mode)

    def _context(self, req: QuoteRequest, now: datetime, entry: Optional[ZoneEntry]) -> QuoteContext:
        ctx = QuoteContext.from_now(now, entry, business_days_only=bool(req.business_days_only))
        if req.order_date is None and req.order_time is None:
            return ctx
        return QuoteContext(
            order_date=req.order_date or ctx.order_date,
            order_time=req.order_time or ctx.order_time,
            is_metro=ctx.is_metro,
            is_remote=ctx.is_remote,
            business_days_only=ctx.business_days_only,
        )

    # ---------------- quote ----------------

    def quote(self, req: QuoteRequest, now: Optional[datetime] = None) -> JsonObject:
        with QUOTE_LAT.time():
            try:
                result = self._quote(req, now or self.clock())
            except ValidationError as e:
                QUOTES.labels("invalid").inc()
                log.info("quote rejected: %s %s", e.code, e.message)
                raise
        QUOTES.labels(result["failure_code"].lower() if result["failure_code"] else "ok").inc()
        return result

    def _quote(self, req: QuoteRequest, now: datetime) -> JsonObject:
        req = self._validate(req)
        courier = (req.courier or "").strip() or self.default_courier

        weight_info = self.weights.breakdown(req.items)
        chargeable: Decimal = weight_info.pop("_chargeable")

        out = _empty_result(req, courier)
        out["chargeable_weight"] = float(chargeable)
        out["weight"] = weight_info
        reasons: List[str] = out["reasons"]

        try:
            entry = self.zones.resolve(req.delivery_pincode)
        except ZoneNotFoundError as e:
            log.info("quote: pincode %s not serviceable", req.delivery_pincode)
            return self._fail(out, e.code, e.message)

        out["zone"] = entry.zone
        out["zone_name"] = zone_name(entry.zone)
        out["zone_info"] = entry.to_dict()
        out["free_shipping_enabled"] = self.free_shipping.enabled_for(entry.zone)
        out["free_shipping_threshold"] = float(self.free_shipping.threshold_for(entry.zone))
        reasons.append(
            f"zone_match: pincode={entry.pincode} zone={entry.zone} ({zone_name(entry.zone)})"
            f" metro={entry.is_metro} remote={entry.is_remote}"
        )

        try:
            match = self.slabs.resolve_slab(courier, chargeable)
            rate = self.slabs.rate_for(match, entry.zone)
            slab_price = self.slabs.resolve_rate(courier, match, entry.zone)
        except ConfigurationMissingError as e:
            log.warning("quote: configuration missing: %s", e.message)
            return self._fail(out, e.code, e.message)

        out["slab"] = match.to_dict()
        if match.overage:
            reasons.append(
                f"slab_match: top slab {match.slab.base_weight}kg + overage {match.excess_weight}kg"
                f" (chargeable={chargeable}kg, courier={courier})"
            )
        else:
            reasons.append(f"slab_match: <= {match.slab.base_weight}kg (chargeable={chargeable}kg, courier={courier})")

        base_cost = money(slab_price * entry.zone_multiplier)
        reasons.append(f"base_cost: {slab_price} x zone_multiplier {entry.zone_multiplier} = {base_cost}")

        if req.payment_mode == "cod":
            if not entry.cod_available:
                out["base_shipping_cost"] = float(base_cost)
                return self._fail(
                    out, "COD_NOT_AVAILABLE", f"cash on delivery is not available for pincode {entry.pincode}"
                )
            cod_charge = self.slabs.resolve_cod_charge(rate, req.order_value)
            out["cod_charge"] = float(cod_charge)
            base_cost = money(base_cost + cod_charge)
            reasons.append(f"cod_charge: {cod_charge}")

        out["base_shipping_cost"] = float(base_cost)

        ctx = self._context(req, now, entry)
        options = self.options.get_available_options(entry.zone, req.order_value, base_cost, ctx, entry)
        out["available_options"] = options
        if not options:
            e = NoOptionsAvailableError("no delivery option is available for this order right now")
            return self._fail(out, e.code, e.message)

        reasons.append("options: " + ", ".join(o["code"] for o in options))
        if self.free_shipping.qualifies(entry.zone, req.order_value):
            apply_free_shipping(options)
            out["is_free_shipping"] = True
            reasons.append(
                f"free_shipping: order_value {req.order_value} >= {self.free_shipping.threshold_for(entry.zone)}"
                f" (zone {entry.zone})"
            )
        out["deliverable"] = True
        return out

    @staticmethod
    def _fail(out: JsonObject, code: str, message: str) -> JsonObject:
        out["deliverable"] = False
        out["failure_code"] = code
        out["failure_reason"] = message
        return out
