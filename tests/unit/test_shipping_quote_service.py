# tests/unit/test_shipping_quote_service.py
from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest

from shipquote.services.shipping_quote import ShippingQuoteService
from shipquote.services.shipping_quote.errors import ValidationError
from shipquote.services.shipping_quote.free_shipping import FreeShippingRule
from shipquote.services.shipping_quote.snapshot import StaticConfigSource
from shipquote.services.shipping_quote.types import CartItem, QuoteRequest
from tests.factories import option_info, rate, slab_ladder, zone_entry

MONDAY_10AM = datetime(2024, 1, 1, 10, 0)


def _source(
    zones: Optional[List[Any]] = None,
    options: Optional[List[Any]] = None,
    with_rates: bool = True,
) -> StaticConfigSource:
    slabs = slab_ladder()
    rates = []
    if with_rates:
        rates = [
            rate(slabs[0], "B", "40"),
            rate(slabs[1], "B", "50", cod_charges="30", cod_percentage="2"),
            rate(slabs[2], "B", "70"),
            rate(slabs[3], "B", "120", aw="45"),
        ]
    if zones is None:
        zones = [
            zone_entry("560001", "B", is_metro=True, zone_multiplier="1.2", expected_delivery_days=2),
            zone_entry("560099", "B", cod_available=False),
        ]
    if options is None:
        options = [
            option_info("standard", option_id=1, days=(3, 5), sort_order=1),
            option_info(
                "express",
                option_id=2,
                days=(1, 2),
                price_multiplier="1.5",
                availability_zones=["A", "B"],
                cutoff_time=time(14, 0),
                sort_order=2,
            ),
        ]
    return StaticConfigSource(zones=zones, slabs=slabs, rates=rates, options=options)


def _req(**kw: Any) -> QuoteRequest:
    kw.setdefault("delivery_pincode", "560001")
    kw.setdefault("items", [CartItem(weight=1.0, length=20, width=14, height=2)])
    kw.setdefault("order_value", 1000)
    return QuoteRequest(**kw)


def _svc(source: Optional[StaticConfigSource] = None) -> ShippingQuoteService:
    return ShippingQuoteService(source or _source(), dim_divisor=5000, default_courier="standard")


def _by_code(res: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    return {o["code"]: o for o in res["available_options"]}


def test_bengaluru_one_kilo_quote():
    res = _svc().quote(_req(), now=MONDAY_10AM)

    assert res["ok"] is True
    assert res["deliverable"] is True
    assert res["failure_code"] is None
    assert res["zone"] == "B"
    assert res["zone_info"]["is_metro"] is True
    assert res["chargeable_weight"] == 1.0
    assert res["slab"]["base_weight"] == 1.0
    # 50 * 1.2
    assert res["base_shipping_cost"] == 60.0

    opts = _by_code(res)
    assert list(opts) == ["standard", "express"]
    assert opts["standard"]["cost"]["total_cost"] == 60.0
    assert opts["express"]["cost"]["total_cost"] == 90.0
    # express 1-2 days, floored at the zone's 2
    assert opts["express"]["delivery_window"] == {"min_days": 2, "max_days": 2, "label": "2 business days"}
    assert opts["express"]["estimated_delivery"] == {"min_date": "2024-01-03", "max_date": "2024-01-03"}
    assert any(r.startswith("zone_match:") for r in res["reasons"])
    assert any(r.startswith("slab_match:") for r in res["reasons"])


def test_quote_is_deterministic():
    svc = _svc()
    a = svc.quote(_req(), now=MONDAY_10AM)
    b = svc.quote(_req(), now=MONDAY_10AM)
    assert a == b


def test_express_drops_after_cutoff():
    res = _svc().quote(_req(), now=datetime(2024, 1, 1, 14, 30))
    assert list(_by_code(res)) == ["standard"]


def test_explicit_order_date_and_time_override_clock():
    res = _svc().quote(_req(order_date=date(2024, 1, 2), order_time=time(15, 0)), now=MONDAY_10AM)
    assert list(_by_code(res)) == ["standard"]
    assert res["available_options"][0]["estimated_delivery"]["min_date"] == "2024-01-05"


def test_unknown_pincode_is_not_deliverable():
    res = _svc().quote(_req(delivery_pincode="999999"), now=MONDAY_10AM)
    assert res["ok"] is True
    assert res["deliverable"] is False
    assert res["failure_code"] == "ZONE_NOT_FOUND"
    assert res["zone"] is None
    assert res["available_options"] == []


def test_missing_rate_is_configuration_missing():
    res = _svc(_source(with_rates=False)).quote(_req(), now=MONDAY_10AM)
    assert res["deliverable"] is False
    assert res["failure_code"] == "CONFIGURATION_MISSING"
    assert res["zone"] == "B"


def test_unknown_courier_is_configuration_missing():
    res = _svc().quote(_req(courier="air_express"), now=MONDAY_10AM)
    assert res["failure_code"] == "CONFIGURATION_MISSING"
    assert res["courier"] == "air_express"


def test_cod_charge_is_added_to_base_cost():
    res = _svc().quote(_req(payment_mode="cod", order_value=1000), now=MONDAY_10AM)
    assert res["deliverable"] is True
    assert res["cod_charge"] == 30.0
    assert res["base_shipping_cost"] == 90.0
    assert _by_code(res)["standard"]["cost"]["total_cost"] == 90.0


def test_cod_percentage_wins_on_large_orders():
    res = _svc().quote(_req(payment_mode="COD", order_value=5000), now=MONDAY_10AM)
    assert res["payment_mode"] == "cod"
    assert res["cod_charge"] == 100.0
    assert res["base_shipping_cost"] == 160.0


def test_cod_not_available_for_pincode():
    res = _svc().quote(_req(delivery_pincode="560099", payment_mode="cod"), now=MONDAY_10AM)
    assert res["deliverable"] is False
    assert res["failure_code"] == "COD_NOT_AVAILABLE"
    assert res["base_shipping_cost"] == 50.0
    assert res["cod_charge"] is None


def test_no_options_available():
    src = _source(options=[option_info("express", availability_zones=["A"])])
    res = _svc(src).quote(_req(), now=MONDAY_10AM)
    assert res["deliverable"] is False
    assert res["failure_code"] == "NO_OPTIONS_AVAILABLE"
    assert res["base_shipping_cost"] == 60.0


def test_overage_quote_uses_additional_weight():
    res = _svc().quote(_req(items=[CartItem(weight=12)]), now=MONDAY_10AM)
    assert res["slab"]["overage"] is True
    # (120 + 2 * 45) * 1.2
    assert res["base_shipping_cost"] == 252.0


@pytest.mark.parametrize(
    "kw, code",
    [
        ({"delivery_pincode": "56001"}, "INVALID_PINCODE"),
        ({"delivery_pincode": "56000A"}, "INVALID_PINCODE"),
        ({"pickup_pincode": "abc"}, "INVALID_PINCODE"),
        ({"items": []}, "EMPTY_CART"),
        ({"items": [CartItem(weight=0)]}, "INVALID_WEIGHT"),
        ({"order_value": -1}, "INVALID_ORDER_VALUE"),
        ({"payment_mode": "card"}, "INVALID_PAYMENT_MODE"),
    ],
)
def test_malformed_input_raises(kw, code):
    with pytest.raises(ValidationError) as ei:
        _svc().quote(_req(**kw), now=MONDAY_10AM)
    assert ei.value.code == code


def test_pincode_whitespace_is_trimmed():
    res = _svc().quote(_req(delivery_pincode=" 560001 "), now=MONDAY_10AM)
    assert res["zone"] == "B"


def test_heavier_cart_never_costs_less():
    svc = _svc()
    costs = []
    for w in (0.3, 0.5, 0.9, 1.5, 4.0, 6.0, 11.0):
        res = svc.quote(_req(items=[CartItem(weight=w)]), now=MONDAY_10AM)
        costs.append(res["base_shipping_cost"])
    assert costs == sorted(costs)


def test_every_zoned_pincode_gets_a_zone():
    src = _source(
        zones=[zone_entry(f"11000{i}", z) for i, z in enumerate("ABCDE")],
    )
    svc = _svc(src)
    for i, z in enumerate("ABCDE"):
        res = svc.quote(_req(delivery_pincode=f"11000{i}"), now=MONDAY_10AM)
        assert res["zone"] == z


def test_quote_leaves_the_callers_request_untouched():
    req = _req(delivery_pincode=" 560001 ", pickup_pincode=" 560100", payment_mode=" COD ")
    res = _svc().quote(req, now=MONDAY_10AM)

    assert res["deliverable"] is True
    assert res["payment_mode"] == "cod"
    assert req.delivery_pincode == " 560001 "
    assert req.pickup_pincode == " 560100"
    assert req.payment_mode == " COD "


# ---------------- free shipping ----------------


def _free_svc(**kw: Any) -> ShippingQuoteService:
    kw.setdefault("enabled", True)
    return ShippingQuoteService(
        _source(), dim_divisor=5000, default_courier="standard", free_shipping=FreeShippingRule(**kw)
    )


def test_free_shipping_off_by_default_reports_threshold():
    res = _svc().quote(_req(order_value=5000), now=MONDAY_10AM)
    assert res["free_shipping_enabled"] is False
    assert res["free_shipping_threshold"] == 699.0
    assert res["is_free_shipping"] is False
    assert _by_code(res)["standard"]["cost"]["total_cost"] == 60.0


def test_free_shipping_just_below_threshold_is_charged():
    res = _free_svc().quote(_req(order_value=698.99), now=MONDAY_10AM)
    assert res["free_shipping_enabled"] is True
    assert res["is_free_shipping"] is False
    opts = _by_code(res)
    assert opts["standard"]["cost"]["total_cost"] == 60.0
    assert opts["express"]["cost"]["total_cost"] == 90.0
    assert opts["standard"]["is_free_shipping"] is False


def test_free_shipping_at_threshold_zeroes_every_option():
    res = _free_svc().quote(_req(order_value=699), now=MONDAY_10AM)
    assert res["deliverable"] is True
    assert res["is_free_shipping"] is True
    # the carrier cost is still reported
    assert res["base_shipping_cost"] == 60.0
    opts = _by_code(res)
    for code, waived in (("standard", -60.0), ("express", -90.0)):
        assert opts[code]["cost"]["total_cost"] == 0.0
        assert opts[code]["is_free_shipping"] is True
        assert opts[code]["cost"]["adjustments"][-1] == {"type": "free_shipping", "amount": waived}
    assert any(r.startswith("free_shipping:") for r in res["reasons"])


def test_free_shipping_waives_cod_charge_too():
    res = _free_svc().quote(_req(order_value=2000, payment_mode="cod"), now=MONDAY_10AM)
    assert res["cod_charge"] == 40.0
    assert res["is_free_shipping"] is True
    assert _by_code(res)["standard"]["cost"]["total_cost"] == 0.0


def test_free_shipping_threshold_per_zone():
    res = _free_svc(thresholds={"B": Decimal("1500")}).quote(_req(order_value=1499.99), now=MONDAY_10AM)
    assert res["free_shipping_threshold"] == 1500.0
    assert res["is_free_shipping"] is False


def test_free_shipping_limited_to_listed_zones():
    res = _free_svc(zones=["A"]).quote(_req(order_value=5000), now=MONDAY_10AM)
    assert res["free_shipping_enabled"] is False
    assert res["is_free_shipping"] is False


def test_free_shipping_not_applied_when_nothing_is_deliverable():
    res = _free_svc().quote(_req(delivery_pincode="999999", order_value=5000), now=MONDAY_10AM)
    assert res["deliverable"] is False
    assert res["is_free_shipping"] is False
    assert res["free_shipping_threshold"] is None
