# tests/unit/test_delivery_option_resolver.py
from __future__ import annotations

from datetime import date, time

import pytest

from shipquote.services.shipping_quote.delivery_options import DeliveryOptionResolver, window_label
from shipquote.services.shipping_quote.snapshot import StaticConfigSource
from shipquote.services.shipping_quote.types import QuoteContext
from tests.factories import option_info, zone_entry

MONDAY = date(2024, 1, 1)
FRIDAY = date(2024, 1, 5)
SATURDAY = date(2024, 1, 6)
SUNDAY = date(2024, 1, 7)


def _ctx(d: date = MONDAY, t: time = time(10, 0), **kw) -> QuoteContext:
    return QuoteContext(order_date=d, order_time=t, **kw)


def _resolver(*options) -> DeliveryOptionResolver:
    return DeliveryOptionResolver(StaticConfigSource(options=options))


# ---------------- eligibility ----------------


def test_rules_are_reported_in_fixed_order():
    r = _resolver()
    # fails everything: inactive wins
    o = option_info(
        is_active=False,
        availability_zones=["A"],
        min_order_value=1000,
        restricted_days=[1],
        cutoff_time=time(9, 0),
        conditions=[{"type": "metro_only"}],
    )
    assert r.explain(o, "B", 10, _ctx()) == "inactive"

    o = option_info(availability_zones=["A"], min_order_value=1000, restricted_days=[1])
    assert r.explain(o, "B", 10, _ctx()) == "zone_not_allowed"

    o = option_info(min_order_value=1000, restricted_days=[1], cutoff_time=time(9, 0))
    assert r.explain(o, "B", 10, _ctx()) == "below_min_order_value"

    o = option_info(restricted_days=[1], cutoff_time=time(9, 0))
    assert r.explain(o, "B", 10, _ctx()) == "restricted_day"

    o = option_info(cutoff_time=time(9, 0), conditions=[{"type": "metro_only"}])
    assert r.explain(o, "B", 10, _ctx()) == "past_cutoff"

    o = option_info(conditions=[{"type": "metro_only"}])
    assert r.explain(o, "B", 10, _ctx()) == "condition_failed:metro_only"
    assert r.explain(o, "B", 10, _ctx(is_metro=True)) is None


def test_empty_zone_list_means_every_zone():
    r = _resolver()
    o = option_info()
    for z in "ABCDE":
        assert r.is_available(o, z, 0, _ctx())


def test_min_order_value_boundary():
    r = _resolver()
    o = option_info(min_order_value=500)
    assert r.is_available(o, "B", 499, _ctx()) is False
    assert r.is_available(o, "B", 500, _ctx()) is True


def test_restricted_days_use_sunday_zero():
    r = _resolver()
    o = option_info(restricted_days=[0])
    assert r.explain(o, "B", 0, _ctx(SUNDAY)) == "restricted_day"
    assert r.explain(o, "B", 0, _ctx(MONDAY)) is None


@pytest.mark.parametrize(
    "order_time, available",
    [
        (time(13, 59), True),
        (time(14, 0), True),  # exactly at cutoff is still today
        (time(14, 0, 1), False),
        (time(14, 30), False),
    ],
)
def test_cutoff_excludes_orders_strictly_after(order_time, available):
    r = _resolver()
    o = option_info(cutoff_time=time(14, 0))
    assert r.is_available(o, "B", 0, _ctx(t=order_time)) is available


def test_eligibility_conditions_are_anded():
    r = _resolver()
    o = option_info(
        conditions=[
            {"type": "exclude_remote"},
            {"type": "high_value_only", "threshold": 2000},
            {"type": "weekday_only"},
        ]
    )
    assert r.is_available(o, "B", 2500, _ctx()) is True
    assert r.explain(o, "B", 2500, _ctx(is_remote=True)) == "condition_failed:exclude_remote"
    assert r.explain(o, "B", 1999, _ctx()) == "condition_failed:high_value_only"
    assert r.explain(o, "B", 2500, _ctx(SATURDAY)) == "condition_failed:weekday_only"


def test_zone_in_condition():
    r = _resolver()
    o = option_info(conditions=[{"type": "zone_in", "zones": ["A", "C"]}])
    assert r.is_available(o, "C", 0, _ctx())
    assert r.explain(o, "B", 0, _ctx()) == "condition_failed:zone_in"


# ---------------- cost ----------------


def test_cost_multiplier_then_surcharge():
    r = _resolver()
    o = option_info(price_multiplier="1.5", fixed_surcharge="20")
    cost = r.calculate_cost(o, 100, 0, _ctx())
    assert cost["base_cost"] == 100.0
    assert cost["multiplier_adjusted_cost"] == 150.0
    assert cost["surcharge"] == 20.0
    assert cost["adjustments"] == []
    assert cost["total_cost"] == 170.0


def test_pricing_adjustments_apply_in_order():
    r = _resolver()
    o = option_info(
        conditions=[
            {"type": "weekend_surcharge", "amount": 50},
            {"type": "high_value_discount", "threshold": 10000, "discount_percent": 10},
        ]
    )
    # (100 + 50) * 0.9 = 135
    cost = r.calculate_cost(o, 100, 20000, _ctx(SATURDAY))
    assert cost["total_cost"] == 135.0
    assert [a["type"] for a in cost["adjustments"]] == ["weekend_surcharge", "high_value_discount"]
    assert cost["adjustments"][1]["amount"] == -15.0

    # weekday, low value: no adjustments
    cost = r.calculate_cost(o, 100, 500, _ctx(MONDAY))
    assert cost["total_cost"] == 100.0
    assert cost["adjustments"] == []


def test_remote_surcharge_only_for_remote_pincodes():
    r = _resolver()
    o = option_info(conditions=[{"type": "remote_surcharge", "amount": 100}])
    assert r.calculate_cost(o, 60, 0, _ctx())["total_cost"] == 60.0
    assert r.calculate_cost(o, 60, 0, _ctx(is_remote=True))["total_cost"] == 160.0


def test_total_is_never_negative():
    r = _resolver()
    o = option_info(conditions=[{"type": "high_value_discount", "threshold": 0, "discount_percent": 100}])
    assert r.calculate_cost(o, 100, 1, _ctx())["total_cost"] == 0.0


def test_cost_is_rounded_half_up():
    r = _resolver()
    o = option_info(price_multiplier="1.5")
    assert r.calculate_cost(o, "10.01", 0, _ctx())["total_cost"] == 15.02  # 15.015


# ---------------- window / dates ----------------


def test_window_is_floored_by_zone_expected_days():
    r = _resolver()
    o = option_info(days=(1, 2))
    assert r.get_delivery_window(o, zone_entry(expected_delivery_days=3)) == {
        "min_days": 3,
        "max_days": 3,
        "label": "3 business days",
    }
    assert r.get_delivery_window(o, zone_entry(expected_delivery_days=1))["label"] == "1-2 business days"
    assert r.get_delivery_window(o, None) == {"min_days": 1, "max_days": 2, "label": "1-2 business days"}


@pytest.mark.parametrize(
    "lo, hi, label",
    [(1, 1, "1 business day"), (2, 2, "2 business days"), (3, 5, "3-5 business days")],
)
def test_window_label(lo, hi, label):
    assert window_label(lo, hi) == label


def test_estimate_skips_restricted_days():
    r = _resolver()
    o = option_info(restricted_days=[0])
    window = {"min_days": 2, "max_days": 2}
    # Fri + Sat + (Sun skipped) Mon
    assert r.estimate_dates(o, window, FRIDAY)["min_date"] == "2024-01-08"


def test_estimate_business_days_only_skips_weekend():
    r = _resolver()
    o = option_info(restricted_days=[0])
    window = {"min_days": 2, "max_days": 3}
    out = r.estimate_dates(o, window, FRIDAY, business_days_only=True)
    assert out == {"min_date": "2024-01-09", "max_date": "2024-01-10"}


def test_estimate_plain_calendar_days():
    r = _resolver()
    out = r.estimate_dates(option_info(), {"min_days": 1, "max_days": 3}, MONDAY)
    assert out == {"min_date": "2024-01-02", "max_date": "2024-01-04"}


def test_estimate_is_none_when_every_day_is_blocked():
    r = _resolver()
    o = option_info(restricted_days=[1, 2, 3, 4, 5])
    out = r.estimate_dates(o, {"min_days": 1, "max_days": 2}, MONDAY, business_days_only=True)
    assert out == {"min_date": None, "max_date": None}


# ---------------- listing ----------------


def test_available_options_sorted_and_filtered():
    opts = [
        option_info("zz_slow", option_id=1, name="Zeta", sort_order=5),
        option_info("express", option_id=2, name="Express", sort_order=1, availability_zones=["A"]),
        option_info("economy", option_id=3, name="Economy", sort_order=2),
        option_info("alpha", option_id=4, name="Alpha", sort_order=2),
        option_info("off", option_id=5, name="Off", is_active=False),
    ]
    r = _resolver(*opts)
    entry = zone_entry(expected_delivery_days=2, cod_available=False)
    out = r.get_available_options("B", 100, 60, _ctx(), zone_entry=entry)
    assert [o["code"] for o in out] == ["alpha", "economy", "zz_slow"]
    first = out[0]
    assert set(first) == {
        "id",
        "code",
        "name",
        "description",
        "delivery_window",
        "estimated_delivery",
        "cost",
        "cod_available",
    }
    assert first["cod_available"] is False
    assert first["delivery_window"]["min_days"] == 3


def test_available_options_can_be_given_explicitly():
    r = _resolver(option_info("from_source"))
    out = r.get_available_options("B", 0, 10, _ctx(), options=[option_info("given")])
    assert [o["code"] for o in out] == ["given"]
