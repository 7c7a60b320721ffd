# tests/unit/test_chargeable_weight.py
from __future__ import annotations

from decimal import Decimal

import pytest

from shipquote.services.shipping_quote.errors import ValidationError
from shipquote.services.shipping_quote.types import CartItem
from shipquote.services.shipping_quote.weight import ChargeableWeightCalculator


def test_volumetric_wins_when_box_is_light_and_large():
    calc = ChargeableWeightCalculator(5000)
    # 50*40*30 / 5000 = 12 kg volumetric vs 2 kg actual
    item = CartItem(weight=2.0, length=50, width=40, height=30)
    assert calc.compute([item]) == Decimal("12")


def test_actual_wins_when_box_is_dense():
    calc = ChargeableWeightCalculator(5000)
    # 20*14*2 / 5000 = 0.112 kg volumetric vs 1 kg actual
    item = CartItem(weight=1.0, length=20, width=14, height=2)
    assert calc.compute([item]) == Decimal("1.0")


def test_missing_dimension_falls_back_to_actual():
    calc = ChargeableWeightCalculator(5000)
    item = CartItem(weight=1.5, length=100, width=100, height=None)
    out = calc.breakdown([item])
    assert out["chargeable_weight_kg"] == 1.5
    assert out["items"][0]["volumetric_weight_kg"] is None


def test_quantity_multiplies_per_unit_weight():
    calc = ChargeableWeightCalculator(5000)
    items = [
        CartItem(weight=0.5, quantity=3),
        CartItem(weight=0.2, quantity=2, length=50, width=40, height=30),  # 12 kg volumetric each
    ]
    out = calc.breakdown(items)
    assert out["_chargeable"] == Decimal("1.5") + Decimal("24")
    assert out["actual_weight_kg"] == pytest.approx(1.9)
    assert [line["quantity"] for line in out["items"]] == [3, 2]


def test_custom_divisor():
    calc = ChargeableWeightCalculator(4000)
    item = CartItem(weight=1.0, length=20, width=20, height=20)  # 8000 / 4000 = 2
    assert calc.compute([item]) == Decimal("2")


def test_empty_cart_is_rejected():
    with pytest.raises(ValidationError) as ei:
        ChargeableWeightCalculator().compute([])
    assert ei.value.code == "EMPTY_CART"


@pytest.mark.parametrize(
    "item, code",
    [
        (CartItem(weight=0), "INVALID_WEIGHT"),
        (CartItem(weight=-1), "INVALID_WEIGHT"),
        (CartItem(weight=1, quantity=0), "INVALID_QUANTITY"),
        (CartItem(weight=1, length=0, width=10, height=10), "INVALID_DIMENSION"),
    ],
)
def test_invalid_items_are_rejected(item, code):
    with pytest.raises(ValidationError) as ei:
        ChargeableWeightCalculator().compute([CartItem(weight=1), item])
    assert ei.value.code == code
    assert ei.value.context["index"] == 1


def test_non_positive_divisor_is_a_programming_error():
    with pytest.raises(ValueError):
        ChargeableWeightCalculator(0)


def test_adding_an_item_never_lowers_chargeable_weight():
    calc = ChargeableWeightCalculator()
    cart = [CartItem(weight=0.3)]
    before = calc.compute(cart)
    after = calc.compute(cart + [CartItem(weight=0.01, length=1, width=1, height=1)])
    assert after >= before
