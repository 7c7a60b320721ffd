# shipquote/services/shipping_quote/weight.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .errors import ValidationError
from .types import CartItem, _dec

DEFAULT_DIM_DIVISOR = 5000.0


class ChargeableWeightCalculator:
    """
    Chargeable weight of a cart.

    Per item: max(actual, l*w*h / divisor) * quantity, summed over the cart.
    Items without a full set of dimensions are billed on actual weight only.
    """

    def __init__(self, dim_divisor: float = DEFAULT_DIM_DIVISOR) -> None:
        if dim_divisor is None or float(dim_divisor) <= 0:
            raise ValueError("dim_divisor must be > 0")
        self.dim_divisor = _dec(dim_divisor)

    def _validate(self, idx: int, item: CartItem) -> None:
        if item.weight is None or float(item.weight) <= 0:
            raise ValidationError(
                f"items[{idx}].weight must be > 0",
                code="INVALID_WEIGHT",
                context={"index": idx, "weight": item.weight},
            )
        if item.quantity is None or int(item.quantity) < 1:
            raise ValidationError(
                f"items[{idx}].quantity must be >= 1",
                code="INVALID_QUANTITY",
                context={"index": idx, "quantity": item.quantity},
            )
        for name in ("length", "width", "height"):
            v = getattr(item, name)
            if v is not None and float(v) <= 0:
                raise ValidationError(
                    f"items[{idx}].{name} must be > 0",
                    code="INVALID_DIMENSION",
                    context={"index": idx, name: v},
                )

    def volumetric_weight(self, item: CartItem) -> Optional[Decimal]:
        dims = item.dims_cm
        if dims is None:
            return None
        length_cm, width_cm, height_cm = (_dec(x) for x in dims)
        return (length_cm * width_cm * height_cm) / self.dim_divisor

    def breakdown(self, items: Sequence[CartItem]) -> Dict[str, Any]:
        if not items:
            raise ValidationError("items must not be empty", code="EMPTY_CART")

        actual_total = Decimal("0")
        vol_total = Decimal("0")
        chargeable_total = Decimal("0")
        lines: List[Dict[str, Any]] = []

        for idx, item in enumerate(items):
            self._validate(idx, item)
            qty = int(item.quantity)
            actual = _dec(item.weight)
            vol = self.volumetric_weight(item)
            per_unit = max(actual, vol) if vol is not None else actual

            actual_total += actual * qty
            vol_total += (vol or Decimal("0")) * qty
            chargeable_total += per_unit * qty
            lines.append(
                {
                    "index": idx,
                    "quantity": qty,
                    "actual_weight_kg": float(actual),
                    "volumetric_weight_kg": None if vol is None else float(vol),
                    "chargeable_weight_kg": float(per_unit * qty),
                }
            )

        return {
            "actual_weight_kg": float(actual_total),
            "volumetric_weight_kg": float(vol_total),
            "chargeable_weight_kg": float(chargeable_total),
            "dim_divisor": float(self.dim_divisor),
            "items": lines,
            "_chargeable": chargeable_total,
        }

    def compute(self, items: Iterable[CartItem]) -> Decimal:
        return self.breakdown(list(items))["_chargeable"]
