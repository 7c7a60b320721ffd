# shipquote/services/shipping_quote/conditions.py
"""
Delivery-option conditions as a closed, tagged set.

Stored on ``delivery_options.availability_conditions`` as a JSON list, e.g.::

    [{"type": "metro_only"},
     {"type": "high_value_only", "threshold": 2000},
     {"type": "remote_surcharge", "amount": 100}]

Two families:
- eligibility  : AND-ed predicates; any False removes the option from the quote
- pricing      : adjustments applied to the option total, in list order
"""
from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .types import QuoteContext, is_weekend


class _Cond(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    family: ClassVar[str] = "eligibility"

    def holds(self, *, zone: str, order_value: Decimal, ctx: QuoteContext) -> bool:
        return True

    def adjust(self, cost: Decimal, *, order_value: Decimal, ctx: QuoteContext) -> Tuple[Decimal, Optional[Dict[str, Any]]]:
        return cost, None


# ---------------- eligibility ----------------


class MetroOnly(_Cond):
    type: Literal["metro_only"]

    def holds(self, *, zone, order_value, ctx):
        return bool(ctx.is_metro)


class ExcludeRemote(_Cond):
    type: Literal["exclude_remote"]

    def holds(self, *, zone, order_value, ctx):
        return not ctx.is_remote


class WeekdayOnly(_Cond):
    type: Literal["weekday_only"]

    def holds(self, *, zone, order_value, ctx):
        return not is_weekend(ctx.order_date)


class HighValueOnly(_Cond):
    type: Literal["high_value_only"]
    threshold: Decimal = Field(default=Decimal("5000"), ge=0)

    def holds(self, *, zone, order_value, ctx):
        return order_value >= self.threshold


class ZoneIn(_Cond):
    type: Literal["zone_in"]
    zones: List[Literal["A", "B", "C", "D", "E"]] = Field(..., min_length=1)

    def holds(self, *, zone, order_value, ctx):
        return zone in self.zones


class MinOrderValue(_Cond):
    type: Literal["min_order_value"]
    amount: Decimal = Field(..., ge=0)

    def holds(self, *, zone, order_value, ctx):
        return order_value >= self.amount


# ---------------- pricing ----------------


class HighValueDiscount(_Cond):
    type: Literal["high_value_discount"]
    family: ClassVar[str] = "pricing"
    threshold: Decimal = Field(default=Decimal("10000"), ge=0)
    discount_percent: Decimal = Field(default=Decimal("10"), ge=0, le=100)

    def adjust(self, cost, *, order_value, ctx):
        if order_value < self.threshold:
            return cost, None
        new_cost = cost * (Decimal("1") - self.discount_percent / Decimal("100"))
        return new_cost, {"type": self.type, "amount": float(new_cost - cost)}


class WeekendSurcharge(_Cond):
    type: Literal["weekend_surcharge"]
    family: ClassVar[str] = "pricing"
    amount: Decimal = Field(default=Decimal("50"), ge=0)

    def adjust(self, cost, *, order_value, ctx):
        if not is_weekend(ctx.order_date):
            return cost, None
        return cost + self.amount, {"type": self.type, "amount": float(self.amount)}


class RemoteSurcharge(_Cond):
    type: Literal["remote_surcharge"]
    family: ClassVar[str] = "pricing"
    amount: Decimal = Field(default=Decimal("100"), ge=0)

    def adjust(self, cost, *, order_value, ctx):
        if not ctx.is_remote:
            return cost, None
        return cost + self.amount, {"type": self.type, "amount": float(self.amount)}


Condition = Annotated[
    Union[
        MetroOnly,
        ExcludeRemote,
        WeekdayOnly,
        HighValueOnly,
        ZoneIn,
        MinOrderValue,
        HighValueDiscount,
        WeekendSurcharge,
        RemoteSurcharge,
    ],
    Field(discriminator="type"),
]

_CONDITIONS = TypeAdapter(List[Condition])

CONDITION_TYPES: Tuple[str, ...] = (
    "metro_only",
    "exclude_remote",
    "weekday_only",
    "high_value_only",
    "zone_in",
    "min_order_value",
    "high_value_discount",
    "weekend_surcharge",
    "remote_surcharge",
)


class ConditionParseError(ValueError):
    def __init__(self, errors: List[Dict[str, Any]]):
        super().__init__("invalid availability_conditions")
        self.errors = errors


def parse_conditions(raw: Optional[Sequence[Any]]) -> Tuple[Any, ...]:
    """JSON list -> tuple of condition objects. Unknown types raise ConditionParseError."""
    if not raw:
        return ()
    try:
        return tuple(_CONDITIONS.validate_python(list(raw)))
    except PydanticValidationError as e:
        raise ConditionParseError(
            [{"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")} for err in e.errors()]
        ) from e


def dump_conditions(conds: Sequence[Any]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for c in conds:
        out.append({k: (float(v) if isinstance(v, Decimal) else v) for k, v in c.model_dump().items()})
    return out


def first_failed_condition(
    conds: Sequence[Any], *, zone: str, order_value: Decimal, ctx: QuoteContext
) -> Optional[str]:
    for c in conds:
        if c.family != "eligibility":
            continue
        if not c.holds(zone=zone, order_value=order_value, ctx=ctx):
            return c.type
    return None


def apply_pricing(
    conds: Sequence[Any], cost: Decimal, *, order_value: Decimal, ctx: QuoteContext
) -> Tuple[Decimal, List[Dict[str, Any]]]:
    adjustments: List[Dict[str, Any]] = []
    for c in conds:
        if c.family != "pricing":
            continue
        cost, hit = c.adjust(cost, order_value=order_value, ctx=ctx)
        if hit:
            adjustments.append(hit)
    return cost, adjustments
