# shipquote/services/shipping_quote/types.py
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional, Tuple

from .errors import ValidationError

ZONES: Tuple[str, ...] = ("A", "B", "C", "D", "E")

ZONE_INFO: Dict[str, Dict[str, Any]] = {
    "A": {"name": "Same City", "description": "Pickup and delivery within the same city", "typical_days": 1},
    "B": {"name": "Same State/Region", "description": "Pickup and delivery within the same state or region", "typical_days": 2},
    "C": {"name": "Metro to Metro", "description": "Pickup and delivery between major metro cities", "typical_days": 3},
    "D": {"name": "Rest of India", "description": "Any pickup/delivery in Rest of India (excluding Northeast & J&K)", "typical_days": 5},
    "E": {"name": "Northeast & J&K", "description": "Any pickup/delivery in Northeast states or Jammu & Kashmir", "typical_days": 7},
}

_PINCODE_RE = re.compile(r"^[0-9]{6}$")

CENT = Decimal("0.01")


def money(v: Any) -> Decimal:
    """Decimal rounded half-up to 2 dp."""
    return _dec(v).quantize(CENT, rounding=ROUND_HALF_UP)


def _dec(v: Any) -> Decimal:
    if isinstance(v, Decimal):
        return v
    if v is None:
        return Decimal("0")
    # str() keeps floats like 0.1 from dragging binary noise along
    return Decimal(str(v))


def zone_name(zone: str) -> str:
    return ZONE_INFO.get(zone, {}).get("name", "Unknown Zone")


def norm_pincode(v: Optional[str], field_name: str = "pincode") -> str:
    t = (v or "").strip()
    if not _PINCODE_RE.match(t):
        raise ValidationError(
            f"{field_name} must be exactly 6 digits",
            code="INVALID_PINCODE",
            context={"field": field_name, "value": v},
        )
    return t


def sunday_weekday(d: date) -> int:
    """0 = Sunday .. 6 = Saturday."""
    return d.isoweekday() % 7


def is_weekend(d: date) -> bool:
    return d.weekday() >= 5


@dataclass(frozen=True)
class ZoneEntry:
    pincode: str
    zone: str
    city: Optional[str] = None
    state: Optional[str] = None
    region: Optional[str] = None
    is_metro: bool = False
    is_remote: bool = False
    cod_available: bool = True
    expected_delivery_days: int = 5
    zone_multiplier: Decimal = Decimal("1.00")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pincode": self.pincode,
            "zone": self.zone,
            "zone_name": zone_name(self.zone),
            "city": self.city,
            "state": self.state,
            "region": self.region,
            "is_metro": self.is_metro,
            "is_remote": self.is_remote,
            "cod_available": self.cod_available,
            "expected_delivery_days": self.expected_delivery_days,
            "zone_multiplier": float(self.zone_multiplier),
        }


@dataclass(frozen=True)
class CartItem:
    weight: float
    quantity: int = 1
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def dims_cm(self) -> Optional[Tuple[float, float, float]]:
        if self.length is None or self.width is None or self.height is None:
            return None
        return (float(self.length), float(self.width), float(self.height))


@dataclass(frozen=True)
class QuoteContext:
    order_date: date
    order_time: time
    is_metro: bool = False
    is_remote: bool = False
    business_days_only: bool = False

    @classmethod
    def from_now(cls, now: datetime, zone_entry: Optional[ZoneEntry] = None, **kw: Any) -> "QuoteContext":
        return cls(
            order_date=now.date(),
            order_time=now.time().replace(microsecond=0),
            is_metro=bool(zone_entry.is_metro) if zone_entry else False,
            is_remote=bool(zone_entry.is_remote) if zone_entry else False,
            **kw,
        )


@dataclass(frozen=True)
class SlabInfo:
    id: int
    courier_name: str
    base_weight: Decimal


@dataclass(frozen=True)
class RateInfo:
    id: int
    weight_slab_id: int
    zone: str
    fwd_rate: Decimal
    aw_rate: Optional[Decimal] = None
    cod_charges: Decimal = Decimal("0")
    cod_percentage: Decimal = Decimal("0")


@dataclass(frozen=True)
class DeliveryOptionInfo:
    id: int
    code: str
    name: str
    delivery_days_min: int
    delivery_days_max: int
    price_multiplier: Decimal = Decimal("1.00")
    fixed_surcharge: Decimal = Decimal("0")
    description: Optional[str] = None
    availability_zones: Tuple[str, ...] = ()
    # parsed condition objects (see conditions.py)
    conditions: Tuple[Any, ...] = ()
    cutoff_time: Optional[time] = None
    restricted_days: Tuple[int, ...] = ()
    min_order_value: Optional[Decimal] = None
    sort_order: int = 0
    is_active: bool = True


@dataclass
class QuoteRequest:
    delivery_pincode: str
    items: List[CartItem]
    order_value: float = 0.0
    pickup_pincode: Optional[str] = None
    order_date: Optional[date] = None
    order_time: Optional[time] = None
    courier: Optional[str] = None
    payment_mode: str = "prepaid"
    business_days_only: bool = False
