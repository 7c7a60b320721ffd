# shipquote/api/routers/shipping_quote_schemas.py
from __future__ import annotations

from datetime import date, time
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class DimensionsIn(BaseModel):
    length: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class QuoteItemIn(BaseModel):
    weight: float = Field(..., gt=0, description="actual weight per unit (kg)")
    quantity: int = Field(default=1, ge=1)
    # cm; without dimensions only the actual weight is billed
    dimensions: Optional[DimensionsIn] = None


class ShippingQuoteIn(BaseModel):
    delivery_pincode: str = Field(..., min_length=1, max_length=16)
    pickup_pincode: Optional[str] = Field(default=None, max_length=16)

    items: List[QuoteItemIn] = Field(..., min_length=1)
    order_value: float = Field(default=0.0, ge=0)

    order_date: Optional[date] = None
    order_time: Optional[time] = None
    courier: Optional[str] = Field(default=None, max_length=255)
    payment_mode: Literal["prepaid", "cod"] = "prepaid"
    business_days_only: bool = False


class DeliveryWindowOut(BaseModel):
    min_days: int
    max_days: int
    label: str


class EstimatedDeliveryOut(BaseModel):
    min_date: Optional[str] = None
    max_date: Optional[str] = None


class CostAdjustmentOut(BaseModel):
    type: str
    amount: float


class OptionCostOut(BaseModel):
    base_cost: float
    multiplier_adjusted_cost: float
    surcharge: float
    adjustments: List[CostAdjustmentOut] = Field(default_factory=list)
    total_cost: float


class QuoteOptionOut(BaseModel):
    id: int
    code: str
    name: str
    description: Optional[str] = None
    delivery_window: DeliveryWindowOut
    estimated_delivery: EstimatedDeliveryOut
    cost: OptionCostOut
    cod_available: bool
    is_free_shipping: bool = False


class ShippingQuoteOut(BaseModel):
    ok: bool
    deliverable: bool
    failure_code: Optional[str] = None
    failure_reason: Optional[str] = None

    courier: str
    payment_mode: str

    zone: Optional[str] = None
    zone_name: Optional[str] = None
    zone_info: Optional[Dict[str, Any]] = None

    chargeable_weight: Optional[float] = None
    weight: Dict[str, Any] = Field(default_factory=dict)
    slab: Optional[Dict[str, Any]] = None

    base_shipping_cost: Optional[float] = None
    cod_charge: Optional[float] = None

    free_shipping_enabled: bool = False
    free_shipping_threshold: Optional[float] = None
    is_free_shipping: bool = False

    available_options: List[QuoteOptionOut] = Field(default_factory=list)
    reasons: List[str] = Field(default_factory=list)


class ZoneOut(BaseModel):
    zone: str
    name: str
    description: str
    typical_days: int


class ServiceabilityOut(BaseModel):
    pincode: str
    serviceable: bool
    zone: Optional[str] = None
    zone_name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    cod_available: bool = False
    expected_delivery_days: Optional[int] = None
