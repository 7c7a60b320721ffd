# shipquote/api/routers/shipping_config_schemas.py
from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Range checks that need the database or cross-field context live in
# shipquote.services.shipping_config; these models only shape the payload.


# ---------------- pincode zones ----------------


class PincodeZoneOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    pincode: str
    zone: str
    city: Optional[str] = None
    state: Optional[str] = None
    region: Optional[str] = None
    is_metro: bool
    is_remote: bool
    cod_available: bool
    expected_delivery_days: int
    zone_multiplier: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PincodeZoneCreateIn(BaseModel):
    pincode: str = Field(..., min_length=1, max_length=16)
    zone: str = Field(..., min_length=1, max_length=1)
    city: Optional[str] = Field(default=None, max_length=255)
    state: Optional[str] = Field(default=None, max_length=255)
    region: Optional[str] = Field(default=None, max_length=255)
    is_metro: bool = False
    is_remote: bool = False
    cod_available: bool = True
    expected_delivery_days: int = Field(..., ge=1, le=30)
    zone_multiplier: Decimal = Field(default=Decimal("1.00"), ge=Decimal("0.1"), le=Decimal("5.0"))


class PincodeZoneUpdateIn(BaseModel):
    pincode: Optional[str] = Field(default=None, min_length=1, max_length=16)
    zone: Optional[str] = Field(default=None, min_length=1, max_length=1)
    city: Optional[str] = Field(default=None, max_length=255)
    state: Optional[str] = Field(default=None, max_length=255)
    region: Optional[str] = Field(default=None, max_length=255)
    is_metro: Optional[bool] = None
    is_remote: Optional[bool] = None
    cod_available: Optional[bool] = None
    expected_delivery_days: Optional[int] = Field(default=None, ge=1, le=30)
    zone_multiplier: Optional[Decimal] = Field(default=None, ge=Decimal("0.1"), le=Decimal("5.0"))


class PincodeZoneListOut(BaseModel):
    ok: bool = True
    total: int
    page: int
    page_size: int
    data: List[PincodeZoneOut]


class BulkImportIn(BaseModel):
    # rows are validated one by one so a bad row does not fail the batch
    pincodes: List[Dict[str, Any]] = Field(..., min_length=1)


class BulkImportErrorOut(BaseModel):
    index: int
    message: str


class BulkImportOut(BaseModel):
    ok: bool = True
    imported: int
    skipped: int
    errors: List[BulkImportErrorOut] = Field(default_factory=list)


# ---------------- weight slabs ----------------


class WeightSlabOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    courier_name: str
    base_weight: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class WeightSlabIn(BaseModel):
    courier_name: str = Field(..., min_length=1, max_length=255)
    base_weight: Decimal = Field(..., gt=0, le=100)


class WeightSlabListOut(BaseModel):
    ok: bool = True
    data: List[WeightSlabOut]


# ---------------- zone rates ----------------


class ZoneRateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    weight_slab_id: int
    zone: str
    fwd_rate: Decimal
    aw_rate: Optional[Decimal] = None
    cod_charges: Decimal
    cod_percentage: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ZoneRateCreateIn(BaseModel):
    weight_slab_id: int = Field(..., ge=1)
    zone: str = Field(..., min_length=1, max_length=1)
    fwd_rate: Decimal = Field(..., ge=0)
    aw_rate: Optional[Decimal] = Field(default=None, ge=0)
    cod_charges: Decimal = Field(default=Decimal("0"), ge=0)
    cod_percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class ZoneRateUpdateIn(BaseModel):
    weight_slab_id: Optional[int] = Field(default=None, ge=1)
    zone: Optional[str] = Field(default=None, min_length=1, max_length=1)
    fwd_rate: Optional[Decimal] = Field(default=None, ge=0)
    aw_rate: Optional[Decimal] = Field(default=None, ge=0)
    cod_charges: Optional[Decimal] = Field(default=None, ge=0)
    cod_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)


class ZoneRateListOut(BaseModel):
    ok: bool = True
    data: List[ZoneRateOut]


# ---------------- delivery options ----------------


class DeliveryOptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    description: Optional[str] = None
    delivery_days_min: int
    delivery_days_max: int
    price_multiplier: Decimal
    fixed_surcharge: Decimal
    availability_zones: Optional[List[str]] = None
    availability_conditions: Optional[List[Dict[str, Any]]] = None
    cutoff_time: Optional[time] = None
    restricted_days: Optional[List[int]] = None
    min_order_value: Optional[Decimal] = None
    sort_order: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DeliveryOptionCreateIn(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    delivery_days_min: int = Field(..., ge=1, le=30)
    delivery_days_max: int = Field(..., ge=1, le=30)
    price_multiplier: Decimal = Field(default=Decimal("1.00"), ge=Decimal("0.1"), le=Decimal("10"))
    fixed_surcharge: Decimal = Field(default=Decimal("0"), ge=0)
    availability_zones: List[str] = Field(default_factory=list)
    # tagged conditions, checked against the closed condition set on write
    availability_conditions: List[Dict[str, Any]] = Field(default_factory=list)
    cutoff_time: Optional[time] = None
    restricted_days: List[int] = Field(default_factory=list)
    min_order_value: Optional[Decimal] = Field(default=None, ge=0)
    sort_order: int = Field(default=0, ge=0)
    is_active: bool = True


class DeliveryOptionUpdateIn(BaseModel):
    code: Optional[str] = Field(default=None, min_length=1, max_length=50)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    delivery_days_min: Optional[int] = Field(default=None, ge=1, le=30)
    delivery_days_max: Optional[int] = Field(default=None, ge=1, le=30)
    price_multiplier: Optional[Decimal] = Field(default=None, ge=Decimal("0.1"), le=Decimal("10"))
    fixed_surcharge: Optional[Decimal] = Field(default=None, ge=0)
    availability_zones: Optional[List[str]] = None
    availability_conditions: Optional[List[Dict[str, Any]]] = None
    cutoff_time: Optional[time] = None
    restricted_days: Optional[List[int]] = None
    min_order_value: Optional[Decimal] = Field(default=None, ge=0)
    sort_order: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class DeliveryOptionListOut(BaseModel):
    ok: bool = True
    total: int
    page: int
    page_size: int
    data: List[DeliveryOptionOut]


class SortOrderItemIn(BaseModel):
    id: int = Field(..., ge=1)
    sort_order: int = Field(..., ge=0)


class SortOrderIn(BaseModel):
    options: List[SortOrderItemIn] = Field(..., min_length=1)


class SortOrderOut(BaseModel):
    ok: bool = True
    updated: int
    errors: List[Dict[str, Any]] = Field(default_factory=list)


class DryRunConditionsIn(BaseModel):
    zone: str = Field(..., min_length=1, max_length=1)
    order_value: Decimal = Field(..., ge=0)
    base_shipping_cost: Decimal = Field(..., ge=0)
    is_metro: bool = False
    is_remote: bool = False
    business_days_only: bool = False
    order_date: Optional[date] = None
    order_time: Optional[time] = None


class AvailabilityCheckIn(DryRunConditionsIn):
    option_id: int = Field(..., ge=1)


class AvailabilityCheckOut(BaseModel):
    ok: bool = True
    available: bool
    reason: Optional[str] = None
    option_details: Dict[str, Any]
    cost_calculation: Optional[Dict[str, Any]] = None
    test_conditions: Dict[str, Any]


class OptionsForConditionsOut(BaseModel):
    ok: bool = True
    available_options: List[Dict[str, Any]]
    test_conditions: Dict[str, Any]
