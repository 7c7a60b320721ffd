# shipquote/services/shipping_config/zone_rates.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shipquote.core.cache import ZONE_RATES, get_config_cache
from shipquote.db.generations import bump_generation
from shipquote.models.shipping_weight_slab import ShippingWeightSlab
from shipquote.models.shipping_zone_rate import ShippingZoneRate

from .validators import handle_integrity_error, norm, reject, validate_decimal, validate_int, validate_zone

_ZERO = Decimal("0")


def _clean(db: Session, data: Mapping[str, Any], *, partial: bool) -> Dict[str, Any]:
    out: Dict[str, Any] = {}

    if "weight_slab_id" in data or not partial:
        slab_id = validate_int(data.get("weight_slab_id"), "weight_slab_id", ge=1)
        if not db.get(ShippingWeightSlab, slab_id):
            reject(422, "weight_slab_not_found", f"weight slab {slab_id} does not exist", field="weight_slab_id")
        out["weight_slab_id"] = slab_id
    if "zone" in data or not partial:
        out["zone"] = validate_zone(data.get("zone"))
    if "fwd_rate" in data or not partial:
        out["fwd_rate"] = validate_decimal(data.get("fwd_rate"), "fwd_rate", ge=_ZERO)
    if "aw_rate" in data:
        v = data.get("aw_rate")
        out["aw_rate"] = None if v is None else validate_decimal(v, "aw_rate", ge=_ZERO)
    if "cod_charges" in data and data["cod_charges"] is not None:
        out["cod_charges"] = validate_decimal(data["cod_charges"], "cod_charges", ge=_ZERO)
    if "cod_percentage" in data and data["cod_percentage"] is not None:
        out["cod_percentage"] = validate_decimal(
            data["cod_percentage"], "cod_percentage", ge=_ZERO, le=Decimal("100")
        )
    return out


def _ensure_unique(db: Session, slab_id: int, zone: str, exclude_id: Optional[int] = None) -> None:
    q = db.query(ShippingZoneRate.id).filter(
        ShippingZoneRate.weight_slab_id == int(slab_id),
        ShippingZoneRate.zone == zone,
    )
    if exclude_id is not None:
        q = q.filter(ShippingZoneRate.id != int(exclude_id))
    if q.first():
        reject(409, "duplicate_zone_rate", f"a rate for slab {slab_id} and zone {zone} already exists")


def list_zone_rates(
    db: Session,
    *,
    courier_name: Optional[str] = None,
    zone: Optional[str] = None,
    weight_slab_id: Optional[int] = None,
) -> List[ShippingZoneRate]:
    q = db.query(ShippingZoneRate).join(ShippingWeightSlab, ShippingWeightSlab.id == ShippingZoneRate.weight_slab_id)
    if norm(courier_name):
        q = q.filter(ShippingWeightSlab.courier_name == norm(courier_name))
    if norm(zone):
        q = q.filter(ShippingZoneRate.zone == validate_zone(zone))
    if weight_slab_id is not None:
        q = q.filter(ShippingZoneRate.weight_slab_id == int(weight_slab_id))
    return q.order_by(
        ShippingWeightSlab.courier_name.asc(),
        ShippingWeightSlab.base_weight.asc(),
        ShippingZoneRate.zone.asc(),
    ).all()


def get_zone_rate(db: Session, rate_id: int) -> ShippingZoneRate:
    row = db.get(ShippingZoneRate, int(rate_id))
    if not row:
        reject(404, "not_found", "Zone rate not found")
    return row


def create_zone_rate(db: Session, data: Mapping[str, Any]) -> ShippingZoneRate:
    values = _clean(db, data, partial=False)
    _ensure_unique(db, values["weight_slab_id"], values["zone"])

    row = ShippingZoneRate(**values)
    db.add(row)
    try:
        bump_generation(db, ZONE_RATES)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        handle_integrity_error(e, what="zone rate")

    db.refresh(row)
    get_config_cache().invalidate(ZONE_RATES, reason=f"create slab={row.weight_slab_id} zone={row.zone}")
    return row


def update_zone_rate(db: Session, rate_id: int, data: Mapping[str, Any]) -> ShippingZoneRate:
    row = get_zone_rate(db, rate_id)
    values = _clean(db, data, partial=True)
    _ensure_unique(
        db,
        values.get("weight_slab_id", row.weight_slab_id),
        values.get("zone", row.zone),
        exclude_id=row.id,
    )

    for k, v in values.items():
        setattr(row, k, v)
    try:
        bump_generation(db, ZONE_RATES)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        handle_integrity_error(e, what="zone rate")

    db.refresh(row)
    get_config_cache().invalidate(ZONE_RATES, reason=f"update {row.id}")
    return row


def delete_zone_rate(db: Session, rate_id: int) -> None:
    row = get_zone_rate(db, rate_id)
    db.delete(row)
    bump_generation(db, ZONE_RATES)
    db.commit()
    get_config_cache().invalidate(ZONE_RATES, reason=f"delete {rate_id}")
