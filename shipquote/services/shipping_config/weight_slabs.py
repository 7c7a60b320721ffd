# shipquote/services/shipping_config/weight_slabs.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Mapping, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shipquote.core.cache import WEIGHT_SLABS, ZONE_RATES, get_config_cache
from shipquote.db.generations import bump_generation
from shipquote.models.shipping_weight_slab import ShippingWeightSlab
from shipquote.models.shipping_zone_rate import ShippingZoneRate

from .validators import handle_integrity_error, norm, norm_required, reject, validate_decimal


def _clean_courier(v: Optional[str]) -> str:
    s = norm_required(v, "courier_name")
    if len(s) > 255:
        reject(422, "too_long", "courier_name must be at most 255 characters", field="courier_name")
    return s


def _clean_weight(v: Any) -> Decimal:
    return validate_decimal(v, "base_weight", gt=Decimal("0"), le=Decimal("100"), places="0.001")


def _ensure_unique(db: Session, courier: str, base_weight: Decimal, exclude_id: Optional[int] = None) -> None:
    q = db.query(ShippingWeightSlab.id).filter(
        ShippingWeightSlab.courier_name == courier,
        ShippingWeightSlab.base_weight == base_weight,
    )
    if exclude_id is not None:
        q = q.filter(ShippingWeightSlab.id != int(exclude_id))
    if q.first():
        reject(409, "duplicate_weight_slab", "Weight slab already exists for this courier and weight")


def list_weight_slabs(db: Session, *, courier_name: Optional[str] = None) -> List[ShippingWeightSlab]:
    q = db.query(ShippingWeightSlab)
    if norm(courier_name):
        q = q.filter(ShippingWeightSlab.courier_name == norm(courier_name))
    return q.order_by(ShippingWeightSlab.courier_name.asc(), ShippingWeightSlab.base_weight.asc()).all()


def get_weight_slab(db: Session, slab_id: int) -> ShippingWeightSlab:
    row = db.get(ShippingWeightSlab, int(slab_id))
    if not row:
        reject(404, "not_found", "Weight slab not found")
    return row


def create_weight_slab(db: Session, data: Mapping[str, Any]) -> ShippingWeightSlab:
    courier = _clean_courier(data.get("courier_name"))
    weight = _clean_weight(data.get("base_weight"))
    _ensure_unique(db, courier, weight)

    row = ShippingWeightSlab(courier_name=courier, base_weight=weight)
    db.add(row)
    try:
        bump_generation(db, WEIGHT_SLABS)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        handle_integrity_error(e, what="weight slab")

    db.refresh(row)
    get_config_cache().invalidate(WEIGHT_SLABS, reason=f"create {courier}")
    return row


def update_weight_slab(db: Session, slab_id: int, data: Mapping[str, Any]) -> ShippingWeightSlab:
    row = get_weight_slab(db, slab_id)
    courier = _clean_courier(data.get("courier_name", row.courier_name))
    weight = _clean_weight(data.get("base_weight", row.base_weight))
    _ensure_unique(db, courier, weight, exclude_id=row.id)

    row.courier_name = courier
    row.base_weight = weight
    try:
        bump_generation(db, WEIGHT_SLABS)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        handle_integrity_error(e, what="weight slab")

    db.refresh(row)
    get_config_cache().invalidate(WEIGHT_SLABS, reason=f"update {row.id}")
    return row


def delete_weight_slab(db: Session, slab_id: int) -> None:
    row = get_weight_slab(db, slab_id)

    in_use = db.query(ShippingZoneRate.id).filter(ShippingZoneRate.weight_slab_id == row.id).count()
    if in_use:
        reject(
            409,
            "weight_slab_in_use",
            "Cannot delete weight slab - it is linked to zone rates",
            zone_rates=int(in_use),
        )

    db.delete(row)
    try:
        bump_generation(db, WEIGHT_SLABS, ZONE_RATES)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        handle_integrity_error(e, what="weight slab")

    cache = get_config_cache()
    cache.invalidate(WEIGHT_SLABS, reason=f"delete {slab_id}")
    cache.invalidate(ZONE_RATES, reason=f"slab {slab_id} deleted")
