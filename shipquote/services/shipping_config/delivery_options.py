# shipquote/services/shipping_config/delivery_options.py
from __future__ import annotations

import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shipquote.core.cache import DELIVERY_OPTIONS, get_config_cache
from shipquote.db.generations import bump_generation
from shipquote.models.delivery_option import DeliveryOption
from shipquote.services.shipping_quote.conditions import ConditionParseError, dump_conditions, parse_conditions
from shipquote.services.shipping_quote.delivery_options import DeliveryOptionResolver, window_label
from shipquote.services.shipping_quote.snapshot import StaticConfigSource, option_from_row
from shipquote.services.shipping_quote.types import QuoteContext

from .validators import (
    handle_integrity_error,
    norm,
    norm_required,
    reject,
    validate_decimal,
    validate_int,
    validate_restricted_days,
    validate_zone,
    validate_zones,
)

log = logging.getLogger("shipquote.config.delivery_options")

_ZERO = Decimal("0")


def _clean_conditions(raw: Any) -> List[Dict[str, Any]]:
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        reject(422, "invalid_conditions", "availability_conditions must be a list", field="availability_conditions")
    try:
        parsed = parse_conditions(raw)
    except ConditionParseError as e:
        reject(
            422,
            "invalid_conditions",
            "availability_conditions contains an unknown or malformed condition",
            field="availability_conditions",
            errors=e.errors,
        )
    return dump_conditions(parsed)


def _clean(data: Mapping[str, Any], *, partial: bool) -> Dict[str, Any]:
    out: Dict[str, Any] = {}

    if "name" in data or not partial:
        out["name"] = norm_required(data.get("name"), "name")[:255]
    if "code" in data or not partial:
        code = norm_required(data.get("code"), "code")
        if len(code) > 50:
            reject(422, "too_long", "code must be at most 50 characters", field="code")
        out["code"] = code
    if "description" in data:
        desc = norm(data.get("description"))
        if desc and len(desc) > 1000:
            reject(422, "too_long", "description must be at most 1000 characters", field="description")
        out["description"] = desc
    if "delivery_days_min" in data or not partial:
        out["delivery_days_min"] = validate_int(data.get("delivery_days_min"), "delivery_days_min", ge=1, le=30)
    if "delivery_days_max" in data or not partial:
        out["delivery_days_max"] = validate_int(data.get("delivery_days_max"), "delivery_days_max", ge=1, le=30)
    if "price_multiplier" in data or not partial:
        raw = data.get("price_multiplier")
        out["price_multiplier"] = validate_decimal(
            raw if raw is not None else Decimal("1.00"),
            "price_multiplier",
            ge=Decimal("0.1"),
            le=Decimal("10"),
        )
    if "fixed_surcharge" in data:
        raw = data.get("fixed_surcharge")
        out["fixed_surcharge"] = _ZERO if raw is None else validate_decimal(raw, "fixed_surcharge", ge=_ZERO)
    if "availability_zones" in data:
        out["availability_zones"] = validate_zones(data.get("availability_zones"))
    if "availability_conditions" in data:
        out["availability_conditions"] = _clean_conditions(data.get("availability_conditions"))
    if "cutoff_time" in data:
        out["cutoff_time"] = _clean_time(data.get("cutoff_time"))
    if "restricted_days" in data:
        out["restricted_days"] = validate_restricted_days(data.get("restricted_days"))
    if "min_order_value" in data:
        raw = data.get("min_order_value")
        out["min_order_value"] = None if raw is None else validate_decimal(raw, "min_order_value", ge=_ZERO)
    if "sort_order" in data and data["sort_order"] is not None:
        out["sort_order"] = validate_int(data["sort_order"], "sort_order", ge=0)
    if "is_active" in data and data["is_active"] is not None:
        out["is_active"] = bool(data["is_active"])
    return out


def _clean_time(v: Any, field: str = "cutoff_time") -> Optional[time]:
    if v is None or isinstance(v, time):
        return v
    s = norm(str(v))
    if not s:
        return None
    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(s, fmt).time()
        except ValueError:
            continue
    reject(422, "invalid_time", f"{field} must be HH:MM or HH:MM:SS", field=field)


def _check_days(row_min: int, row_max: int) -> None:
    if row_max < row_min:
        reject(422, "invalid_days", "delivery_days_max must be >= delivery_days_min", field="delivery_days_max")


def _ensure_unique_code(db: Session, code: str, exclude_id: Optional[int] = None) -> None:
    q = db.query(DeliveryOption.id).filter(DeliveryOption.code == code)
    if exclude_id is not None:
        q = q.filter(DeliveryOption.id != int(exclude_id))
    if q.first():
        reject(409, "duplicate_code", f"delivery option code {code} already exists")


def _invalidate(reason: str) -> None:
    get_config_cache().invalidate(DELIVERY_OPTIONS, reason=reason)


def _commit(db: Session) -> None:
    try:
        bump_generation(db, DELIVERY_OPTIONS)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        handle_integrity_error(e, what="delivery option")


# ---------------- CRUD ----------------


def list_delivery_options(
    db: Session,
    *,
    search: Optional[str] = None,
    active: Optional[bool] = None,
    page: int = 1,
    page_size: int = 15,
) -> Tuple[List[DeliveryOption], int]:
    q = db.query(DeliveryOption)
    s = norm(search)
    if s:
        like = f"%{s}%"
        q = q.filter(or_(DeliveryOption.name.ilike(like), DeliveryOption.code.ilike(like)))
    if active is not None:
        q = q.filter(DeliveryOption.is_active.is_(bool(active)))

    total = q.count()
    rows = (
        q.order_by(DeliveryOption.sort_order.asc(), DeliveryOption.name.asc())
        .offset((max(int(page), 1) - 1) * int(page_size))
        .limit(int(page_size))
        .all()
    )
    return rows, total


def get_delivery_option(db: Session, option_id: int) -> DeliveryOption:
    row = db.get(DeliveryOption, int(option_id))
    if not row:
        reject(404, "not_found", "Delivery option not found")
    return row


def create_delivery_option(db: Session, data: Mapping[str, Any]) -> DeliveryOption:
    values = _clean(data, partial=False)
    _check_days(values["delivery_days_min"], values["delivery_days_max"])
    _ensure_unique_code(db, values["code"])

    row = DeliveryOption(**values)
    db.add(row)
    _commit(db)
    db.refresh(row)
    _invalidate(f"create {row.code}")
    return row


def update_delivery_option(db: Session, option_id: int, data: Mapping[str, Any]) -> DeliveryOption:
    row = get_delivery_option(db, option_id)
    values = _clean(data, partial=True)
    _check_days(
        values.get("delivery_days_min", row.delivery_days_min),
        values.get("delivery_days_max", row.delivery_days_max),
    )
    if "code" in values:
        _ensure_unique_code(db, values["code"], exclude_id=row.id)

    for k, v in values.items():
        setattr(row, k, v)
    _commit(db)
    db.refresh(row)
    _invalidate(f"update {row.code}")
    return row


def toggle_delivery_option(db: Session, option_id: int) -> DeliveryOption:
    row = get_delivery_option(db, option_id)
    row.is_active = not bool(row.is_active)
    _commit(db)
    db.refresh(row)
    _invalidate(f"toggle {row.code} -> {'active' if row.is_active else 'inactive'}")
    return row


def delete_delivery_option(db: Session, option_id: int) -> None:
    row = get_delivery_option(db, option_id)
    code = row.code
    db.delete(row)
    _commit(db)
    _invalidate(f"delete {code}")


def update_sort_order(db: Session, items: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """Per-row accumulate: unknown ids and bad values are reported, the rest applied."""
    if not items:
        reject(422, "empty_sort_order", "options must contain at least one entry")

    updated = 0
    errors: List[Dict[str, Any]] = []
    for idx, item in enumerate(items):
        option_id = item.get("id")
        sort_order = item.get("sort_order")
        if sort_order is None or int(sort_order) < 0:
            errors.append({"index": idx, "id": option_id, "message": "sort_order must be an integer >= 0"})
            continue
        row = db.get(DeliveryOption, int(option_id)) if option_id is not None else None
        if row is None:
            errors.append({"index": idx, "id": option_id, "message": "Delivery option not found"})
            continue
        row.sort_order = int(sort_order)
        updated += 1

    if updated:
        bump_generation(db, DELIVERY_OPTIONS)
    db.commit()
    log.info("sort order updated: updated=%d errors=%d", updated, len(errors))
    if updated:
        _invalidate(f"sort order ({updated} rows)")
    return {"updated": updated, "errors": errors}


# ---------------- dry runs ----------------


def _dry_run_context(data: Mapping[str, Any]) -> QuoteContext:
    now = datetime.now()
    order_date = data.get("order_date") or now.date()
    if isinstance(order_date, str):
        try:
            order_date = date.fromisoformat(order_date)
        except ValueError:
            reject(422, "invalid_date", "order_date must be YYYY-MM-DD", field="order_date")
    order_time = data.get("order_time")
    order_time = _clean_time(order_time, "order_time") if order_time is not None else now.time().replace(microsecond=0)
    return QuoteContext(
        order_date=order_date,
        order_time=order_time,
        is_metro=bool(data.get("is_metro") or False),
        is_remote=bool(data.get("is_remote") or False),
        business_days_only=bool(data.get("business_days_only") or False),
    )


def _dry_run_inputs(data: Mapping[str, Any]) -> Tuple[str, Decimal, Decimal, QuoteContext]:
    zone = validate_zone(data.get("zone"))
    order_value = validate_decimal(data.get("order_value"), "order_value", ge=_ZERO)
    base_cost = validate_decimal(data.get("base_shipping_cost"), "base_shipping_cost", ge=_ZERO)
    return zone, order_value, base_cost, _dry_run_context(data)


def _conditions_echo(zone: str, order_value: Decimal, base_cost: Decimal, ctx: QuoteContext) -> Dict[str, Any]:
    return {
        "zone": zone,
        "order_value": float(order_value),
        "base_shipping_cost": float(base_cost),
        "is_metro": ctx.is_metro,
        "is_remote": ctx.is_remote,
        "order_date": ctx.order_date.isoformat(),
        "order_time": ctx.order_time.isoformat(),
    }


def check_availability(db: Session, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Evaluate one option (active or not) against hand-picked conditions, no quote involved."""
    row = get_delivery_option(db, validate_int(data.get("option_id"), "option_id", ge=1))
    zone, order_value, base_cost, ctx = _dry_run_inputs(data)

    info = option_from_row(row)
    resolver = DeliveryOptionResolver(StaticConfigSource(options=[info]))
    reason = resolver.explain(info, zone, order_value, ctx)

    out: Dict[str, Any] = {
        "available": reason is None,
        "reason": reason,
        "option_details": {
            "id": info.id,
            "name": info.name,
            "code": info.code,
            "delivery_window": window_label(info.delivery_days_min, info.delivery_days_max),
        },
        "cost_calculation": None,
        "test_conditions": _conditions_echo(zone, order_value, base_cost, ctx),
    }
    if reason is None:
        out["cost_calculation"] = resolver.calculate_cost(info, base_cost, order_value, ctx)
    return out


def options_for_conditions(db: Session, data: Mapping[str, Any]) -> Dict[str, Any]:
    zone, order_value, base_cost, ctx = _dry_run_inputs(data)
    rows = db.query(DeliveryOption).order_by(DeliveryOption.sort_order.asc(), DeliveryOption.name.asc()).all()
    infos = [option_from_row(r) for r in rows]

    resolver = DeliveryOptionResolver(StaticConfigSource(options=infos))
    options = resolver.get_available_options(zone, order_value, base_cost, ctx)
    return {
        "available_options": options,
        "test_conditions": _conditions_echo(zone, order_value, base_cost, ctx),
    }
