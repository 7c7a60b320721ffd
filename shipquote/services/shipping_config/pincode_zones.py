# shipquote/services/shipping_config/pincode_zones.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shipquote.api.routers.shipping_config_schemas import PincodeZoneCreateIn
from shipquote.core.cache import PINCODE_ZONES, get_config_cache
from shipquote.core.config import get_settings
from shipquote.db.generations import bump_generation
from shipquote.models.pincode_zone import PincodeZone

from .validators import (
    handle_integrity_error,
    norm,
    reject,
    validate_decimal,
    validate_int,
    validate_pincode,
    validate_zone,
)

log = logging.getLogger("shipquote.config.pincode_zones")

_FLAGS = ("is_metro", "is_remote", "cod_available")
_TEXT = ("city", "state", "region")


def _clean(data: Mapping[str, Any], *, partial: bool) -> Dict[str, Any]:
    """Validated column values; with ``partial`` only the keys present are checked."""
    out: Dict[str, Any] = {}

    if "pincode" in data or not partial:
        out["pincode"] = validate_pincode(data.get("pincode"))
    if "zone" in data or not partial:
        out["zone"] = validate_zone(data.get("zone"))
    for k in _TEXT:
        if k in data:
            out[k] = norm(data.get(k))
    for k in _FLAGS:
        if k in data and data[k] is not None:
            out[k] = bool(data[k])
    if "expected_delivery_days" in data or not partial:
        out["expected_delivery_days"] = validate_int(
            data.get("expected_delivery_days"), "expected_delivery_days", ge=1, le=30
        )
    if "zone_multiplier" in data or not partial:
        raw = data.get("zone_multiplier", Decimal("1.00"))
        out["zone_multiplier"] = validate_decimal(
            raw if raw is not None else Decimal("1.00"),
            "zone_multiplier",
            ge=Decimal("0.1"),
            le=Decimal("5.0"),
        )
    return out


def _invalidate(pincode: Optional[str] = None, reason: str = "") -> None:
    get_config_cache().invalidate(PINCODE_ZONES, reason=reason or (f"pincode {pincode}" if pincode else None))


def list_pincode_zones(
    db: Session,
    *,
    search: Optional[str] = None,
    zone: Optional[str] = None,
    state: Optional[str] = None,
    page: int = 1,
    page_size: int = 15,
) -> Tuple[List[PincodeZone], int]:
    q = db.query(PincodeZone)
    s = norm(search)
    if s:
        like = f"%{s}%"
        q = q.filter(or_(PincodeZone.pincode.like(like), PincodeZone.city.ilike(like)))
    if norm(zone):
        q = q.filter(PincodeZone.zone == validate_zone(zone))
    if norm(state):
        q = q.filter(PincodeZone.state == norm(state))

    total = q.count()
    rows = (
        q.order_by(PincodeZone.pincode.asc())
        .offset((max(int(page), 1) - 1) * int(page_size))
        .limit(int(page_size))
        .all()
    )
    return rows, total


def get_pincode_zone(db: Session, pincode_zone_id: int) -> PincodeZone:
    row = db.get(PincodeZone, int(pincode_zone_id))
    if not row:
        reject(404, "not_found", "Pincode zone not found")
    return row


def create_pincode_zone(db: Session, data: Mapping[str, Any]) -> PincodeZone:
    values = _clean(data, partial=False)

    exists = db.query(PincodeZone.id).filter(PincodeZone.pincode == values["pincode"]).first()
    if exists:
        reject(409, "duplicate_pincode", f"pincode {values['pincode']} already exists")

    row = PincodeZone(**values)
    db.add(row)
    try:
        bump_generation(db, PINCODE_ZONES)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        handle_integrity_error(e, what="pincode zone")

    db.refresh(row)
    _invalidate(row.pincode, "create")
    return row


def update_pincode_zone(db: Session, pincode_zone_id: int, data: Mapping[str, Any]) -> PincodeZone:
    row = get_pincode_zone(db, pincode_zone_id)
    values = _clean(data, partial=True)

    new_pc = values.get("pincode")
    if new_pc and new_pc != row.pincode:
        clash = (
            db.query(PincodeZone.id)
            .filter(PincodeZone.pincode == new_pc, PincodeZone.id != row.id)
            .first()
        )
        if clash:
            reject(409, "duplicate_pincode", f"pincode {new_pc} already exists")

    for k, v in values.items():
        setattr(row, k, v)

    try:
        bump_generation(db, PINCODE_ZONES)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        handle_integrity_error(e, what="pincode zone")

    db.refresh(row)
    _invalidate(row.pincode, "update")
    return row


def delete_pincode_zone(db: Session, pincode_zone_id: int) -> None:
    row = get_pincode_zone(db, pincode_zone_id)
    pincode = row.pincode
    db.delete(row)
    bump_generation(db, PINCODE_ZONES)
    db.commit()
    _invalidate(pincode, "delete")


def _row_error(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def bulk_import_pincode_zones(db: Session, rows: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Upsert by pincode, row by row.

    Rows arrive untyped; each one is parsed with PincodeZoneCreateIn first, so
    "false" / "0" become False and an unparseable flag skips the row. Each row
    runs in its own SAVEPOINT: a bad row is reported and skipped, rows before
    and after it are kept. Replaying the same payload yields the same counts
    and no net change.
    """
    max_rows = get_settings().SHIPQUOTE_BULK_IMPORT_MAX_ROWS
    if not rows:
        reject(422, "empty_import", "pincodes must contain at least one row")
    if len(rows) > max_rows:
        reject(422, "too_many_rows", f"at most {max_rows} rows per import", max_rows=max_rows, received=len(rows))

    imported = 0
    skipped = 0
    errors: List[Dict[str, Any]] = []

    for idx, raw in enumerate(rows):
        try:
            parsed = PincodeZoneCreateIn.model_validate(raw)
            values = _clean(parsed.model_dump(exclude_unset=True), partial=False)
        except ValidationError as e:
            skipped += 1
            errors.append({"index": idx, "message": _row_error(e)})
            continue
        except HTTPException as e:
            skipped += 1
            detail = e.detail if isinstance(e.detail, dict) else {"message": str(e.detail)}
            errors.append({"index": idx, "message": str(detail.get("message"))})
            continue

        try:
            with db.begin_nested():
                row = db.query(PincodeZone).filter(PincodeZone.pincode == values["pincode"]).one_or_none()
                if row is None:
                    db.add(PincodeZone(**values))
                else:
                    for k, v in values.items():
                        setattr(row, k, v)
                db.flush()
        except SQLAlchemyError as e:
            skipped += 1
            errors.append({"index": idx, "message": str(getattr(e, "orig", e))})
            log.warning("bulk import row %d failed: %s", idx, e)
            continue

        imported += 1

    if imported:
        bump_generation(db, PINCODE_ZONES)
    db.commit()
    if imported:
        _invalidate(reason=f"bulk import ({imported} rows)")

    log.info("bulk import done: imported=%d skipped=%d", imported, skipped)
    return {"imported": imported, "skipped": skipped, "errors": errors}
