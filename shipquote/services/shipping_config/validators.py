# shipquote/services/shipping_config/validators.py
from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, NoReturn, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError

from shipquote.services.shipping_quote.types import ZONES

_PINCODE_RE = re.compile(r"^[0-9]{6}$")


def reject(status_code: int, code: str, message: str, **extra: Any) -> NoReturn:
    detail = {"code": code, "message": message}
    detail.update(extra)
    raise HTTPException(status_code=status_code, detail=detail)


def norm(s: Optional[str]) -> Optional[str]:
    if s is None:
        return None
    s2 = str(s).strip()
    return s2 if s2 else None


def norm_required(s: Optional[str], field: str) -> str:
    s2 = norm(s)
    if not s2:
        reject(422, "field_required", f"{field} is required", field=field)
    return s2


def validate_pincode(v: Optional[str], field: str = "pincode") -> str:
    t = norm(v) or ""
    if not _PINCODE_RE.match(t):
        reject(422, "invalid_pincode", f"{field} must be exactly 6 digits", field=field, value=v)
    return t


def validate_zone(v: Optional[str], field: str = "zone") -> str:
    t = (norm(v) or "").upper()
    if t not in ZONES:
        reject(422, "invalid_zone", f"{field} must be one of {', '.join(ZONES)}", field=field, value=v)
    return t


def validate_zones(values: Optional[Iterable[str]], field: str = "availability_zones") -> List[str]:
    out: List[str] = []
    for v in values or []:
        z = validate_zone(v, field)
        if z not in out:
            out.append(z)
    return out


def validate_decimal(
    v: Any,
    field: str,
    *,
    ge: Optional[Decimal] = None,
    gt: Optional[Decimal] = None,
    le: Optional[Decimal] = None,
    places: str = "0.01",
) -> Decimal:
    try:
        d = Decimal(str(v))
    except (InvalidOperation, TypeError, ValueError) as e:
        raise HTTPException(
            status_code=422, detail={"code": "invalid_number", "message": f"{field} must be a number", "field": field}
        ) from e
    if d.is_nan() or d.is_infinite():
        reject(422, "invalid_number", f"{field} must be a number", field=field)
    if ge is not None and d < ge:
        reject(422, "out_of_range", f"{field} must be >= {ge}", field=field)
    if gt is not None and d <= gt:
        reject(422, "out_of_range", f"{field} must be > {gt}", field=field)
    if le is not None and d > le:
        reject(422, "out_of_range", f"{field} must be <= {le}", field=field)
    return d.quantize(Decimal(places))


def validate_int(v: Any, field: str, *, ge: Optional[int] = None, le: Optional[int] = None) -> int:
    try:
        n = int(v)
    except (TypeError, ValueError) as e:
        raise HTTPException(
            status_code=422, detail={"code": "invalid_number", "message": f"{field} must be an integer", "field": field}
        ) from e
    if ge is not None and n < ge:
        reject(422, "out_of_range", f"{field} must be >= {ge}", field=field)
    if le is not None and n > le:
        reject(422, "out_of_range", f"{field} must be <= {le}", field=field)
    return n


def validate_restricted_days(values: Optional[Iterable[Any]]) -> List[int]:
    out: List[int] = []
    for v in values or []:
        d = validate_int(v, "restricted_days", ge=0, le=6)
        if d not in out:
            out.append(d)
    return sorted(out)


def handle_integrity_error(e: IntegrityError, *, what: str = "row") -> NoReturn:
    msg = str(getattr(e, "orig", e)).lower()
    if "unique" in msg or "duplicate" in msg:
        reject(409, "duplicate", f"{what} already exists")
    if "foreign key" in msg:
        reject(409, "in_use", f"{what} is referenced by other configuration")
    reject(422, "integrity_error", f"{what} violates a database constraint")
