# shipquote/api/routers/shipping_config_routes_zone_rates.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from shipquote.api.routers.shipping_config_schemas import (
    ZoneRateCreateIn,
    ZoneRateListOut,
    ZoneRateOut,
    ZoneRateUpdateIn,
)
from shipquote.db.session import get_db
from shipquote.services import shipping_config as svc


def register(router: APIRouter) -> None:
    @router.get("/zone-rates", response_model=ZoneRateListOut)
    def list_zone_rates(
        courier_name: Optional[str] = Query(None),
        zone: Optional[str] = Query(None),
        weight_slab_id: Optional[int] = Query(None, ge=1),
        db: Session = Depends(get_db),
    ):
        rows = svc.list_zone_rates(db, courier_name=courier_name, zone=zone, weight_slab_id=weight_slab_id)
        return ZoneRateListOut(data=[ZoneRateOut.model_validate(r) for r in rows])

    @router.post("/zone-rates", response_model=ZoneRateOut, status_code=status.HTTP_201_CREATED)
    def create_zone_rate(payload: ZoneRateCreateIn, db: Session = Depends(get_db)):
        return ZoneRateOut.model_validate(svc.create_zone_rate(db, payload.model_dump()))

    @router.patch("/zone-rates/{rate_id}", response_model=ZoneRateOut)
    def update_zone_rate(
        rate_id: int = Path(..., ge=1),
        payload: ZoneRateUpdateIn = ...,
        db: Session = Depends(get_db),
    ):
        row = svc.update_zone_rate(db, rate_id, payload.model_dump(exclude_unset=True))
        return ZoneRateOut.model_validate(row)

    @router.delete("/zone-rates/{rate_id}", status_code=status.HTTP_200_OK)
    def delete_zone_rate(rate_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
        svc.delete_zone_rate(db, rate_id)
        return {"ok": True}
