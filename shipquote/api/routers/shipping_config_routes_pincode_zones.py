# shipquote/api/routers/shipping_config_routes_pincode_zones.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from shipquote.api.routers.shipping_config_schemas import (
    BulkImportIn,
    BulkImportOut,
    PincodeZoneCreateIn,
    PincodeZoneListOut,
    PincodeZoneOut,
    PincodeZoneUpdateIn,
)
from shipquote.db.session import get_db
from shipquote.services import shipping_config as svc


def register(router: APIRouter) -> None:
    @router.get("/pincode-zones", response_model=PincodeZoneListOut)
    def list_pincode_zones(
        search: Optional[str] = Query(None),
        zone: Optional[str] = Query(None),
        state: Optional[str] = Query(None),
        page: int = Query(1, ge=1),
        page_size: int = Query(15, ge=1, le=200),
        db: Session = Depends(get_db),
    ):
        rows, total = svc.list_pincode_zones(
            db, search=search, zone=zone, state=state, page=page, page_size=page_size
        )
        return PincodeZoneListOut(
            total=total,
            page=page,
            page_size=page_size,
            data=[PincodeZoneOut.model_validate(r) for r in rows],
        )

    @router.post(
        "/pincode-zones/bulk-import",
        response_model=BulkImportOut,
        status_code=status.HTTP_200_OK,
    )
    def bulk_import_pincode_zones(payload: BulkImportIn, db: Session = Depends(get_db)):
        return BulkImportOut(**svc.bulk_import_pincode_zones(db, payload.pincodes))

    @router.post(
        "/pincode-zones",
        response_model=PincodeZoneOut,
        status_code=status.HTTP_201_CREATED,
    )
    def create_pincode_zone(payload: PincodeZoneCreateIn, db: Session = Depends(get_db)):
        row = svc.create_pincode_zone(db, payload.model_dump())
        return PincodeZoneOut.model_validate(row)

    @router.get("/pincode-zones/{pincode_zone_id}", response_model=PincodeZoneOut)
    def get_pincode_zone(pincode_zone_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
        return PincodeZoneOut.model_validate(svc.get_pincode_zone(db, pincode_zone_id))

    @router.patch("/pincode-zones/{pincode_zone_id}", response_model=PincodeZoneOut)
    def update_pincode_zone(
        pincode_zone_id: int = Path(..., ge=1),
        payload: PincodeZoneUpdateIn = ...,
        db: Session = Depends(get_db),
    ):
        row = svc.update_pincode_zone(db, pincode_zone_id, payload.model_dump(exclude_unset=True))
        return PincodeZoneOut.model_validate(row)

    @router.delete("/pincode-zones/{pincode_zone_id}", status_code=status.HTTP_200_OK)
    def delete_pincode_zone(pincode_zone_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
        svc.delete_pincode_zone(db, pincode_zone_id)
        return {"ok": True}
