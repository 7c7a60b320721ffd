# shipquote/api/routers/shipping_config_routes_delivery_options.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from shipquote.api.routers.shipping_config_schemas import (
    AvailabilityCheckIn,
    AvailabilityCheckOut,
    DeliveryOptionCreateIn,
    DeliveryOptionListOut,
    DeliveryOptionOut,
    DeliveryOptionUpdateIn,
    DryRunConditionsIn,
    OptionsForConditionsOut,
    SortOrderIn,
    SortOrderOut,
)
from shipquote.db.session import get_db
from shipquote.services import shipping_config as svc


def register(router: APIRouter) -> None:
    @router.post("/delivery-options/test-availability", response_model=AvailabilityCheckOut)
    def check_delivery_option_availability(payload: AvailabilityCheckIn, db: Session = Depends(get_db)):
        return AvailabilityCheckOut(**svc.check_availability(db, payload.model_dump()))

    @router.post("/delivery-options/available-for-conditions", response_model=OptionsForConditionsOut)
    def delivery_options_for_conditions(payload: DryRunConditionsIn, db: Session = Depends(get_db)):
        return OptionsForConditionsOut(**svc.options_for_conditions(db, payload.model_dump()))

    @router.post("/delivery-options/sort-order", response_model=SortOrderOut)
    def update_delivery_option_sort_order(payload: SortOrderIn, db: Session = Depends(get_db)):
        return SortOrderOut(**svc.update_sort_order(db, [o.model_dump() for o in payload.options]))

    @router.get("/delivery-options", response_model=DeliveryOptionListOut)
    def list_delivery_options(
        search: Optional[str] = Query(None),
        active: Optional[bool] = Query(None),
        page: int = Query(1, ge=1),
        page_size: int = Query(15, ge=1, le=200),
        db: Session = Depends(get_db),
    ):
        rows, total = svc.list_delivery_options(db, search=search, active=active, page=page, page_size=page_size)
        return DeliveryOptionListOut(
            total=total,
            page=page,
            page_size=page_size,
            data=[DeliveryOptionOut.model_validate(r) for r in rows],
        )

    @router.post("/delivery-options", response_model=DeliveryOptionOut, status_code=status.HTTP_201_CREATED)
    def create_delivery_option(payload: DeliveryOptionCreateIn, db: Session = Depends(get_db)):
        return DeliveryOptionOut.model_validate(svc.create_delivery_option(db, payload.model_dump()))

    @router.get("/delivery-options/{option_id}", response_model=DeliveryOptionOut)
    def get_delivery_option(option_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
        return DeliveryOptionOut.model_validate(svc.get_delivery_option(db, option_id))

    @router.put("/delivery-options/{option_id}", response_model=DeliveryOptionOut)
    def update_delivery_option(
        option_id: int = Path(..., ge=1),
        payload: DeliveryOptionUpdateIn = ...,
        db: Session = Depends(get_db),
    ):
        row = svc.update_delivery_option(db, option_id, payload.model_dump(exclude_unset=True))
        return DeliveryOptionOut.model_validate(row)

    @router.post("/delivery-options/{option_id}/toggle-status", response_model=DeliveryOptionOut)
    def toggle_delivery_option(option_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
        return DeliveryOptionOut.model_validate(svc.toggle_delivery_option(db, option_id))

    @router.delete("/delivery-options/{option_id}", status_code=status.HTTP_200_OK)
    def delete_delivery_option(option_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
        svc.delete_delivery_option(db, option_id)
        return {"ok": True}
