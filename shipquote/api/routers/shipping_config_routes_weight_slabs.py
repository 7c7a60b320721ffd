# shipquote/api/routers/shipping_config_routes_weight_slabs.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from shipquote.api.routers.shipping_config_schemas import WeightSlabIn, WeightSlabListOut, WeightSlabOut
from shipquote.db.session import get_db
from shipquote.services import shipping_config as svc


def register(router: APIRouter) -> None:
    @router.get("/weight-slabs", response_model=WeightSlabListOut)
    def list_weight_slabs(courier_name: Optional[str] = Query(None), db: Session = Depends(get_db)):
        rows = svc.list_weight_slabs(db, courier_name=courier_name)
        return WeightSlabListOut(data=[WeightSlabOut.model_validate(r) for r in rows])

    @router.post("/weight-slabs", response_model=WeightSlabOut, status_code=status.HTTP_201_CREATED)
    def create_weight_slab(payload: WeightSlabIn, db: Session = Depends(get_db)):
        return WeightSlabOut.model_validate(svc.create_weight_slab(db, payload.model_dump()))

    @router.put("/weight-slabs/{slab_id}", response_model=WeightSlabOut)
    def update_weight_slab(
        slab_id: int = Path(..., ge=1),
        payload: WeightSlabIn = ...,
        db: Session = Depends(get_db),
    ):
        return WeightSlabOut.model_validate(svc.update_weight_slab(db, slab_id, payload.model_dump()))

    @router.delete("/weight-slabs/{slab_id}", status_code=status.HTTP_200_OK)
    def delete_weight_slab(slab_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
        svc.delete_weight_slab(db, slab_id)
        return {"ok": True}
