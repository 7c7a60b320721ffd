# shipquote/api/routers/shipping_quote_routes_zones.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from shipquote.api.routers.shipping_quote_schemas import ServiceabilityOut, ZoneOut
from shipquote.db.session import get_db
from shipquote.services.shipping_quote import DbConfigSource, ValidationError, ZoneRegistry
from shipquote.services.shipping_quote.types import ZONE_INFO, ZONES, norm_pincode, zone_name


def register(router: APIRouter) -> None:
    @router.get("/shipping-quote/zones", response_model=List[ZoneOut])
    def list_zones():
        return [
            ZoneOut(
                zone=z,
                name=ZONE_INFO[z]["name"],
                description=ZONE_INFO[z]["description"],
                typical_days=int(ZONE_INFO[z]["typical_days"]),
            )
            for z in ZONES
        ]

    @router.get("/shipping-quote/serviceability/{pincode}", response_model=ServiceabilityOut)
    def check_serviceability(pincode: str, db: Session = Depends(get_db)):
        try:
            pc = norm_pincode(pincode)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=e.to_detail())

        registry = ZoneRegistry(DbConfigSource(db))
        if not registry.is_serviceable(pc):
            return ServiceabilityOut(pincode=pc, serviceable=False)

        entry = registry.resolve(pc)

        return ServiceabilityOut(
            pincode=pc,
            serviceable=True,
            zone=entry.zone,
            zone_name=zone_name(entry.zone),
            city=entry.city,
            state=entry.state,
            cod_available=registry.is_cod_available(pc),
            expected_delivery_days=registry.delivery_days(pc),
        )
