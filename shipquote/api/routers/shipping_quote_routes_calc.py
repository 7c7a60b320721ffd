# shipquote/api/routers/shipping_quote_routes_calc.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from shipquote.api.routers.shipping_quote_schemas import ShippingQuoteIn, ShippingQuoteOut
from shipquote.db.session import get_db
from shipquote.services.shipping_quote import CartItem, QuoteRequest, ShippingQuoteService, ValidationError


def register(router: APIRouter) -> None:
    @router.post(
        "/shipping-quote",
        response_model=ShippingQuoteOut,
        status_code=status.HTTP_200_OK,
    )
    def calc_shipping_quote(payload: ShippingQuoteIn, db: Session = Depends(get_db)):
        req = QuoteRequest(
            delivery_pincode=payload.delivery_pincode,
            pickup_pincode=payload.pickup_pincode,
            items=[
                CartItem(
                    weight=it.weight,
                    quantity=it.quantity,
                    length=it.dimensions.length if it.dimensions else None,
                    width=it.dimensions.width if it.dimensions else None,
                    height=it.dimensions.height if it.dimensions else None,
                )
                for it in payload.items
            ],
            order_value=payload.order_value,
            order_date=payload.order_date,
            order_time=payload.order_time,
            courier=payload.courier,
            payment_mode=payload.payment_mode,
            business_days_only=payload.business_days_only,
        )

        try:
            result = ShippingQuoteService.for_session(db).quote(req)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=e.to_detail())

        return ShippingQuoteOut(**result)
