# shipquote/api/routers/shipping_quote.py
from __future__ import annotations

from fastapi import APIRouter

from shipquote.api.routers import shipping_quote_routes_calc
from shipquote.api.routers import shipping_quote_routes_zones

router = APIRouter(tags=["shipping-quote"])


def _register_all_routes() -> None:
    shipping_quote_routes_zones.register(router)
    shipping_quote_routes_calc.register(router)


_register_all_routes()

__all__ = ["router"]
