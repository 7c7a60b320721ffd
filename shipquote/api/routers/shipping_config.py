# shipquote/api/routers/shipping_config.py
from __future__ import annotations

from fastapi import APIRouter

from shipquote.api.routers import shipping_config_routes_delivery_options
from shipquote.api.routers import shipping_config_routes_pincode_zones
from shipquote.api.routers import shipping_config_routes_weight_slabs
from shipquote.api.routers import shipping_config_routes_zone_rates

router = APIRouter(prefix="/admin", tags=["shipping-config"])


def _register_all_routes() -> None:
    shipping_config_routes_pincode_zones.register(router)
    shipping_config_routes_weight_slabs.register(router)
    shipping_config_routes_zone_rates.register(router)
    shipping_config_routes_delivery_options.register(router)


_register_all_routes()

__all__ = ["router"]
