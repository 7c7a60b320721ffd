# shipquote/services/shipping_config/__init__.py
from __future__ import annotations

from .delivery_options import (
    check_availability,
    create_delivery_option,
    delete_delivery_option,
    get_delivery_option,
    list_delivery_options,
    options_for_conditions,
    toggle_delivery_option,
    update_delivery_option,
    update_sort_order,
)
from .pincode_zones import (
    bulk_import_pincode_zones,
    create_pincode_zone,
    delete_pincode_zone,
    get_pincode_zone,
    list_pincode_zones,
    update_pincode_zone,
)
from .weight_slabs import create_weight_slab, delete_weight_slab, get_weight_slab, list_weight_slabs, update_weight_slab
from .zone_rates import create_zone_rate, delete_zone_rate, get_zone_rate, list_zone_rates, update_zone_rate

__all__ = [
    "bulk_import_pincode_zones",
    "check_availability",
    "create_delivery_option",
    "create_pincode_zone",
    "create_weight_slab",
    "create_zone_rate",
    "delete_delivery_option",
    "delete_pincode_zone",
    "delete_weight_slab",
    "delete_zone_rate",
    "get_delivery_option",
    "get_pincode_zone",
    "get_weight_slab",
    "get_zone_rate",
    "list_delivery_options",
    "list_pincode_zones",
    "list_weight_slabs",
    "list_zone_rates",
    "options_for_conditions",
    "toggle_delivery_option",
    "update_delivery_option",
    "update_pincode_zone",
    "update_sort_order",
    "update_weight_slab",
    "update_zone_rate",
]
