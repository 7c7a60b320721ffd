# shipquote/services/shipping_quote/__init__.py
from __future__ import annotations

from .delivery_options import DeliveryOptionResolver
from .errors import (
    ConfigurationMissingError,
    NoOptionsAvailableError,
    ShippingQuoteError,
    ValidationError,
    ZoneNotFoundError,
)
from .service import ShippingQuoteService
from .slabs import SlabMatch, WeightSlabResolver
from .snapshot import ConfigSource, DbConfigSource, StaticConfigSource
from .types import CartItem, QuoteContext, QuoteRequest, ZoneEntry
from .weight import ChargeableWeightCalculator
from .zones import ZoneRegistry

__all__ = [
    "CartItem",
    "ChargeableWeightCalculator",
    "ConfigSource",
    "ConfigurationMissingError",
    "DbConfigSource",
    "DeliveryOptionResolver",
    "NoOptionsAvailableError",
    "QuoteContext",
    "QuoteRequest",
    "ShippingQuoteError",
    "ShippingQuoteService",
    "SlabMatch",
    "StaticConfigSource",
    "ValidationError",
    "WeightSlabResolver",
    "ZoneEntry",
    "ZoneNotFoundError",
    "ZoneRegistry",
]
