# shipquote/services/shipping_quote/errors.py
from __future__ import annotations

from typing import Any, Dict, Optional


class ShippingQuoteError(Exception):
    code = "SHIPPING_QUOTE_ERROR"

    def __init__(self, message: str, *, code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def to_detail(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.context:
            out["context"] = self.context
        return out


class ValidationError(ShippingQuoteError):
    """Malformed input, rejected before any configuration lookup."""

    code = "VALIDATION_ERROR"


class ConfigurationMissingError(ShippingQuoteError):
    """Configuration needed for the quote does not exist (zone, slab, rate)."""

    code = "CONFIGURATION_MISSING"


class ZoneNotFoundError(ConfigurationMissingError):
    code = "ZONE_NOT_FOUND"


class NoOptionsAvailableError(ShippingQuoteError):
    code = "NO_OPTIONS_AVAILABLE"
