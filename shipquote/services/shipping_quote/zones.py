# shipquote/services/shipping_quote/zones.py
from __future__ import annotations

from .errors import ZoneNotFoundError
from .snapshot import ConfigSource
from .types import ZoneEntry, norm_pincode


class ZoneRegistry:
    """Delivery pincode -> ZoneEntry. Exact match only, no prefix fallback."""

    def __init__(self, source: ConfigSource) -> None:
        self.source = source

    def resolve(self, pincode: str) -> ZoneEntry:
        pc = norm_pincode(pincode, "delivery_pincode")
        entry = self.source.zone_entry(pc)
        if entry is None:
            raise ZoneNotFoundError(
                f"pincode {pc} is not serviceable (no zone configured)",
                context={"pincode": pc},
            )
        return entry

    def is_serviceable(self, pincode: str) -> bool:
        return self.source.zone_entry(norm_pincode(pincode)) is not None

    def is_cod_available(self, pincode: str) -> bool:
        entry = self.source.zone_entry(norm_pincode(pincode))
        return bool(entry.cod_available) if entry else False

    def delivery_days(self, pincode: str, default: int = 7) -> int:
        entry = self.source.zone_entry(norm_pincode(pincode))
        return int(entry.expected_delivery_days) if entry else default
