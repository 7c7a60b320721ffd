# shipquote/services/shipping_quote/slabs.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_CEILING, Decimal
from typing import Any, Dict

from .errors import ConfigurationMissingError, ValidationError
from .snapshot import ConfigSource
from .types import RateInfo, SlabInfo, _dec, money


@dataclass(frozen=True)
class SlabMatch:
    slab: SlabInfo
    chargeable_weight: Decimal
    overage: bool = False
    excess_weight: Decimal = Decimal("0")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.slab.id,
            "courier_name": self.slab.courier_name,
            "base_weight": float(self.slab.base_weight),
            "overage": self.overage,
            "excess_weight": float(self.excess_weight),
        }


class WeightSlabResolver:
    """
    Weight ladder per courier (ascending base_weight), ceiling match.

    Above the top slab the rate grows by aw_rate per started top-slab unit:
        fwd_rate + ceil(excess / top.base_weight) * aw_rate
    """

    def __init__(self, source: ConfigSource) -> None:
        self.source = source

    def resolve_slab(self, courier: str, chargeable_weight: Any) -> SlabMatch:
        w = _dec(chargeable_weight)
        if w <= 0:
            raise ValidationError("chargeable weight must be > 0", code="INVALID_WEIGHT", context={"weight": float(w)})

        slabs = self.source.slabs(courier)
        if not slabs:
            raise ConfigurationMissingError(
                f"no weight slabs configured for courier {courier}",
                context={"courier": courier},
            )

        for s in slabs:
            if s.base_weight >= w:
                return SlabMatch(slab=s, chargeable_weight=w)

        top = slabs[-1]
        return SlabMatch(slab=top, chargeable_weight=w, overage=True, excess_weight=w - top.base_weight)

    def rate_for(self, match: SlabMatch, zone: str) -> RateInfo:
        rate = self.source.rate(match.slab.id, zone)
        if rate is None:
            raise ConfigurationMissingError(
                f"no rate configured for courier {match.slab.courier_name}, slab {match.slab.base_weight}kg, zone {zone}",
                context={"courier": match.slab.courier_name, "weight_slab_id": match.slab.id, "zone": zone},
            )
        return rate

    def resolve_rate(self, courier: str, match: SlabMatch, zone: str) -> Decimal:
        rate = self.rate_for(match, zone)
        if not match.overage:
            return money(rate.fwd_rate)

        if rate.aw_rate is None:
            raise ConfigurationMissingError(
                f"weight {match.chargeable_weight}kg exceeds the top slab ({match.slab.base_weight}kg) "
                f"for courier {courier} and no additional-weight rate is configured",
                context={"courier": courier, "zone": zone, "weight_slab_id": match.slab.id},
            )

        units = (match.excess_weight / match.slab.base_weight).to_integral_value(rounding=ROUND_CEILING)
        return money(rate.fwd_rate + units * rate.aw_rate)

    @staticmethod
    def resolve_cod_charge(rate: RateInfo, collect_amount: Any) -> Decimal:
        pct = rate.cod_percentage / Decimal("100") * _dec(collect_amount)
        return money(max(rate.cod_charges, pct))
