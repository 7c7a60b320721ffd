# shipquote/services/shipping_quote/snapshot.py
"""
Read side of the configuration tables.

Rows are converted into frozen dataclasses (types.py) and cached per entity
partition, so one quote works on an immutable snapshot and never holds ORM
objects across requests.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Dict, Hashable, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from shipquote.core.cache import (
    DELIVERY_OPTIONS,
    PINCODE_ZONES,
    WEIGHT_SLABS,
    ZONE_RATES,
    ConfigCache,
    get_config_cache,
)
from shipquote.db.generations import current_generation
from shipquote.models.delivery_option import DeliveryOption
from shipquote.models.pincode_zone import PincodeZone
from shipquote.models.shipping_weight_slab import ShippingWeightSlab
from shipquote.models.shipping_zone_rate import ShippingZoneRate

from .conditions import parse_conditions
from .types import DeliveryOptionInfo, RateInfo, SlabInfo, ZoneEntry


def zone_entry_from_row(row: PincodeZone) -> ZoneEntry:
    return ZoneEntry(
        pincode=str(row.pincode),
        zone=str(row.zone),
        city=row.city,
        state=row.state,
        region=row.region,
        is_metro=bool(row.is_metro),
        is_remote=bool(row.is_remote),
        cod_available=bool(row.cod_available),
        expected_delivery_days=int(row.expected_delivery_days),
        zone_multiplier=Decimal(str(row.zone_multiplier)),
    )


def slab_from_row(row: ShippingWeightSlab) -> SlabInfo:
    return SlabInfo(id=int(row.id), courier_name=str(row.courier_name), base_weight=Decimal(str(row.base_weight)))


def rate_from_row(row: ShippingZoneRate) -> RateInfo:
    return RateInfo(
        id=int(row.id),
        weight_slab_id=int(row.weight_slab_id),
        zone=str(row.zone),
        fwd_rate=Decimal(str(row.fwd_rate)),
        aw_rate=None if row.aw_rate is None else Decimal(str(row.aw_rate)),
        cod_charges=Decimal(str(row.cod_charges or 0)),
        cod_percentage=Decimal(str(row.cod_percentage or 0)),
    )


def option_from_row(row: DeliveryOption) -> DeliveryOptionInfo:
    return DeliveryOptionInfo(
        id=int(row.id),
        code=str(row.code),
        name=str(row.name),
        description=row.description,
        delivery_days_min=int(row.delivery_days_min),
        delivery_days_max=int(row.delivery_days_max),
        price_multiplier=Decimal(str(row.price_multiplier)),
        fixed_surcharge=Decimal(str(row.fixed_surcharge or 0)),
        availability_zones=tuple(str(z) for z in (row.availability_zones or [])),
        conditions=parse_conditions(row.availability_conditions),
        cutoff_time=row.cutoff_time,
        restricted_days=tuple(int(d) for d in (row.restricted_days or [])),
        min_order_value=None if row.min_order_value is None else Decimal(str(row.min_order_value)),
        sort_order=int(row.sort_order or 0),
        is_active=bool(row.is_active),
    )


class ConfigSource:
    """Interface the engine reads configuration through."""

    def zone_entry(self, pincode: str) -> Optional[ZoneEntry]:
        raise NotImplementedError

    def slabs(self, courier: str) -> Tuple[SlabInfo, ...]:
        raise NotImplementedError

    def rate(self, weight_slab_id: int, zone: str) -> Optional[RateInfo]:
        raise NotImplementedError

    def delivery_options(self) -> Tuple[DeliveryOptionInfo, ...]:
        raise NotImplementedError


class DbConfigSource(ConfigSource):
    """
    Cached reads over the session.

    Each lookup first reads the partition's shared generation (one primary-key
    row), so a write committed by any process is seen by the next lookup here.
    """

    def __init__(self, db: Session, cache: Optional[ConfigCache] = None) -> None:
        self.db = db
        self.cache = cache or get_config_cache()

    def _cached(self, partition: str, key: Hashable, load: Callable[[], Any]) -> Any:
        self.cache.observe(partition, current_generation(self.db, partition))
        return self.cache.get_or_load(partition, key, load)

    def zone_entry(self, pincode: str) -> Optional[ZoneEntry]:
        def load() -> Optional[ZoneEntry]:
            row = self.db.query(PincodeZone).filter(PincodeZone.pincode == pincode).one_or_none()
            return zone_entry_from_row(row) if row is not None else None

        return self._cached(PINCODE_ZONES, pincode, load)

    def slabs(self, courier: str) -> Tuple[SlabInfo, ...]:
        def load() -> Tuple[SlabInfo, ...]:
            rows = (
                self.db.query(ShippingWeightSlab)
                .filter(ShippingWeightSlab.courier_name == courier)
                .order_by(ShippingWeightSlab.base_weight.asc(), ShippingWeightSlab.id.asc())
                .all()
            )
            return tuple(slab_from_row(r) for r in rows)

        return self._cached(WEIGHT_SLABS, courier, load)

    def rate(self, weight_slab_id: int, zone: str) -> Optional[RateInfo]:
        def load() -> Optional[RateInfo]:
            row = (
                self.db.query(ShippingZoneRate)
                .filter(
                    ShippingZoneRate.weight_slab_id == int(weight_slab_id),
                    ShippingZoneRate.zone == zone,
                )
                .one_or_none()
            )
            return rate_from_row(row) if row is not None else None

        return self._cached(ZONE_RATES, (int(weight_slab_id), zone), load)

    def delivery_options(self) -> Tuple[DeliveryOptionInfo, ...]:
        def load() -> Tuple[DeliveryOptionInfo, ...]:
            rows = (
                self.db.query(DeliveryOption)
                .order_by(DeliveryOption.sort_order.asc(), DeliveryOption.name.asc())
                .all()
            )
            return tuple(option_from_row(r) for r in rows)

        return self._cached(DELIVERY_OPTIONS, "all", load)


class StaticConfigSource(ConfigSource):
    """Fixed in-memory snapshot (admin dry runs, unit tests)."""

    def __init__(
        self,
        zones: Sequence[ZoneEntry] = (),
        slabs: Sequence[SlabInfo] = (),
        rates: Sequence[RateInfo] = (),
        options: Sequence[DeliveryOptionInfo] = (),
    ) -> None:
        self._zones: Dict[str, ZoneEntry] = {z.pincode: z for z in zones}
        self._slabs = tuple(slabs)
        self._rates: Dict[Tuple[int, str], RateInfo] = {(r.weight_slab_id, r.zone): r for r in rates}
        self._options = tuple(options)

    def zone_entry(self, pincode: str) -> Optional[ZoneEntry]:
        return self._zones.get(pincode)

    def slabs(self, courier: str) -> Tuple[SlabInfo, ...]:
        return tuple(sorted((s for s in self._slabs if s.courier_name == courier), key=lambda s: (s.base_weight, s.id)))

    def rate(self, weight_slab_id: int, zone: str) -> Optional[RateInfo]:
        return self._rates.get((int(weight_slab_id), zone))

    def delivery_options(self) -> Tuple[DeliveryOptionInfo, ...]:
        return self._options
