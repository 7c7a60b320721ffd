# shipquote/core/cache.py
"""
Process-local configuration cache, partitioned per entity type.

Every partition carries a generation counter. Entries remember the generation
they were loaded under; bumping the counter hides all older entries at once
without touching other partitions. Admin writes call ``invalidate`` (whole
partition) or ``forget`` (single key) after their commit, so the next read
sees the new configuration.

Writes served by another process reach this cache through ``observe``: the
database keeps a shared counter per partition (shipquote.db.generations) and
readers pass the value they just read. A value different from the last one
seen drops the partition.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from shipquote.core.config import get_settings
from shipquote.metrics import CACHE_INVALIDATIONS

log = logging.getLogger("shipquote.cache")

PINCODE_ZONES = "pincode_zones"
WEIGHT_SLABS = "weight_slabs"
ZONE_RATES = "zone_rates"
DELIVERY_OPTIONS = "delivery_options"

PARTITIONS: Tuple[str, ...] = (PINCODE_ZONES, WEIGHT_SLABS, ZONE_RATES, DELIVERY_OPTIONS)


@dataclass
class _Entry:
    value: Any
    generation: int
    loaded_at: float


class ConfigCache:
    def __init__(self, ttl_seconds: int = 3600, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = int(ttl_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._generations: Dict[str, int] = {p: 0 for p in PARTITIONS}
        self._entries: Dict[str, Dict[Hashable, _Entry]] = {p: {} for p in PARTITIONS}
        self._shared: Dict[str, Optional[int]] = {p: None for p in PARTITIONS}

    def _check(self, partition: str) -> None:
        if partition not in self._generations:
            raise KeyError(f"unknown cache partition: {partition}")

    def generation(self, partition: str) -> int:
        self._check(partition)
        with self._lock:
            return self._generations[partition]

    def _fresh(self, entry: _Entry, gen: int) -> bool:
        if entry.generation != gen:
            return False
        if self._ttl and (self._clock() - entry.loaded_at) > self._ttl:
            return False
        return True

    def get_or_load(self, partition: str, key: Hashable, loader: Callable[[], Any]) -> Any:
        """
        Return the cached value for ``key`` or call ``loader`` and store the result.

        ``None`` results are cached too (a missing pincode stays a cheap miss
        until that pincode is written).
        """
        self._check(partition)
        with self._lock:
            gen = self._generations[partition]
            entry = self._entries[partition].get(key)
            if entry is not None and self._fresh(entry, gen):
                return entry.value

        value = loader()

        with self._lock:
            # a write may have landed while loading; only store under the generation we read
            if self._generations[partition] == gen:
                self._entries[partition][key] = _Entry(value=value, generation=gen, loaded_at=self._clock())
        return value

    def observe(self, partition: str, shared_generation: int) -> bool:
        """Record the shared generation; returns True when it moved and the partition was dropped."""
        self._check(partition)
        with self._lock:
            seen = self._shared[partition]
            if seen == shared_generation:
                return False
            self._shared[partition] = shared_generation
            self._generations[partition] += 1
            self._entries[partition].clear()
        if seen is not None:
            log.info("cache partition %s reloaded: shared gen %s -> %s", partition, seen, shared_generation)
        return True

    def invalidate(self, partition: str, reason: Optional[str] = None) -> int:
        self._check(partition)
        with self._lock:
            self._generations[partition] += 1
            self._entries[partition].clear()
            gen = self._generations[partition]
        CACHE_INVALIDATIONS.labels(partition).inc()
        log.info("cache partition invalidated: %s gen=%d reason=%s", partition, gen, reason or "-")
        return gen

    def forget(self, partition: str, key: Hashable) -> None:
        self._check(partition)
        with self._lock:
            self._entries[partition].pop(key, None)
        log.debug("cache key forgotten: %s[%r]", partition, key)

    def clear(self) -> None:
        with self._lock:
            for p in PARTITIONS:
                self._generations[p] += 1
                self._entries[p].clear()
                self._shared[p] = None


@lru_cache
def get_config_cache() -> ConfigCache:
    return ConfigCache(ttl_seconds=get_settings().SHIPQUOTE_CACHE_TTL_SECONDS)
