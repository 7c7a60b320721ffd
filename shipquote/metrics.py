# shipquote/metrics.py
from __future__ import annotations

import os

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, CollectorRegistry, Counter, Histogram, generate_latest, multiprocess

# outcome: ok | invalid | lower-cased failure_code (zone_not_found, configuration_missing, ...)
QUOTES = Counter("shipping_quotes_total", "Shipping quotes computed", ["outcome"])
QUOTE_LAT = Histogram("shipping_quote_latency_seconds", "Shipping quote latency (seconds)")
CACHE_INVALIDATIONS = Counter("shipquote_cache_invalidations_total", "Config cache invalidations", ["partition"])

router = APIRouter(tags=["ops"])


@router.get("/metrics")
def metrics() -> Response:
    """
    Single process: export the default REGISTRY.
    With PROMETHEUS_MULTIPROC_DIR set, merge the per-process shards first.
    """
    if os.environ.get("PROMETHEUS_MULTIPROC_DIR"):
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        payload = generate_latest(registry)
    else:
        payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
