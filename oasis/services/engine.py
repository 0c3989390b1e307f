"""
engine.py — Query surface over the cached signal list.

One SignalEngine per process, built in the FastAPI lifespan. Every query
reads through the TTL cache, so repeated calls within the TTL never touch
a provider, and concurrent calls during a refresh share one aggregation.

Architecture mirrors the database layer of a typical FastAPI app: a
module-level holder (`engine_holder`) keeps the instance and `get_engine`
hands it to route handlers via Depends(). Tests override the dependency or
replace `engine_holder.engine` directly.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Mapping, Optional

from oasis.adapters import build_default_adapters
from oasis.adapters.base import ProviderAdapter
from oasis.core.config import settings
from oasis.models.signal import (
    BoundingBox,
    NearbySignal,
    Severity,
    SignalKind,
    SignalPoint,
    Summary,
)
from oasis.services import geo
from oasis.services.aggregator import Aggregator, summarize
from oasis.services.cache import CacheRead, SignalCache

logger = logging.getLogger(__name__)


class SignalEngine:
    def __init__(
        self,
        adapters: Iterable[ProviderAdapter],
        *,
        regions: Optional[Mapping[str, BoundingBox]] = None,
        boundary: Optional[geo.RegionBoundary] = None,
        buffer_deg: Optional[float] = None,
        cache_ttl_seconds: Optional[float] = None,
        provider_timeout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.adapters = list(adapters)
        self.aggregator = Aggregator(self.adapters, timeout=provider_timeout_seconds)
        self.cache = SignalCache(self.aggregator.aggregate, ttl_seconds=cache_ttl_seconds, clock=clock)
        self.regions = dict(regions if regions is not None else geo.DEFAULT_REGIONS)
        self.boundary = boundary or geo.default_boundary()
        self.buffer_deg = buffer_deg if buffer_deg is not None else settings.border_buffer_deg

    # ── Full list ─────────────────────────────────────────────────────────────

    async def get_all(self) -> list[SignalPoint]:
        read = await self.cache.get()
        return list(read.entry.points)

    async def get_all_with_status(self) -> CacheRead:
        """Like get_all(), plus whether the list came from cache."""
        return await self.cache.get()

    async def refresh(self) -> list[SignalPoint]:
        """Bypass the TTL and push every adapter past its success cooldown."""
        read = await self.refresh_with_status()
        return list(read.entry.points)

    async def refresh_with_status(self) -> CacheRead:
        for adapter in self.adapters:
            adapter.force_refresh()
        logger.info("Forced refresh of %d providers", len(self.adapters))
        return await self.cache.force_refresh()

    # ── Filtered views ────────────────────────────────────────────────────────

    async def get_by_kind(self, kind: SignalKind) -> list[SignalPoint]:
        kind = SignalKind(kind)
        return [p for p in await self.get_all() if p.kind == kind]

    async def get_in_bounds(self, box: BoundingBox) -> list[SignalPoint]:
        return geo.filter_in_bounds(await self.get_all(), box)

    async def get_by_region(self, name: str) -> list[SignalPoint]:
        return geo.filter_by_region(await self.get_all(), name, self.regions)

    async def get_in_country(self) -> list[SignalPoint]:
        return geo.filter_in_boundary(await self.get_all(), self.boundary, self.buffer_deg)

    async def get_nearby(self, lat: float, lng: float, radius_km: float) -> list[NearbySignal]:
        hits = geo.within_radius(await self.get_all(), lat, lng, radius_km)
        return [with_distance(p, d) for p, d in hits]

    async def get_nearest(self, lat: float, lng: float, limit: int = 5) -> list[NearbySignal]:
        hits = geo.nearest(await self.get_all(), lat, lng, limit)
        return [with_distance(p, d) for p, d in hits]

    async def get_alerts(self, min_severity: Severity = Severity.HIGH) -> list[SignalPoint]:
        return select_alerts(await self.get_all(), min_severity)

    # ── Introspection ─────────────────────────────────────────────────────────

    @staticmethod
    def stats(points: Iterable[SignalPoint]) -> Summary:
        return summarize(list(points))

    def provider_status(self) -> dict[str, dict]:
        status = {}
        for adapter in self.adapters:
            status[adapter.name] = {
                "mode": "synthetic" if adapter.synthetic else "live",
                "last_success_at": adapter.last_success_at,
                "last_error": adapter.last_error.to_dict() if adapter.last_error else None,
            }
        return status


def with_distance(point: SignalPoint, distance_km: float) -> NearbySignal:
    return NearbySignal(**point.model_dump(), distance_km=round(distance_km, 2))


def select_alerts(points: Iterable[SignalPoint], min_severity: Severity = Severity.HIGH) -> list[SignalPoint]:
    """Points at or above min_severity, most severe first."""
    floor = Severity(min_severity).rank
    hits = [p for p in points if p.severity.rank >= floor]
    hits.sort(key=lambda p: p.severity.rank, reverse=True)
    return hits


# ── Process-wide instance ─────────────────────────────────────────────────────

def build_engine() -> SignalEngine:
    """SignalEngine wired from settings, with the default regions and boundary."""
    return SignalEngine(
        build_default_adapters(settings),
        boundary=geo.default_boundary(),
        buffer_deg=settings.border_buffer_deg,
        cache_ttl_seconds=settings.cache_ttl_seconds,
        provider_timeout_seconds=settings.provider_timeout_seconds,
    )


class EngineHolder:
    engine: SignalEngine | None = None


engine_holder = EngineHolder()


def get_engine() -> SignalEngine:
    """
    FastAPI dependency: the process-wide SignalEngine.

    Built lazily when the lifespan has not run (e.g. under ASGITransport).
    """
    if engine_holder.engine is None:
        engine_holder.engine = build_engine()
    return engine_holder.engine
