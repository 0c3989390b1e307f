"""
signals.py — Environmental signal routes.

Routes:
  GET  /api/v1/signals           — full list (filters: kind, region; refresh=true bypasses the cache)
  GET  /api/v1/signals/bounds    — points inside a lat/lng box
  GET  /api/v1/signals/country   — points strictly inside the country boundary
  GET  /api/v1/signals/nearby    — points within radius_km of a location
  GET  /api/v1/signals/nearest   — the N closest points to a location
  GET  /api/v1/signals/alerts    — high / critical points, most severe first
  GET  /api/v1/signals/stats     — counts by severity, kind and source
  GET  /api/v1/signals/regions   — named regions and their boxes
  POST /api/v1/signals/refresh   — force a refresh (rate limited)

HOW THE DATA FLOWS
──────────────────
Every route reads through SignalEngine, which reads through the TTL cache.
Provider failures never surface here as 5xx: the aggregator drops a failed
provider for the cycle and, if all of them fail, substitutes the fallback
records. `cached` in the response says whether the list was served from
cache or produced by a refresh triggered by this request.

TESTING
───────
  pytest tests/test_signals_routes.py -v

  curl "http://localhost:8000/api/v1/signals?kind=seismic"
  curl "http://localhost:8000/api/v1/signals?region=Dhaka"
  curl "http://localhost:8000/api/v1/signals/bounds?north=24&south=23&east=91&west=90"
  curl "http://localhost:8000/api/v1/signals/nearby?lat=23.81&lng=90.41&radius_km=50"
  curl -X POST http://localhost:8000/api/v1/signals/refresh
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import ValidationError

from oasis.core.config import settings
from oasis.core.rate_limit import limiter
from oasis.models.signal import (
    BoundingBox,
    NearbyResponse,
    RegionInfo,
    Severity,
    SignalKind,
    SignalListResponse,
    SignalPoint,
    Summary,
)
from oasis.services import geo
from oasis.services.cache import CacheRead
from oasis.services.engine import SignalEngine, get_engine, select_alerts, with_distance

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/signals", tags=["signals"])


def _envelope(points: list[SignalPoint], read: CacheRead, summary: Optional[Summary] = None) -> SignalListResponse:
    return SignalListResponse(
        data=points,
        count=len(points),
        cached=read.cached,
        timestamp=read.entry.timestamp,
        summary=summary,
    )


def _bounding_box(
    north: float = Query(..., ge=-90, le=90),
    south: float = Query(..., ge=-90, le=90),
    east: float = Query(..., ge=-180, le=180),
    west: float = Query(..., ge=-180, le=180),
) -> BoundingBox:
    try:
        return BoundingBox(north=north, south=south, east=east, west=west)
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=[{"loc": e["loc"], "msg": e["msg"]} for e in exc.errors()],
        )


# ── GET /api/v1/signals ───────────────────────────────────────────────────────

@router.get("", response_model=SignalListResponse)
async def list_signals(
    kind: Optional[SignalKind] = Query(default=None, description="Filter by signal kind"),
    region: Optional[str] = Query(default=None, description="Named region, e.g. Dhaka"),
    refresh: bool = Query(default=False, description="Bypass the cache"),
    engine: SignalEngine = Depends(get_engine),
):
    """
    Return the aggregated signal list with a summary of what is returned.

    An unknown region yields an empty list, not an error.
    """
    read = await (engine.refresh_with_status() if refresh else engine.get_all_with_status())
    points = list(read.entry.points)

    if kind is not None:
        points = [p for p in points if p.kind == kind]
    if region:
        points = geo.filter_by_region(points, region, engine.regions)

    return _envelope(points, read, summary=engine.stats(points))


# ── Spatial queries ───────────────────────────────────────────────────────────

@router.get("/bounds", response_model=SignalListResponse)
async def signals_in_bounds(
    box: BoundingBox = Depends(_bounding_box),
    engine: SignalEngine = Depends(get_engine),
):
    read = await engine.get_all_with_status()
    points = geo.filter_in_bounds(read.entry.points, box)
    return _envelope(points, read)


@router.get("/country", response_model=SignalListResponse)
async def signals_in_country(engine: SignalEngine = Depends(get_engine)):
    """Points inside the country polygon, excluding a thin strip along the border."""
    read = await engine.get_all_with_status()
    points = geo.filter_in_boundary(read.entry.points, engine.boundary, engine.buffer_deg)
    return _envelope(points, read)


@router.get("/nearby", response_model=NearbyResponse)
async def signals_nearby(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    radius_km: float = Query(default=50.0, gt=0, le=5000),
    engine: SignalEngine = Depends(get_engine),
):
    read = await engine.get_all_with_status()
    data = [with_distance(p, d) for p, d in geo.within_radius(read.entry.points, lat, lng, radius_km)]
    return NearbyResponse(data=data, count=len(data), cached=read.cached, timestamp=read.entry.timestamp)


@router.get("/nearest", response_model=NearbyResponse)
async def signals_nearest(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    limit: int = Query(default=5, ge=1, le=50),
    engine: SignalEngine = Depends(get_engine),
):
    read = await engine.get_all_with_status()
    data = [with_distance(p, d) for p, d in geo.nearest(read.entry.points, lat, lng, limit)]
    return NearbyResponse(data=data, count=len(data), cached=read.cached, timestamp=read.entry.timestamp)


# ── Alerts + stats ────────────────────────────────────────────────────────────

@router.get("/alerts", response_model=SignalListResponse)
async def signal_alerts(
    min_severity: Severity = Query(default=Severity.HIGH),
    engine: SignalEngine = Depends(get_engine),
):
    read = await engine.get_all_with_status()
    points = select_alerts(read.entry.points, min_severity)
    return _envelope(points, read)


@router.get("/stats", response_model=Summary)
async def signal_stats(engine: SignalEngine = Depends(get_engine)):
    read = await engine.get_all_with_status()
    return read.entry.summary


@router.get("/regions", response_model=list[RegionInfo])
async def list_regions(engine: SignalEngine = Depends(get_engine)):
    return [RegionInfo(name=name, box=box) for name, box in engine.regions.items()]


# ── POST /api/v1/signals/refresh ──────────────────────────────────────────────

@router.post("/refresh", response_model=SignalListResponse)
@limiter.limit(settings.refresh_rate_limit)
async def refresh_signals(request: Request, engine: SignalEngine = Depends(get_engine)):
    """Re-aggregate now. Upstream rate-limit backoffs are still honoured."""
    started = datetime.now(tz=timezone.utc)
    read = await engine.refresh_with_status()
    logger.info("Manual refresh from %s took %.2fs",
                request.client.host if request.client else "unknown",
                (datetime.now(tz=timezone.utc) - started).total_seconds())
    return _envelope(list(read.entry.points), read, summary=read.entry.summary)
