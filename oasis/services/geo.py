"""
geo.py — Geospatial filters used to scope signal queries.

  • Bounding box      — O(1) inclusive lat/lng rectangle test
  • Named regions     — coarse box per division, approximate on purpose
  • Country boundary  — strict point-in-polygon with a border buffer
  • Haversine         — great-circle distance in km for radius queries

COUNTRY CONTAINMENT ORDER
─────────────────────────
RegionBoundary.contains() runs three checks, cheapest first:

  1. bounding-box rejection (no polygon math for far-away points)
  2. border buffer — any point closer than `buffer_deg` to an edge is out,
     which absorbs coordinate jitter around the true border
  3. ray casting over the ordered vertex list

Distances in steps 2–3 are planar, in degrees: the buffer is a degree
margin, not a metric one.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence

from oasis.core.errors import InvalidBoundaryError, InvalidRegionQuery
from oasis.models.signal import BoundingBox, SignalPoint

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

# Coarse division boxes. Not authoritative; good enough to scope a map view.
DEFAULT_REGIONS: dict[str, BoundingBox] = {
    "Dhaka":      BoundingBox(north=23.9, south=23.7, east=90.5, west=90.3),
    "Chittagong": BoundingBox(north=22.4, south=22.2, east=91.9, west=91.7),
    "Sylhet":     BoundingBox(north=25.0, south=24.7, east=92.0, west=91.8),
    "Rajshahi":   BoundingBox(north=24.4, south=24.2, east=88.7, west=88.5),
    "Khulna":     BoundingBox(north=22.9, south=22.7, east=89.6, west=89.5),
    "Barisal":    BoundingBox(north=22.8, south=22.6, east=90.4, west=90.3),
}

# Bangladesh outline as (lat, lng), clockwise from the north-west corner.
BANGLADESH_VERTICES: tuple[tuple[float, float], ...] = (
    (26.6332, 88.0844),
    (26.5751, 88.2793),
    (26.4467, 88.6947),
    (26.3258, 89.0332),
    (26.1023, 89.7035),
    (25.9612, 90.4907),
    (25.7483, 91.0117),
    (25.1470, 91.8359),
    (24.9755, 92.2754),
    (24.7456, 92.6729),
    (23.0833, 92.6674),
    (21.4272, 92.3035),
    (20.7397, 91.9629),
    (20.6708, 91.7960),
    (20.7397, 91.1683),
    (21.0168, 90.4907),
    (21.1843, 90.1471),
    (21.6489, 89.6865),
    (21.8908, 89.1877),
    (21.7015, 88.5912),
    (21.8365, 88.0844),
    (22.1547, 88.0117),
    (22.8759, 87.9844),
    (23.6850, 88.0000),
    (24.5879, 88.0844),
    (25.5469, 88.0844),
)


# ── Bounding box + named regions ──────────────────────────────────────────────

def filter_in_bounds(points: Iterable[SignalPoint], box: BoundingBox) -> list[SignalPoint]:
    return [p for p in points if box.contains(p.latitude, p.longitude)]


def resolve_region(
    name: str,
    regions: Mapping[str, BoundingBox] = DEFAULT_REGIONS,
    strict: bool = False,
) -> Optional[BoundingBox]:
    """
    Look up a region box by name.

    Case-insensitive. An exact name wins; otherwise the first region whose
    name appears inside the query matches, so "Chattogram (Chittagong)"
    resolves to Chittagong. Unknown names return None, or raise
    InvalidRegionQuery when strict=True.
    """
    query = (name or "").strip().lower()
    if query:
        for key, box in regions.items():
            if key.lower() == query:
                return box
        for key, box in regions.items():
            if key.lower() in query:
                return box
    if strict:
        raise InvalidRegionQuery(name)
    return None


def filter_by_region(
    points: Iterable[SignalPoint],
    name: str,
    regions: Mapping[str, BoundingBox] = DEFAULT_REGIONS,
) -> list[SignalPoint]:
    """Points inside the named region's box. Unknown region → empty list."""
    try:
        box = resolve_region(name, regions, strict=True)
    except InvalidRegionQuery as exc:
        logger.info("Region filter matched nothing: %s", exc)
        return []
    return filter_in_bounds(points, box)


# ── Polygon containment ───────────────────────────────────────────────────────

def _ray_cast(lat: float, lng: float, vertices: Sequence[tuple[float, float]]) -> bool:
    """Even-odd rule: cast a ray towards +lng and count edge crossings."""
    inside = False
    j = len(vertices) - 1
    for i in range(len(vertices)):
        yi, xi = vertices[i]
        yj, xj = vertices[j]
        if (yi > lat) != (yj > lat) and lng < (xj - xi) * (lat - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def _segment_distance(
    lat: float, lng: float, a: tuple[float, float], b: tuple[float, float]
) -> float:
    """Planar distance (degrees) from a point to segment a-b."""
    ay, ax = a
    by, bx = b
    dx, dy = bx - ax, by - ay
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return math.hypot(lng - ax, lat - ay)
    t = ((lng - ax) * dx + (lat - ay) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(lng - (ax + t * dx), lat - (ay + t * dy))


def _min_edge_distance(lat: float, lng: float, vertices: Sequence[tuple[float, float]]) -> float:
    return min(
        _segment_distance(lat, lng, vertices[i - 1], vertices[i])
        for i in range(len(vertices))
    )


@dataclass(frozen=True)
class RegionBoundary:
    """Immutable polygon plus its bounding box, for containment tests only."""

    name: str
    vertices: tuple[tuple[float, float], ...]
    box: BoundingBox

    @classmethod
    def from_vertices(cls, name: str, vertices: Iterable[tuple[float, float]]) -> "RegionBoundary":
        """
        Build a boundary from ordered (lat, lng) vertices.

        A closing vertex equal to the first one is dropped. Raises
        InvalidBoundaryError for fewer than three distinct vertices or any
        coordinate outside WGS-84 range.
        """
        verts = [(float(lat), float(lng)) for lat, lng in vertices]
        if len(verts) > 1 and verts[0] == verts[-1]:
            verts.pop()
        if len(verts) < 3:
            raise InvalidBoundaryError(f"{name}: polygon needs at least 3 vertices, got {len(verts)}")
        for lat, lng in verts:
            if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
                raise InvalidBoundaryError(f"{name}: vertex out of range ({lat}, {lng})")

        lats = [v[0] for v in verts]
        lngs = [v[1] for v in verts]
        box = BoundingBox(north=max(lats), south=min(lats), east=max(lngs), west=min(lngs))
        return cls(name=name, vertices=tuple(verts), box=box)

    def contains(self, lat: float, lng: float, buffer_deg: float = 0.0) -> bool:
        """Strict containment: box check, then border buffer, then ray cast."""
        if not self.box.contains(lat, lng):
            return False
        if buffer_deg > 0 and _min_edge_distance(lat, lng, self.vertices) < buffer_deg:
            return False
        return _ray_cast(lat, lng, self.vertices)


def default_boundary() -> RegionBoundary:
    return RegionBoundary.from_vertices("Bangladesh", BANGLADESH_VERTICES)


def filter_in_boundary(
    points: Iterable[SignalPoint], boundary: RegionBoundary, buffer_deg: float
) -> list[SignalPoint]:
    return [p for p in points if boundary.contains(p.latitude, p.longitude, buffer_deg)]


# ── Great-circle distance ─────────────────────────────────────────────────────

def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two WGS-84 points, in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(a)))


def within_radius(
    points: Iterable[SignalPoint], lat: float, lng: float, radius_km: float
) -> list[tuple[SignalPoint, float]]:
    """(point, distance_km) pairs within radius_km, nearest first."""
    hits = []
    for p in points:
        d = haversine_km(lat, lng, p.latitude, p.longitude)
        if d <= radius_km:
            hits.append((p, d))
    hits.sort(key=lambda pair: pair[1])
    return hits


def nearest(
    points: Iterable[SignalPoint], lat: float, lng: float, limit: int = 1
) -> list[tuple[SignalPoint, float]]:
    """The `limit` closest points regardless of distance."""
    ranked = sorted(
        ((p, haversine_km(lat, lng, p.latitude, p.longitude)) for p in points),
        key=lambda pair: pair[1],
    )
    return ranked[:limit]
