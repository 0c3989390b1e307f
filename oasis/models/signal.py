"""
signal.py — Pydantic models for the signal engine.

Three layers live here:

  • Provider readings — one model per kind (SeismicReading, ThermalReading,
    HydroReading, SoilReading). Each carries a literal `kind` tag so a list
    of mixed readings forms a discriminated union. Adapters emit these;
    only the classifier turns them into SignalPoints.

  • SignalPoint — the canonical, classified record served to consumers.

  • Response envelopes — what the HTTP routes return.

Coordinates are WGS-84 decimal degrees throughout. Readings are allowed to
carry out-of-range coordinates (upstream data is not trusted); the
classifier drops them before a SignalPoint is built.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class SignalKind(str, Enum):
    SEISMIC = "seismic"
    THERMAL = "thermal"
    HYDROLOGICAL = "hydrological"
    SOIL = "soil"


class Severity(str, Enum):
    """Ordered severity tier. Compare with `.rank`, not with `<` on the value."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}

# Provenance tags used in SignalPoint.source
SOURCE_USGS = "USGS"
SOURCE_NASA = "NASA"
SOURCE_NOAA = "NOAA"
SOURCE_SYNTHETIC = "Synthetic"
KNOWN_SOURCES = (SOURCE_USGS, SOURCE_NASA, SOURCE_NOAA, SOURCE_SYNTHETIC)


# ── Provider readings (tagged union) ──────────────────────────────────────────

class SeismicReading(BaseModel):
    """One earthquake from the seismic catalogue."""

    kind: Literal["seismic"] = "seismic"
    upstream_id: str
    lat: float
    lng: float
    magnitude: float
    depth: Optional[float] = None      # km
    place: str = "Unknown location"
    observed_at: Optional[datetime] = None
    significance: int = 0
    tsunami: int = 0
    felt: Optional[int] = None
    mag_type: str = "unknown"
    source: str = SOURCE_USGS


class ThermalReading(BaseModel):
    """Surface temperature at a monitoring station."""

    kind: Literal["thermal"] = "thermal"
    upstream_id: str
    lat: float
    lng: float
    station: str
    temperature_c: float
    observed_at: Optional[datetime] = None
    source: str = SOURCE_NASA


class HydroReading(BaseModel):
    """Water level at a river / coastal gauge."""

    kind: Literal["hydrological"] = "hydrological"
    upstream_id: str
    lat: float
    lng: float
    station: str
    water_level_m: float
    observed_at: Optional[datetime] = None
    source: str = SOURCE_NOAA


class SoilReading(BaseModel):
    """Topsoil chemistry sample."""

    kind: Literal["soil"] = "soil"
    upstream_id: str
    lat: float
    lng: float
    station: str
    ph: float
    moisture: Optional[float] = None           # volumetric %
    soil_temperature: Optional[float] = None   # °C
    observed_at: Optional[datetime] = None
    source: str = SOURCE_NASA


ProviderReading = Annotated[
    Union[SeismicReading, ThermalReading, HydroReading, SoilReading],
    Field(discriminator="kind"),
]


# ── Canonical record ──────────────────────────────────────────────────────────

class SignalExtra(BaseModel):
    """Kind-specific secondary measurements. Unused fields stay None."""

    depth:            Optional[float] = None   # seismic, km
    magnitude:        Optional[float] = None   # seismic
    significance:     Optional[int]   = None   # seismic, USGS "sig"
    tsunami:          Optional[int]   = None   # seismic, 0 | 1
    felt:             Optional[int]   = None   # seismic, DYFI reports
    mag_type:         Optional[str]   = None   # seismic
    ph:               Optional[float] = None   # soil
    moisture:         Optional[float] = None   # soil, %
    soil_temperature: Optional[float] = None   # soil, °C


class SignalPoint(BaseModel):
    """A normalized, classified environmental observation."""

    id: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    kind: SignalKind
    severity: Severity
    value: float
    description: str
    observed_at: datetime
    source: str
    extra: Optional[SignalExtra] = None


class NearbySignal(SignalPoint):
    """SignalPoint annotated with its distance from a query point."""

    distance_km: float


# ── Geometry ──────────────────────────────────────────────────────────────────

class BoundingBox(BaseModel):
    """Axis-aligned lat/lng rectangle. Does not cross the antimeridian."""

    north: float = Field(..., ge=-90, le=90)
    south: float = Field(..., ge=-90, le=90)
    east: float = Field(..., ge=-180, le=180)
    west: float = Field(..., ge=-180, le=180)

    @model_validator(mode="after")
    def _check_order(self) -> "BoundingBox":
        if self.south > self.north:
            raise ValueError("south must not exceed north")
        if self.west > self.east:
            raise ValueError("west must not exceed east")
        return self

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east


# ── Statistics + response envelopes ───────────────────────────────────────────

class Summary(BaseModel):
    """Counts over a list of SignalPoints."""

    total: int
    by_severity: dict[str, int]
    by_kind: dict[str, int]
    by_source: dict[str, int]


class SignalListResponse(BaseModel):
    """Envelope returned by GET /api/v1/signals and the filtered variants."""

    success: bool = True
    data: list[SignalPoint]
    count: int
    cached: bool
    timestamp: datetime
    summary: Optional[Summary] = None


class NearbyResponse(BaseModel):
    success: bool = True
    data: list[NearbySignal]
    count: int
    cached: bool
    timestamp: datetime


class RegionInfo(BaseModel):
    """A named region and the coarse box used to match it."""

    name: str
    box: BoundingBox
