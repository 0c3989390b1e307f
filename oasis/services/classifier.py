"""
classifier.py — Normalize provider readings into classified SignalPoints.

Pure functions, no I/O. The same reading always produces the same
SignalPoint; the only exception is a reading with no observation time,
which is stamped with `now` (current UTC time unless the caller passes one).

USAGE
─────
    from oasis.models.signal import SeismicReading
    from oasis.services.classifier import normalize

    point = normalize(SeismicReading(upstream_id="us7000abcd", lat=23.81,
                                     lng=90.41, magnitude=7.2))
    # point.id        → "seismic_us7000abcd"
    # point.severity  → Severity.CRITICAL

THRESHOLDS
──────────
Each tier's lower bound is inclusive, so a value sitting exactly on a
boundary lands in the higher tier (magnitude 7.0 → critical, 6.9 → high).

Soil pH is classified by distance from neutral on both sides. Each tail's
bound belongs to the more severe tier: the alkaline tail checks `>=` and the
acid tail checks `<=`, which puts 5.5 → critical, 5.6 → high, 8.5 → critical,
8.4 → high. Low is the open band between 6.5 and 7.5.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, Optional

from oasis.models.signal import (
    HydroReading,
    SeismicReading,
    Severity,
    SignalExtra,
    SignalKind,
    SignalPoint,
    SoilReading,
    ThermalReading,
)

logger = logging.getLogger(__name__)

# ── Thresholds (descending; first match wins) ─────────────────────────────────

_THRESHOLDS: dict[SignalKind, list[tuple[float, Severity]]] = {
    SignalKind.SEISMIC: [
        (7.0, Severity.CRITICAL),
        (6.0, Severity.HIGH),
        (4.0, Severity.MEDIUM),
    ],
    SignalKind.THERMAL: [
        (42.0, Severity.CRITICAL),
        (39.0, Severity.HIGH),
        (36.0, Severity.MEDIUM),
    ],
    SignalKind.HYDROLOGICAL: [
        (8.0, Severity.CRITICAL),
        (6.5, Severity.HIGH),
        (4.5, Severity.MEDIUM),
    ],
}

# Soil pH: alkaline tail checked with >=, acid tail with <=
_SOIL_ALKALINE = [
    (8.5, Severity.CRITICAL),
    (8.0, Severity.HIGH),
    (7.5, Severity.MEDIUM),
]
_SOIL_ACID = [
    (5.5, Severity.CRITICAL),
    (6.0, Severity.HIGH),
    (6.5, Severity.MEDIUM),
]

_ID_PREFIX = {
    SignalKind.SEISMIC: "seismic",
    SignalKind.THERMAL: "thermal",
    SignalKind.HYDROLOGICAL: "hydro",
    SignalKind.SOIL: "soil",
}


# ── Classification ────────────────────────────────────────────────────────────

def _soil_severity(ph: float) -> Severity:
    alkaline = next((sev for bound, sev in _SOIL_ALKALINE if ph >= bound), Severity.LOW)
    acid     = next((sev for bound, sev in _SOIL_ACID     if ph <= bound), Severity.LOW)
    return alkaline if alkaline.rank >= acid.rank else acid


def classify(kind: SignalKind, value: float) -> Severity:
    """
    Map a (kind, value) pair to its severity tier.

    Deterministic: the tier depends on nothing but the two arguments.
    """
    kind = SignalKind(kind)
    if kind is SignalKind.SOIL:
        return _soil_severity(value)
    for threshold, severity in _THRESHOLDS[kind]:
        if value >= threshold:
            return severity
    return Severity.LOW


# ── Normalization ─────────────────────────────────────────────────────────────

def make_id(kind: SignalKind, upstream_id: str) -> str:
    """Stable canonical id: the same upstream id always maps to the same id."""
    return f"{_ID_PREFIX[SignalKind(kind)]}_{upstream_id}"


def _valid_coordinates(lat: float, lng: float) -> bool:
    return (
        math.isfinite(lat) and math.isfinite(lng)
        and -90.0 <= lat <= 90.0
        and -180.0 <= lng <= 180.0
    )


def _from_seismic(r: SeismicReading) -> tuple[SignalKind, float, str, SignalExtra]:
    description = f"{r.place} - Magnitude {r.magnitude} earthquake"
    extra = SignalExtra(
        depth=r.depth,
        magnitude=r.magnitude,
        significance=r.significance,
        tsunami=r.tsunami,
        felt=r.felt,
        mag_type=r.mag_type,
    )
    return SignalKind.SEISMIC, r.magnitude, description, extra


def _from_thermal(r: ThermalReading) -> tuple[SignalKind, float, str, None]:
    description = f"{r.station}: {r.temperature_c:.1f}°C surface temperature"
    return SignalKind.THERMAL, r.temperature_c, description, None


def _from_hydro(r: HydroReading) -> tuple[SignalKind, float, str, None]:
    description = f"Flood monitoring at {r.station} - {r.water_level_m:.1f}m water level"
    return SignalKind.HYDROLOGICAL, r.water_level_m, description, None


def _from_soil(r: SoilReading) -> tuple[SignalKind, float, str, SignalExtra]:
    description = f"{r.station}: pH {r.ph:.2f}"
    if r.moisture is not None:
        description += f", {r.moisture:.1f}% moisture"
    extra = SignalExtra(ph=r.ph, moisture=r.moisture, soil_temperature=r.soil_temperature)
    return SignalKind.SOIL, r.ph, description, extra


_CONVERTERS = {
    SeismicReading: _from_seismic,
    ThermalReading: _from_thermal,
    HydroReading:   _from_hydro,
    SoilReading:    _from_soil,
}


def normalize(reading, now: Optional[datetime] = None) -> Optional[SignalPoint]:
    """
    Convert one provider reading into a classified SignalPoint.

    Returns None when the reading cannot be stored: coordinates outside
    WGS-84 range or a non-finite measurement value.
    Raises TypeError for an object that is not a provider reading.
    """
    converter = _CONVERTERS.get(type(reading))
    if converter is None:
        raise TypeError(f"not a provider reading: {type(reading).__name__}")

    if not _valid_coordinates(reading.lat, reading.lng):
        logger.debug("Dropping %s reading %s: coordinates out of range (%s, %s)",
                     reading.kind, reading.upstream_id, reading.lat, reading.lng)
        return None

    kind, value, description, extra = converter(reading)
    if not math.isfinite(value):
        logger.debug("Dropping %s reading %s: non-finite value", kind.value, reading.upstream_id)
        return None

    observed_at = reading.observed_at or now or datetime.now(tz=timezone.utc)

    return SignalPoint(
        id=make_id(kind, reading.upstream_id),
        latitude=reading.lat,
        longitude=reading.lng,
        kind=kind,
        severity=classify(kind, value),
        value=value,
        description=description,
        observed_at=observed_at,
        source=reading.source,
        extra=extra,
    )


def normalize_all(readings: Iterable, now: Optional[datetime] = None) -> list[SignalPoint]:
    """Normalize a batch, dropping readings that fail validation."""
    stamp = now or datetime.now(tz=timezone.utc)
    points = []
    for reading in readings:
        point = normalize(reading, now=stamp)
        if point is not None:
            points.append(point)
    return points
