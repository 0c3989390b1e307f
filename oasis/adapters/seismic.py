"""
SeismicAdapter — earthquakes from the USGS FDSN event service.

Two queries per cycle, run concurrently:
  • regional — Bangladesh and its borders (Bay of Bengal, Nepal, Myanmar),
    M ≥ 2.0, limit 50
  • global   — significant events only, M ≥ 5.5, limit 30

Results are merged, de-duplicated by USGS event id and sorted by magnitude
(largest first). If one query fails the other is still used; if both fail
the adapter reports the failure.

USGS asks clients not to poll aggressively, so the adapter keeps a
cooldown (default 10 minutes) between upstream calls.

Docs: https://earthquake.usgs.gov/fdsnws/event/1/
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from oasis.adapters.base import ProviderAdapter
from oasis.adapters.stations import SEISMIC_ZONES
from oasis.core.config import settings
from oasis.core.errors import MalformedResponse
from oasis.models.signal import SOURCE_USGS, SeismicReading

logger = logging.getLogger(__name__)

LOOKBACK_DAYS = 7

REGIONAL_QUERY = {
    "minlatitude": 19.0,
    "maxlatitude": 27.0,
    "minlongitude": 87.0,
    "maxlongitude": 94.0,
    "minmagnitude": 2.0,
    "limit": 50,
}

GLOBAL_QUERY = {
    "minmagnitude": 5.5,
    "limit": 30,
}


def parse_feature(feature: dict[str, Any]) -> SeismicReading | None:
    """
    Convert one GeoJSON feature into a SeismicReading.

    Returns None for events without a magnitude (USGS publishes some
    before a magnitude is computed). Raises KeyError / TypeError / IndexError
    for structurally broken features.
    """
    props = feature["properties"]
    coords = feature["geometry"]["coordinates"]
    magnitude = props.get("mag")
    if magnitude is None:
        return None

    time_ms = props.get("time")
    observed_at = (
        datetime.fromtimestamp(time_ms / 1000, tz=timezone.utc) if time_ms is not None else None
    )
    return SeismicReading(
        upstream_id=str(feature["id"]),
        lat=coords[1],
        lng=coords[0],
        depth=coords[2] if len(coords) > 2 else None,
        magnitude=magnitude,
        place=props.get("place") or "Unknown location",
        observed_at=observed_at,
        significance=props.get("sig") or 0,
        tsunami=props.get("tsunami") or 0,
        felt=props.get("felt"),
        mag_type=props.get("magType") or "unknown",
    )


def parse_feature_collection(name: str, payload: Any) -> list[SeismicReading]:
    if not isinstance(payload, dict) or not isinstance(payload.get("features"), list):
        raise MalformedResponse(name, "expected a GeoJSON FeatureCollection")
    readings = []
    for feature in payload["features"]:
        reading = parse_feature(feature)
        if reading is not None:
            readings.append(reading)
    return readings


def merge_unique(*batches: list[SeismicReading]) -> list[SeismicReading]:
    """First occurrence of each upstream id wins; result sorted by magnitude desc."""
    seen: dict[str, SeismicReading] = {}
    for batch in batches:
        for reading in batch:
            seen.setdefault(reading.upstream_id, reading)
    return sorted(seen.values(), key=lambda r: r.magnitude, reverse=True)


class SeismicAdapter(ProviderAdapter):
    name = "seismic"
    source = SOURCE_USGS

    def __init__(self, base_url: str | None = None, **kwargs) -> None:
        kwargs.setdefault("cooldown_seconds", settings.seismic_cooldown_seconds)
        super().__init__(**kwargs)
        self.base_url = base_url or settings.usgs_base_url

    def _params(self, query: dict[str, Any]) -> dict[str, Any]:
        start = datetime.now(tz=timezone.utc) - timedelta(days=LOOKBACK_DAYS)
        return {"format": "geojson", "starttime": start.date().isoformat(), **query}

    async def _query(self, client, query: dict[str, Any]) -> list[SeismicReading]:
        payload = await self._get_json(client, self.base_url, self._params(query))
        return parse_feature_collection(self.name, payload)

    async def _fetch_live(self) -> list[SeismicReading]:
        async with self._client() as client:
            regional, global_ = await asyncio.gather(
                self._query(client, REGIONAL_QUERY),
                self._query(client, GLOBAL_QUERY),
                return_exceptions=True,
            )

        batches = []
        for label, result in (("regional", regional), ("global", global_)):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.warning("USGS %s query failed: %s", label, result)
            else:
                batches.append(result)

        if not batches:
            # Both failed; fetch() classifies the regional error
            raise regional
        return merge_unique(*batches)

    async def _fetch_synthetic(self) -> list[SeismicReading]:
        rng = self._rng
        now = datetime.now(tz=timezone.utc)
        readings = []
        for zone in SEISMIC_ZONES:
            magnitude = round(2.5 + rng.random() * 5.0, 1)
            readings.append(SeismicReading(
                upstream_id=zone.station_id,
                lat=round(zone.lat + (rng.random() - 0.5) * 0.2, 4),
                lng=round(zone.lng + (rng.random() - 0.5) * 0.2, 4),
                magnitude=magnitude,
                depth=round(10 + rng.random() * 30, 1),
                place=zone.name,
                observed_at=now - timedelta(days=rng.randint(1, 30)),
                source=self.source,
            ))
        return merge_unique(readings)
