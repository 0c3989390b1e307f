"""
SoilAdapter — topsoil pH at fixed sample sites.

Live mode queries ISRIC SoilGrids for `phh2o` (pH in water, 0–5 cm, mean).
SoilGrids stores pH × 10, so the mapped value is divided by the layer's
d_factor. SoilGrids has no moisture or soil temperature, so those stay None
in live mode.

Synthetic mode varies each site's baseline pH by ±0.75 (clamped to 4–9)
and draws moisture (20–60 %) and soil temperature (25–40 °C).

Docs: https://rest.isric.org/soilgrids/v2.0/docs
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from oasis.adapters.base import ProviderAdapter
from oasis.adapters.stations import SOIL_STATIONS, Station
from oasis.core.config import settings
from oasis.models.signal import SOURCE_NASA, SoilReading

logger = logging.getLogger(__name__)

SOILGRIDS_PROPERTY = "phh2o"
SOILGRIDS_DEPTH = "0-5cm"


def soilgrids_ph(payload: dict[str, Any]) -> Optional[float]:
    """Mean topsoil pH from a SoilGrids properties/query response, or None."""
    for layer in payload["properties"]["layers"]:
        if layer.get("name") != SOILGRIDS_PROPERTY:
            continue
        d_factor = layer.get("unit_measure", {}).get("d_factor", 10) or 10
        for depth in layer.get("depths", []):
            if depth.get("label") != SOILGRIDS_DEPTH:
                continue
            mean = depth.get("values", {}).get("mean")
            return None if mean is None else mean / d_factor
    return None


class SoilAdapter(ProviderAdapter):
    name = "soil"
    source = SOURCE_NASA

    def __init__(self, base_url: str | None = None, stations=SOIL_STATIONS, **kwargs) -> None:
        kwargs.setdefault("cooldown_seconds", settings.station_cooldown_seconds)
        super().__init__(**kwargs)
        self.base_url = base_url or settings.soilgrids_base_url
        self.stations = tuple(stations)

    async def _fetch_station(self, client: httpx.AsyncClient, station: Station) -> Optional[SoilReading]:
        payload = await self._get_json(client, self.base_url, {
            "lon": station.lng,
            "lat": station.lat,
            "property": SOILGRIDS_PROPERTY,
            "depth": SOILGRIDS_DEPTH,
            "value": "mean",
        })
        ph = soilgrids_ph(payload)
        if ph is None:
            # Water bodies and urban cores are masked in SoilGrids
            return None
        return SoilReading(
            upstream_id=station.station_id,
            lat=station.lat,
            lng=station.lng,
            station=station.name,
            ph=round(ph, 2),
            source=self.source,
        )

    async def _fetch_live(self) -> list[SoilReading]:
        return await self._gather_stations(self.stations, self._fetch_station)

    async def _fetch_synthetic(self) -> list[SoilReading]:
        rng = self._rng
        now = datetime.now(tz=timezone.utc)
        readings = []
        for station in self.stations:
            ph = max(4.0, min(9.0, station.baseline + (rng.random() - 0.5) * 1.5))
            moisture = 20 + rng.random() * 40
            soil_temperature = 25 + rng.random() * 15
            readings.append(SoilReading(
                upstream_id=station.station_id,
                lat=station.lat + (rng.random() - 0.5) * 0.05,
                lng=station.lng + (rng.random() - 0.5) * 0.05,
                station=station.name,
                ph=round(ph, 2),
                moisture=round(moisture, 1),
                soil_temperature=round(soil_temperature, 1),
                observed_at=now,
                source=self.source,
            ))
        return readings
