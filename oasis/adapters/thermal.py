"""
ThermalAdapter — surface temperature at fixed heat-island stations.

Live mode queries the NASA POWER daily point API for T2M_MAX (daily maximum
temperature at 2 m) over the last week and keeps the newest day that is not
the fill value. Synthetic mode varies each station's baseline by ±3 °C.

Docs: https://power.larc.nasa.gov/docs/services/api/temporal/daily/
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import httpx

from oasis.adapters.base import ProviderAdapter
from oasis.adapters.stations import THERMAL_STATIONS, Station
from oasis.core.config import settings
from oasis.models.signal import SOURCE_NASA, ThermalReading

logger = logging.getLogger(__name__)

POWER_PARAMETER = "T2M_MAX"
POWER_FILL_VALUE = -999.0
LOOKBACK_DAYS = 7


def latest_power_value(payload: dict[str, Any]) -> Optional[tuple[datetime, float]]:
    """
    Newest (day, value) pair from a POWER daily response, or None.

    POWER keys daily values by "YYYYMMDD" and marks missing days with the
    header's fill_value (-999).
    """
    fill = payload.get("header", {}).get("fill_value", POWER_FILL_VALUE)
    series = payload["properties"]["parameter"][POWER_PARAMETER]
    for day in sorted(series, reverse=True):
        value = series[day]
        if value is None or value == fill:
            continue
        observed = datetime.strptime(day, "%Y%m%d").replace(tzinfo=timezone.utc)
        return observed, float(value)
    return None


class ThermalAdapter(ProviderAdapter):
    name = "thermal"
    source = SOURCE_NASA

    def __init__(self, base_url: str | None = None, stations=THERMAL_STATIONS, **kwargs) -> None:
        kwargs.setdefault("cooldown_seconds", settings.station_cooldown_seconds)
        super().__init__(**kwargs)
        self.base_url = base_url or settings.nasa_power_base_url
        self.stations = tuple(stations)

    async def _fetch_station(self, client: httpx.AsyncClient, station: Station) -> Optional[ThermalReading]:
        end = datetime.now(tz=timezone.utc).date()
        start = end - timedelta(days=LOOKBACK_DAYS)
        payload = await self._get_json(client, self.base_url, {
            "parameters": POWER_PARAMETER,
            "community": "RE",
            "latitude": station.lat,
            "longitude": station.lng,
            "start": start.strftime("%Y%m%d"),
            "end": end.strftime("%Y%m%d"),
            "format": "JSON",
        })
        latest = latest_power_value(payload)
        if latest is None:
            logger.debug("POWER returned no valid days for %s", station.name)
            return None
        observed_at, temperature = latest
        return ThermalReading(
            upstream_id=station.station_id,
            lat=station.lat,
            lng=station.lng,
            station=station.name,
            temperature_c=round(temperature, 1),
            observed_at=observed_at,
            source=self.source,
        )

    async def _fetch_live(self) -> list[ThermalReading]:
        return await self._gather_stations(self.stations, self._fetch_station)

    async def _fetch_synthetic(self) -> list[ThermalReading]:
        rng = self._rng
        now = datetime.now(tz=timezone.utc)
        readings = []
        for station in self.stations:
            temperature = station.baseline + (rng.random() - 0.5) * 6
            readings.append(ThermalReading(
                upstream_id=station.station_id,
                lat=station.lat + (rng.random() - 0.5) * 0.05,
                lng=station.lng + (rng.random() - 0.5) * 0.05,
                station=station.name,
                temperature_c=round(temperature, 1),
                observed_at=now,
                source=self.source,
            ))
        return readings
