"""Upstream provider adapters."""

from typing import Optional

import httpx

from oasis.adapters.base import FetchResult, ProviderAdapter
from oasis.adapters.hydrological import HydrologicalAdapter
from oasis.adapters.seismic import SeismicAdapter
from oasis.adapters.soil import SoilAdapter
from oasis.adapters.thermal import ThermalAdapter
from oasis.core.config import Settings, settings as default_settings

__all__ = [
    "FetchResult",
    "HydrologicalAdapter",
    "ProviderAdapter",
    "SeismicAdapter",
    "SoilAdapter",
    "ThermalAdapter",
    "build_default_adapters",
]


def build_default_adapters(
    cfg: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> list[ProviderAdapter]:
    """One adapter per provider, configured from settings."""
    cfg = cfg or default_settings
    return [
        SeismicAdapter(
            base_url=cfg.usgs_base_url,
            synthetic=cfg.seismic_synthetic,
            cooldown_seconds=cfg.seismic_cooldown_seconds,
            timeout=cfg.http_timeout_seconds,
            transport=transport,
        ),
        ThermalAdapter(
            base_url=cfg.nasa_power_base_url,
            synthetic=cfg.thermal_synthetic,
            cooldown_seconds=cfg.station_cooldown_seconds,
            timeout=cfg.http_timeout_seconds,
            transport=transport,
        ),
        HydrologicalAdapter(
            feed_url=cfg.hydro_feed_url,
            # No feed configured → nothing live to read
            synthetic=cfg.hydro_synthetic or not cfg.hydro_feed_url,
            timeout=cfg.http_timeout_seconds,
            transport=transport,
        ),
        SoilAdapter(
            base_url=cfg.soilgrids_base_url,
            synthetic=cfg.soil_synthetic,
            cooldown_seconds=cfg.station_cooldown_seconds,
            timeout=cfg.http_timeout_seconds,
            transport=transport,
        ),
    ]
