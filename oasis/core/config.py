"""
Application configuration loaded from environment variables.

Uses pydantic-settings for type-safe env var parsing with automatic
.env file loading. Upstream endpoints, cooldowns and synthetic-mode flags
are all set from the environment.

To extend: add new fields here and document them in .env.example.
See https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ─── Core ──────────────────────────────────────────────────────
    environment: str = "development"
    debug: bool = False

    # ─── CORS ──────────────────────────────────────────────────────
    # Comma-separated allowed origins (map renderer + dashboards).
    cors_origins_str: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]

    # ─── Cache ─────────────────────────────────────────────────────
    # Merged result set is considered fresh for this long.
    cache_ttl_seconds: float = 180.0

    # ─── Orchestration ─────────────────────────────────────────────
    # Overall deadline for one adapter call inside an aggregation cycle.
    provider_timeout_seconds: float = 15.0
    # Per-request httpx timeout used by the adapters.
    http_timeout_seconds: float = 10.0
    # Max concurrent per-station requests for station-based providers.
    station_concurrency: int = 8

    # ─── Synthetic mode (per provider) ─────────────────────────────
    # When True the adapter fabricates readings from its station table
    # instead of calling upstream. Always True in tests.
    seismic_synthetic: bool = False
    thermal_synthetic: bool = True
    hydro_synthetic: bool = True
    soil_synthetic: bool = True

    # ─── Upstream endpoints ────────────────────────────────────────
    usgs_base_url: str = "https://earthquake.usgs.gov/fdsnws/event/1/query"
    nasa_power_base_url: str = "https://power.larc.nasa.gov/api/temporal/daily/point"
    soilgrids_base_url: str = "https://rest.isric.org/soilgrids/v2.0/properties/query"
    # Gauge feed returning a JSON list of water-level readings.
    # Leave empty to keep the hydrological provider synthetic.
    hydro_feed_url: str = ""

    # ─── Rate-limit cooldowns ──────────────────────────────────────
    # USGS is polled at most once per window; repeated fetches inside the
    # window are served from the adapter's last good result.
    seismic_cooldown_seconds: float = 600.0
    # Station-based providers (NASA POWER, SoilGrids) publish daily values
    # and SoilGrids allows only a handful of calls per minute.
    station_cooldown_seconds: float = 3600.0
    # Applied when an upstream answers 429 without a Retry-After header.
    rate_limit_backoff_seconds: float = 900.0

    # ─── Geo ───────────────────────────────────────────────────────
    # Margin (degrees) kept clear of the country border; 0.02 ≈ 2.2 km.
    border_buffer_deg: float = 0.02

    # ─── HTTP surface ──────────────────────────────────────────────
    refresh_rate_limit: str = "6/minute"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Don't fail on unknown env vars
    )


# Import this singleton rather than instantiating Settings()
settings = Settings()
