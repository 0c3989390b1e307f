"""
test_signals_routes.py — HTTP surface under /api/v1/signals.

The `client` fixture (conftest.py) serves an engine built from stub
providers, so every response here is deterministic.

Run:
    pytest tests/test_signals_routes.py -v
"""

from unittest.mock import patch

import pytest

from oasis.core.errors import ProviderUnavailable
from oasis.services.engine import SignalEngine

from stubs import StubAdapter


class TestListSignals:

    async def test_returns_200_with_envelope(self, client):
        r = await client.get("/api/v1/signals")
        assert r.status_code == 200
        data = r.json()
        for key in ("success", "data", "count", "cached", "timestamp", "summary"):
            assert key in data
        assert data["success"] is True
        assert data["count"] == len(data["data"]) == 4

    async def test_point_has_required_fields(self, client):
        point = (await client.get("/api/v1/signals")).json()["data"][0]
        for field in ("id", "latitude", "longitude", "kind", "severity", "value",
                      "description", "observed_at", "source"):
            assert field in point

    async def test_second_call_is_cached(self, client):
        first = (await client.get("/api/v1/signals")).json()
        second = (await client.get("/api/v1/signals")).json()
        assert first["cached"] is False
        assert second["cached"] is True
        assert first["timestamp"] == second["timestamp"]

    async def test_refresh_param_bypasses_cache(self, client):
        await client.get("/api/v1/signals")
        data = (await client.get("/api/v1/signals?refresh=true")).json()
        assert data["cached"] is False

    async def test_kind_filter(self, client):
        data = (await client.get("/api/v1/signals?kind=thermal")).json()
        assert data["count"] == 2
        assert all(p["kind"] == "thermal" for p in data["data"])
        assert data["summary"]["by_kind"]["thermal"] == 2
        assert data["summary"]["by_kind"]["seismic"] == 0

    async def test_unknown_kind_is_422(self, client):
        r = await client.get("/api/v1/signals?kind=volcanic")
        assert r.status_code == 422

    async def test_region_filter(self, client):
        data = (await client.get("/api/v1/signals?region=Dhaka")).json()
        assert {p["id"] for p in data["data"]} == {"seismic_us7000abcd", "thermal_nasa_0"}

    async def test_unknown_region_is_empty_not_error(self, client):
        r = await client.get("/api/v1/signals?region=Atlantis")
        assert r.status_code == 200
        assert r.json()["data"] == []

    async def test_all_providers_down_serves_fallback(self, clock):
        from httpx import ASGITransport, AsyncClient

        from oasis.main import app
        from oasis.services.engine import get_engine

        adapters = [StubAdapter(n, exc=ProviderUnavailable(n, "down"), clock=clock)
                    for n in ("seismic", "thermal", "hydrological", "soil")]
        engine = SignalEngine(adapters, clock=clock)
        app.dependency_overrides[get_engine] = lambda: engine
        try:
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
                r = await ac.get("/api/v1/signals")
        finally:
            app.dependency_overrides.clear()
        assert r.status_code == 200
        data = r.json()
        assert data["count"] == 2
        assert data["summary"]["by_source"]["Synthetic"] == 2


class TestSpatialRoutes:

    async def test_bounds(self, client):
        r = await client.get("/api/v1/signals/bounds?north=23&south=22&east=92&west=91")
        assert r.status_code == 200
        assert {p["id"] for p in r.json()["data"]} == {"thermal_nasa_1", "hydro_gauge_0"}

    async def test_bounds_south_above_north_is_422(self, client):
        r = await client.get("/api/v1/signals/bounds?north=22&south=23&east=92&west=91")
        assert r.status_code == 422

    async def test_bounds_out_of_range_is_422(self, client):
        r = await client.get("/api/v1/signals/bounds?north=95&south=23&east=92&west=91")
        assert r.status_code == 422

    async def test_bounds_missing_param_is_422(self, client):
        r = await client.get("/api/v1/signals/bounds?north=23&south=22")
        assert r.status_code == 422

    async def test_country(self, client):
        data = (await client.get("/api/v1/signals/country")).json()
        assert data["count"] == 4

    async def test_nearby(self, client):
        r = await client.get("/api/v1/signals/nearby?lat=23.8103&lng=90.4125&radius_km=15")
        assert r.status_code == 200
        data = r.json()
        assert [p["id"] for p in data["data"]] == ["seismic_us7000abcd", "thermal_nasa_0"]
        assert all("distance_km" in p for p in data["data"])

    async def test_nearby_rejects_zero_radius(self, client):
        r = await client.get("/api/v1/signals/nearby?lat=23.8&lng=90.4&radius_km=0")
        assert r.status_code == 422

    async def test_nearest(self, client):
        data = (await client.get("/api/v1/signals/nearest?lat=22.3475&lng=91.8123&limit=1")).json()
        assert data["count"] == 1
        assert data["data"][0]["id"] == "hydro_gauge_0"

    @pytest.mark.parametrize("path", [
        "/api/v1/signals/nearby?lat=23.81&lng=90.41&radius_km=50",
        "/api/v1/signals/nearest?lat=23.81&lng=90.41",
        "/api/v1/signals/alerts",
        "/api/v1/signals/bounds?north=24&south=22&east=92&west=90",
    ])
    async def test_one_cache_read_per_request(self, client, engine, path):
        await client.get("/api/v1/signals")
        with patch.object(engine.cache, "get", wraps=engine.cache.get) as cache_get:
            r = await client.get(path)
        assert r.status_code == 200
        assert r.json()["cached"] is True
        assert cache_get.await_count == 1


class TestAlertsStatsRegions:

    async def test_alerts_default_high(self, client):
        data = (await client.get("/api/v1/signals/alerts")).json()
        assert {p["severity"] for p in data["data"]} == {"critical"}
        assert data["count"] == 2

    async def test_alerts_medium_floor(self, client):
        data = (await client.get("/api/v1/signals/alerts?min_severity=medium")).json()
        assert data["count"] == 4
        assert data["data"][0]["severity"] == "critical"
        assert data["data"][-1]["severity"] == "medium"

    async def test_stats(self, client):
        data = (await client.get("/api/v1/signals/stats")).json()
        assert data["total"] == 4
        assert data["by_severity"] == {"low": 0, "medium": 2, "high": 0, "critical": 2}
        assert data["by_source"]["NOAA"] == 1

    async def test_regions(self, client):
        regions = (await client.get("/api/v1/signals/regions")).json()
        names = [r["name"] for r in regions]
        assert "Dhaka" in names and "Chittagong" in names
        dhaka = next(r for r in regions if r["name"] == "Dhaka")
        assert dhaka["box"] == {"north": 23.9, "south": 23.7, "east": 90.5, "west": 90.3}


class TestRefreshRoute:

    async def test_refresh_returns_fresh_list(self, client, stub_adapters):
        await client.get("/api/v1/signals")
        r = await client.post("/api/v1/signals/refresh")
        assert r.status_code == 200
        assert r.json()["cached"] is False
        assert stub_adapters[0].calls == 2

    async def test_refresh_is_rate_limited(self, client):
        # REFRESH_RATE_LIMIT is 3/minute under test (conftest.py)
        statuses = [(await client.post("/api/v1/signals/refresh")).status_code for _ in range(4)]
        assert statuses[:3] == [200, 200, 200]
        assert statuses[3] == 429
