"""
pytest configuration and shared fixtures for the Oasis signal engine tests.

Key concern: tests must never reach a real upstream (USGS, NASA POWER,
SoilGrids, gauge feeds). We achieve this by:
  1. Forcing every provider into synthetic mode through env vars, set
     before anything imports oasis.core.config.
  2. Building engines from StubAdapter (tests/stubs.py) wherever a test
     needs to control exactly what the providers return.
  3. Overriding the get_engine dependency for route tests.
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient

# Set env vars BEFORE importing the app so Settings picks them up correctly
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SEISMIC_SYNTHETIC", "true")
os.environ.setdefault("THERMAL_SYNTHETIC", "true")
os.environ.setdefault("HYDRO_SYNTHETIC", "true")
os.environ.setdefault("SOIL_SYNTHETIC", "true")
os.environ.setdefault("REFRESH_RATE_LIMIT", "3/minute")

from stubs import FakeClock, StubAdapter, gauge, heat, quake  # noqa: E402


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def stub_adapters(clock):
    """One stub per provider kind with a small fixed data set."""
    return [
        StubAdapter("seismic", [quake()], clock=clock, cooldown_seconds=600),
        StubAdapter("thermal", [heat(), heat("nasa_1", lat=22.30, lng=91.80, temperature_c=43.0,
                                             station="Chittagong Port")], clock=clock),
        StubAdapter("hydrological", [gauge()], clock=clock),
        StubAdapter("soil", [], clock=clock),
    ]


@pytest.fixture()
def engine(stub_adapters, clock):
    from oasis.services.engine import SignalEngine

    return SignalEngine(stub_adapters, clock=clock, cache_ttl_seconds=180, provider_timeout_seconds=1.0)


@pytest.fixture()
async def client(engine):
    """
    HTTPX async test client wired to the FastAPI app, serving `engine`.

    Usage:
        async def test_something(client):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    from oasis.core.rate_limit import limiter
    from oasis.main import app
    from oasis.services.engine import get_engine

    limiter.reset()
    app.dependency_overrides[get_engine] = lambda: engine
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
