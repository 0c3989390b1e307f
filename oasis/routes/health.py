"""
Health check endpoint.

Used by:
  - Docker HEALTHCHECK instruction
  - Load balancers / orchestrators
  - Front-end map to check API connectivity

Returns status plus cache age and per-provider state, so callers can tell
"API down" apart from "API up but serving stale or fallback data".
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from oasis import __version__
from oasis.core.config import settings
from oasis.services.engine import SignalEngine, get_engine

logger = logging.getLogger(__name__)
router = APIRouter()


class HealthResponse(BaseModel):
    status: str  # Always "ok" if the API process is alive
    version: str
    environment: str
    cache_age_seconds: Optional[float]  # None until the first aggregation
    providers: dict[str, dict]


@router.get("", response_model=HealthResponse, summary="API health check")
async def health_check(engine: SignalEngine = Depends(get_engine)) -> HealthResponse:
    """
    Liveness of the API plus the state of the signal cache and providers.

    Never triggers an aggregation. The API is healthy (HTTP 200) even when
    every provider is failing; `providers` shows which ones are.
    """
    age = engine.cache.age_seconds()
    return HealthResponse(
        status="ok",
        version=__version__,
        environment=settings.environment,
        cache_age_seconds=round(age, 1) if age is not None else None,
        providers=engine.provider_status(),
    )
