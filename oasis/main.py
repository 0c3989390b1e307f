"""
Oasis Signal API — Application entry point.

Bootstraps FastAPI, wires up middleware, registers route groups,
and builds the SignalEngine once per process.

Run with:
    uvicorn oasis.main:app --reload

Extension points:
  - Add new route groups with app.include_router() below
  - Swap providers or the country boundary in build_engine() (services/engine.py)
  - Change startup behaviour in the lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from oasis import __version__
from oasis.core.config import settings
from oasis.core.rate_limit import limiter
from oasis.routes.health import router as health_router
from oasis.routes.signals import router as signals_router
from oasis.services.engine import build_engine, engine_holder

# ─── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ─── Lifespan ──────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the engine on startup, drop it on shutdown.

    A malformed country boundary raises InvalidBoundaryError here and
    aborts startup. The first aggregation happens lazily on the first read.
    """
    logger.info("Starting Oasis Signal API (env: %s)", settings.environment)
    engine_holder.engine = build_engine()
    modes = {a.name: "synthetic" if a.synthetic else "live" for a in engine_holder.engine.adapters}
    logger.info("Providers: %s", modes)
    yield
    logger.info("Shutting down Oasis Signal API")
    engine_holder.engine = None


# ─── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Oasis Signal API",
    description=(
        "Aggregated environmental signals (seismic, thermal, hydrological, soil) "
        "with severity classification and geospatial filters."
    ),
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
)


# ─── Rate limiting ─────────────────────────────────────────────────────────────
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ─── Middleware ─────────────────────────────────────────────────────────────────
# CORS: the map front-end and dashboards call the API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Routes ────────────────────────────────────────────────────────────────────
app.include_router(health_router, prefix="/health", tags=["health"])
app.include_router(signals_router)


@app.get("/", tags=["root"])
async def root():
    """API root — basic metadata."""
    return {
        "name": "Oasis Signal API",
        "version": __version__,
        "status": "running",
        "environment": settings.environment,
        "docs": "/docs",
        "signals": "/api/v1/signals",
    }
