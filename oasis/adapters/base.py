"""
ProviderAdapter — shared fetch contract for every upstream provider.

Each concrete adapter implements `_fetch_live()` (real HTTP) and
`_fetch_synthetic()` (fabricated readings); `fetch()` picks one based on
the adapter's synthetic flag and wraps it with:

  • a cooldown window — inside it, the last good readings are served
    without touching upstream
  • error capture — httpx errors, non-2xx responses and bad payloads
    become typed ProviderErrors instead of exceptions
  • degraded fallback — on failure the last good readings (possibly [])
    are returned alongside the error

Expected upstream failures never escape fetch(), so the aggregator can treat
every adapter the same way.

Adapters are safe to share between concurrent aggregation cycles: the
cooldown and last-good state is guarded by the adapter's own asyncio.Lock,
so two cycles arriving together produce one upstream call.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, Optional

import httpx

from oasis.core.config import settings
from oasis.core.errors import (
    MalformedResponse,
    ProviderError,
    ProviderRateLimited,
    ProviderTimeout,
    ProviderUnavailable,
)
from oasis.adapters.stations import Station

logger = logging.getLogger(__name__)

USER_AGENT = "Oasis-Signal-Engine/0.1"


@dataclass
class FetchResult:
    """Outcome of one adapter call: readings plus an optional error."""

    provider: str
    records: list = field(default_factory=list)
    error: Optional[ProviderError] = None
    degraded: bool = False   # records are the last good set, not fresh data

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_retry_after(value: Optional[str], default: float) -> float:
    """Seconds from a Retry-After header; HTTP-date form falls back to default."""
    try:
        seconds = float(value) if value is not None else default
    except ValueError:
        return default
    return max(seconds, 0.0)


class ProviderAdapter:
    """Base class. Subclasses set `name` and `source` and implement the fetchers."""

    name: str = "provider"
    source: str = "Synthetic"

    def __init__(
        self,
        *,
        synthetic: bool = False,
        cooldown_seconds: float = 0.0,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.synthetic = synthetic
        self.cooldown_seconds = cooldown_seconds
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport
        self._clock = clock
        self._rng = rng or random.Random()

        self._lock = asyncio.Lock()
        self._last_good: list = []
        self._next_allowed_at = 0.0
        self._cooldown_error: Optional[ProviderError] = None

        self.last_error: Optional[ProviderError] = None
        self.last_success_at: Optional[datetime] = None

    # ── Public API ────────────────────────────────────────────────────────────

    async def fetch(self) -> FetchResult:
        async with self._lock:
            now = self._clock()
            if now < self._next_allowed_at:
                remaining = self._next_allowed_at - now
                logger.debug("%s in cooldown (%.0fs left), serving last good readings",
                             self.name, remaining)
                if self._cooldown_error is not None:
                    return self._degraded(self._cooldown_error)
                return FetchResult(self.name, list(self._last_good))

            try:
                if self.synthetic:
                    records = await self._fetch_synthetic()
                else:
                    records = await self._fetch_live()
            except ProviderRateLimited as exc:
                return self._rate_limited(exc, now)
            except ProviderError as exc:
                return self._degraded(exc)
            except httpx.HTTPStatusError as exc:
                code = exc.response.status_code
                if code == 429:
                    retry_after = parse_retry_after(
                        exc.response.headers.get("Retry-After"),
                        settings.rate_limit_backoff_seconds,
                    )
                    return self._rate_limited(
                        ProviderRateLimited(self.name, "HTTP 429 Too Many Requests", retry_after), now
                    )
                return self._degraded(ProviderUnavailable(self.name, f"HTTP {code}"))
            except httpx.TimeoutException as exc:
                return self._degraded(ProviderTimeout(self.name, f"request timed out: {exc}"))
            except httpx.HTTPError as exc:
                return self._degraded(ProviderUnavailable(self.name, f"request failed: {exc}"))
            except (ValueError, KeyError, TypeError, IndexError) as exc:
                # pydantic.ValidationError and json.JSONDecodeError are ValueErrors
                return self._degraded(MalformedResponse(self.name, f"unparseable payload: {exc}"))

            self._last_good = list(records)
            self._next_allowed_at = now + self.cooldown_seconds
            self._cooldown_error = None
            self.last_error = None
            self.last_success_at = datetime.now(tz=timezone.utc)
            logger.info("%s returned %d readings%s", self.name, len(records),
                        " (synthetic)" if self.synthetic else "")
            return FetchResult(self.name, list(records))

    @property
    def last_good(self) -> list:
        """Copy of the readings from the most recent successful fetch."""
        return list(self._last_good)

    def force_refresh(self) -> None:
        """
        Let the next fetch() hit upstream even inside the success cooldown.

        A rate-limit backoff requested by upstream is kept.
        """
        if self._cooldown_error is None:
            self._next_allowed_at = 0.0

    # ── Subclass hooks ────────────────────────────────────────────────────────

    async def _fetch_live(self) -> list:
        raise NotImplementedError

    async def _fetch_synthetic(self) -> list:
        raise NotImplementedError

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _degraded(self, error: ProviderError) -> FetchResult:
        self.last_error = error
        logger.warning("%s failed: %s (serving %d cached readings)",
                       self.name, error.message, len(self._last_good))
        return FetchResult(self.name, list(self._last_good), error, degraded=bool(self._last_good))

    def _rate_limited(self, error: ProviderRateLimited, now: float) -> FetchResult:
        self._next_allowed_at = max(self._next_allowed_at, now + error.retry_after)
        self._cooldown_error = error
        return self._degraded(error)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )

    @staticmethod
    async def _get_json(client: httpx.AsyncClient, url: str, params: Optional[dict] = None) -> Any:
        response = await client.get(url, params=params)
        response.raise_for_status()
        return response.json()

    async def _gather_stations(
        self,
        stations: Iterable[Station],
        fetch_one: Callable[[httpx.AsyncClient, Station], Awaitable[Optional[Any]]],
    ) -> list:
        """
        Query every station with bounded concurrency.

        Stations that error or return nothing usable are skipped. Raises when
        no station yields a reading: a 429 wins, then the first error seen,
        then MalformedResponse.
        """
        semaphore = asyncio.Semaphore(max(1, settings.station_concurrency))

        async def _one(client: httpx.AsyncClient, station: Station):
            async with semaphore:
                return await fetch_one(client, station)

        async with self._client() as client:
            results = await asyncio.gather(
                *(_one(client, s) for s in stations), return_exceptions=True
            )

        readings = []
        errors: list[BaseException] = []
        for result in results:
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                errors.append(result)
            elif result is not None:
                readings.append(result)

        for exc in errors:
            if isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code == 429:
                raise exc
        if errors:
            logger.debug("%s: %d station queries failed, first: %s", self.name, len(errors), errors[0])
        if not readings:
            if errors:
                raise errors[0]
            raise MalformedResponse(self.name, "no station returned a usable reading")
        return readings
