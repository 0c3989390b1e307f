"""
cache.py — TTL cache over the aggregated signal list.

States
──────
    Empty ──get()──▶ Fresh ──ttl elapses──▶ Stale ──get()──▶ Fresh
      ▲                                                        │
      └──────────────────────── clear() ◀──────────────────────┘

A Fresh read returns the stored entry without touching the loader. A read
in Empty or Stale starts a refresh. At most one refresh runs at a time:
callers that arrive while it is in flight await the same task instead of
starting their own (single-flight).

The entry is replaced whole, and only after the loader succeeds. If the
loader raises, the previous entry stays where it was (still stale) and every
caller waiting on that refresh sees the exception.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from oasis.core.config import settings
from oasis.services.aggregator import AggregationResult

logger = logging.getLogger(__name__)

Loader = Callable[[], Awaitable[AggregationResult]]


@dataclass(frozen=True)
class CacheEntry:
    result: AggregationResult
    captured_at: float        # cache clock reading
    timestamp: datetime       # wall-clock time of capture (UTC)

    @property
    def points(self):
        return self.result.points

    @property
    def summary(self):
        return self.result.summary


@dataclass(frozen=True)
class CacheRead:
    entry: CacheEntry
    cached: bool              # True when served without a refresh


class SignalCache:
    def __init__(
        self,
        loader: Loader,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds
        self._clock = clock
        self._lock = asyncio.Lock()
        self._entry: Optional[CacheEntry] = None
        self._inflight: Optional[asyncio.Task] = None

    @property
    def entry(self) -> Optional[CacheEntry]:
        return self._entry

    def is_fresh(self) -> bool:
        age = self.age_seconds()
        return age is not None and age < self.ttl_seconds

    def age_seconds(self) -> Optional[float]:
        if self._entry is None:
            return None
        return max(0.0, self._clock() - self._entry.captured_at)

    async def get(self) -> CacheRead:
        async with self._lock:
            if self.is_fresh():
                return CacheRead(self._entry, cached=True)
            task = self._ensure_refresh()
        return CacheRead(await asyncio.shield(task), cached=False)

    async def force_refresh(self) -> CacheRead:
        """Refresh regardless of freshness; joins a refresh already in flight."""
        async with self._lock:
            task = self._ensure_refresh()
        return CacheRead(await asyncio.shield(task), cached=False)

    def clear(self) -> None:
        self._entry = None

    # ── Internals ─────────────────────────────────────────────────────────────

    def _ensure_refresh(self) -> asyncio.Task:
        # Caller holds self._lock
        if self._inflight is None:
            self._inflight = asyncio.create_task(self._refresh())
            self._inflight.add_done_callback(self._retrieve_exception)
        return self._inflight

    async def _refresh(self) -> CacheEntry:
        try:
            result = await self._loader()
            entry = CacheEntry(
                result=result,
                captured_at=self._clock(),
                timestamp=datetime.now(tz=timezone.utc),
            )
            self._entry = entry
            logger.debug("Cache refreshed with %d points", len(result.points))
            return entry
        except Exception:
            logger.exception("Cache refresh failed; keeping previous entry")
            raise
        finally:
            self._inflight = None

    @staticmethod
    def _retrieve_exception(task: asyncio.Task) -> None:
        # Every waiter may have been cancelled; mark the exception as seen
        if not task.cancelled():
            task.exception()
