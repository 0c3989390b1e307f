"""
aggregator.py — Fan out to every provider, merge what comes back.

One aggregation cycle:

  1. call every adapter concurrently, each under its own deadline
  2. wait for all of them to settle (asyncio.gather with
     return_exceptions=True; nothing is cancelled because a sibling failed)
  3. normalize each provider's readings and merge into one flat list,
     dropping duplicate ids (first occurrence wins)
  4. summarize the merged list

A provider that fails is logged and excluded. A provider that fails but
still hands back its last good readings contributes those. Only when
nothing at all comes back does the cycle substitute the fixed fallback
list, so callers always have something to render.
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from oasis.adapters.base import FetchResult, ProviderAdapter
from oasis.core.config import settings
from oasis.core.errors import AllProvidersFailed, ProviderError, ProviderTimeout, ProviderUnavailable
from oasis.models.signal import (
    KNOWN_SOURCES,
    SOURCE_SYNTHETIC,
    HydroReading,
    Severity,
    SignalKind,
    SignalPoint,
    Summary,
    ThermalReading,
)
from oasis.services.classifier import normalize_all

logger = logging.getLogger(__name__)


@dataclass
class AggregationResult:
    points: list[SignalPoint]
    summary: Summary
    errors: dict[str, ProviderError] = field(default_factory=dict)
    fallback_used: bool = False


# ── Summary ───────────────────────────────────────────────────────────────────

def summarize(points: Sequence[SignalPoint]) -> Summary:
    """
    Counts by severity, kind and source.

    Every severity and kind key is present even at zero; the four known
    source tags are zero-filled and any other tag is counted as seen.
    """
    by_severity = {s.value: 0 for s in Severity}
    by_kind = {k.value: 0 for k in SignalKind}
    by_source = {s: 0 for s in KNOWN_SOURCES}
    sources = Counter()

    for p in points:
        by_severity[p.severity.value] += 1
        by_kind[p.kind.value] += 1
        sources[p.source] += 1
    by_source.update(sources)

    return Summary(
        total=len(points),
        by_severity=by_severity,
        by_kind=by_kind,
        by_source=by_source,
    )


# ── Fallback ──────────────────────────────────────────────────────────────────

def fallback_points(now: Optional[datetime] = None) -> list[SignalPoint]:
    """The two fixed records served when every provider failed."""
    now = now or datetime.now(tz=timezone.utc)
    readings = [
        ThermalReading(
            upstream_id="fallback_1",
            lat=23.8103,
            lng=90.4125,
            station="Fallback data - Dhaka",
            temperature_c=37.5,
            observed_at=now,
            source=SOURCE_SYNTHETIC,
        ),
        HydroReading(
            upstream_id="fallback_2",
            lat=22.3475,
            lng=91.8123,
            station="Fallback data - Chittagong",
            water_level_m=5.2,
            observed_at=now,
            source=SOURCE_SYNTHETIC,
        ),
    ]
    return normalize_all(readings, now=now)


# ── Orchestrator ──────────────────────────────────────────────────────────────

class Aggregator:
    """Runs aggregation cycles over a fixed set of adapters."""

    def __init__(self, adapters: Iterable[ProviderAdapter], timeout: Optional[float] = None) -> None:
        self.adapters = list(adapters)
        self.timeout = timeout if timeout is not None else settings.provider_timeout_seconds

    async def _call(self, adapter: ProviderAdapter) -> FetchResult:
        """
        One adapter call under the deadline; always returns a FetchResult.

        A deadline miss or an escaped exception is handled like any other
        provider failure: the adapter's last good readings are served degraded.
        """
        try:
            return await asyncio.wait_for(adapter.fetch(), timeout=self.timeout)
        except asyncio.TimeoutError:
            error = ProviderTimeout(adapter.name, f"no response within {self.timeout:g}s")
        except Exception as exc:
            logger.exception("Adapter %s raised past its boundary", adapter.name)
            error = ProviderUnavailable(adapter.name, f"unexpected error: {exc}")
        adapter.last_error = error
        records = adapter.last_good
        return FetchResult(adapter.name, records, error, degraded=bool(records))

    async def aggregate(self) -> AggregationResult:
        results = await asyncio.gather(
            *(self._call(a) for a in self.adapters), return_exceptions=True
        )

        now = datetime.now(tz=timezone.utc)
        merged: list[SignalPoint] = []
        seen_ids: set[str] = set()
        errors: dict[str, ProviderError] = {}

        for adapter, result in zip(self.adapters, results):
            if isinstance(result, BaseException):
                # _call() already converts exceptions; only cancellation gets here
                if isinstance(result, asyncio.CancelledError):
                    raise result
                result = FetchResult(adapter.name, [], ProviderUnavailable(adapter.name, str(result)))

            if result.error is not None:
                errors[adapter.name] = result.error
                logger.warning("Provider %s failed this cycle: [%s] %s",
                               adapter.name, result.error.kind, result.error.message)

            for point in normalize_all(result.records, now=now):
                if point.id in seen_ids:
                    continue
                seen_ids.add(point.id)
                merged.append(point)

        fallback_used = False
        if self.adapters and len(errors) == len(self.adapters) and not merged:
            logger.error("%s; serving fallback records", AllProvidersFailed(errors))
            merged = fallback_points(now)
            fallback_used = True

        summary = summarize(merged)
        logger.info("Aggregated %d signal points (by kind: %s; failed providers: %s)",
                    summary.total, summary.by_kind, sorted(errors) or "none")
        return AggregationResult(points=merged, summary=summary, errors=errors,
                                 fallback_used=fallback_used)
