"""
Error taxonomy for the signal engine.

Provider-level errors are values, not control flow: adapters return them
inside a FetchResult and the aggregator logs and drops the provider's
contribution for that cycle. Only InvalidBoundaryError is allowed to
escape: a malformed country polygon is a startup bug.
"""

from __future__ import annotations


class OasisError(Exception):
    """Base class for all engine errors."""


# ── Provider errors ───────────────────────────────────────────────────────────

class ProviderError(OasisError):
    """An upstream provider could not deliver usable data this cycle."""

    kind = "provider_error"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message

    def to_dict(self) -> dict:
        return {"provider": self.provider, "error": self.kind, "message": self.message}


class ProviderUnavailable(ProviderError):
    """Network / connection failure or non-2xx response."""

    kind = "unavailable"


class ProviderRateLimited(ProviderUnavailable):
    """Upstream signalled throttling (HTTP 429)."""

    kind = "rate_limited"

    def __init__(self, provider: str, message: str, retry_after: float) -> None:
        super().__init__(provider, message)
        self.retry_after = retry_after


class MalformedResponse(ProviderError):
    """Payload could not be parsed into provider records."""

    kind = "malformed_response"


class ProviderTimeout(ProviderError):
    """Provider did not settle within the aggregation deadline."""

    kind = "timeout"


class AllProvidersFailed(OasisError):
    """Every adapter failed in one aggregation cycle."""

    def __init__(self, errors: dict[str, ProviderError]) -> None:
        super().__init__(f"all {len(errors)} providers failed: {', '.join(sorted(errors))}")
        self.errors = errors


# ── Query / setup errors ──────────────────────────────────────────────────────

class InvalidRegionQuery(OasisError):
    """Region name is not in the configured region table."""

    def __init__(self, region: str) -> None:
        super().__init__(f"unknown region: {region!r}")
        self.region = region


class InvalidBoundaryError(OasisError):
    """Country boundary polygon is unusable."""
