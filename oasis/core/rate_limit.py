"""
rate_limit.py — Global rate limiter instance.

Uses slowapi (a Starlette-compatible wrapper around the `limits` library).
Requests are keyed by client IP address. Only the manual refresh route is
limited; every read is served from the signal cache.

Usage in routes:
    from fastapi import Request
    from oasis.core.rate_limit import limiter

    @router.post("/refresh")
    @limiter.limit(settings.refresh_rate_limit)
    async def refresh_signals(request: Request):
        ...

Wired into the app in main.py (app.state.limiter + RateLimitExceeded handler).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
