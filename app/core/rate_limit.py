"""Per-IP sliding-window rate limiting for /api/v1.

AI-backed endpoints (analyze, generate, export) and the auth endpoints get
their own buckets; everything else under /api/v1/ shares one. State lives in
process memory, so limits are per worker.
"""

import logging
import time
from collections import defaultdict, deque
from typing import NamedTuple

from fastapi import Request
from fastapi.responses import JSONResponse

from app.core.errors import error_body

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/"
AI_ENDPOINTS = ("brands/analyze", "docs/generate", "export/google-docs")


class RateLimitConfig(NamedTuple):
    calls: int
    window: int  # seconds


AI_LIMIT = RateLimitConfig(calls=10, window=60)

RATE_LIMITS: dict[str, RateLimitConfig] = {
    API_PREFIX + "auth/login": RateLimitConfig(calls=10, window=60),
    API_PREFIX + "auth/register": RateLimitConfig(calls=3, window=60),
    API_PREFIX + "auth/refresh": RateLimitConfig(calls=10, window=60),
    **{API_PREFIX + endpoint: AI_LIMIT for endpoint in AI_ENDPOINTS},
    # Polling every 3s from a couple of tabs stays well under this.
    API_PREFIX: RateLimitConfig(calls=120, window=60),
}


class RateLimiter:
    """Timestamps of recent requests per key, oldest first."""

    def __init__(self):
        self._hits: defaultdict[str, deque[float]] = defaultdict(deque)

    def check(self, key: str, config: RateLimitConfig) -> tuple[bool, int]:
        """Return ``(allowed, remaining)`` counting the request being checked."""
        hits = self._hits[key]
        cutoff = time.monotonic() - config.window
        while hits and hits[0] <= cutoff:
            hits.popleft()
        used = len(hits)
        if used >= config.calls:
            return False, 0
        return True, config.calls - used - 1

    def record(self, key: str) -> None:
        self._hits[key].append(time.monotonic())

    def reset(self, key: str | None = None) -> None:
        if key is None:
            self._hits.clear()
        else:
            self._hits.pop(key, None)


_limiter = RateLimiter()


def get_rate_limiter() -> RateLimiter:
    return _limiter


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",", 1)[0].strip()
    return request.client.host if request.client else "unknown"


def _find_config(path: str) -> tuple[str, RateLimitConfig] | None:
    """Longest matching prefix of ``path`` and its limit."""
    matches = [prefix for prefix in RATE_LIMITS if path.startswith(prefix)]
    if not matches:
        return None
    prefix = max(matches, key=len)
    return prefix, RATE_LIMITS[prefix]


def _limit_headers(config: RateLimitConfig, remaining: int) -> dict[str, str]:
    return {"X-RateLimit-Limit": str(config.calls), "X-RateLimit-Remaining": str(remaining)}


async def rate_limit_middleware(request: Request, call_next):
    match = _find_config(request.url.path)
    if match is None:
        return await call_next(request)

    prefix, config = match
    ip = client_ip(request)
    key = f"{ip}:{prefix}"
    limiter = get_rate_limiter()

    allowed, remaining = limiter.check(key, config)
    if not allowed:
        logger.warning("Rate limit exceeded: %s on %s", ip, request.url.path)
        return JSONResponse(
            status_code=429,
            content=error_body("Too many requests. Please try again later."),
            headers={"Retry-After": str(config.window), **_limit_headers(config, 0)},
        )

    limiter.record(key)
    response = await call_next(request)
    response.headers.update(_limit_headers(config, remaining))
    return response
