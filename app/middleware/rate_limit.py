"""Per-client request rate limiting."""

import time
from collections import defaultdict
from typing import Dict, Tuple

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse


class TokenBucket:
    """Token bucket that refills ``capacity`` tokens every ``window_seconds``."""

    def __init__(self, capacity: float, window_seconds: float):
        self.capacity = capacity
        self.rate = capacity / window_seconds
        self.tokens = capacity
        self.last_update = time.monotonic()

    def consume(self, tokens: float = 1.0) -> bool:
        """Try to consume tokens. Returns True if successful."""
        now = time.monotonic()
        elapsed = now - self.last_update
        self.last_update = now

        self.tokens = min(self.capacity, self.tokens + elapsed * self.rate)

        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    @property
    def retry_after(self) -> float:
        """Seconds until a token is available."""
        if self.tokens >= 1:
            return 0
        return (1 - self.tokens) / self.rate


class RateLimiter:
    """One bucket per client key, ``limit`` requests per ``window_seconds``.

    Shared by the middleware so the limits can be changed (or the buckets
    emptied) after the app has been built.
    """

    def __init__(self, limit: int = 40, window_seconds: float = 60):
        self.limit = limit
        self.window_seconds = window_seconds
        self.buckets: Dict[str, TokenBucket] = defaultdict(
            lambda: TokenBucket(self.limit, self.window_seconds)
        )
        self._cleanup_interval = 300
        self._last_cleanup = time.monotonic()

    def check(self, key: str) -> Tuple[bool, TokenBucket]:
        self._cleanup_old_buckets()
        bucket = self.buckets[key]
        return bucket.consume(), bucket

    def reset(self) -> None:
        self.buckets.clear()
        self._last_cleanup = time.monotonic()

    def _cleanup_old_buckets(self) -> None:
        """Drop buckets unused for a whole window; they would be full again."""
        now = time.monotonic()
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now
        threshold = now - self.window_seconds
        stale = [key for key, bucket in self.buckets.items() if bucket.last_update < threshold]
        for key in stale:
            del self.buckets[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects clients that exceed the limiter with 429."""

    def __init__(self, app, limiter: RateLimiter, trust_proxy: bool = False):
        super().__init__(app)
        self.limiter = limiter
        self.trust_proxy = trust_proxy

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP from request."""
        # forwarded headers are client-controlled unless a proxy sets them
        if self.trust_proxy:
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                return forwarded.split(",")[0].strip()

            real_ip = request.headers.get("X-Real-IP")
            if real_ip:
                return real_ip

        return request.client.host if request.client else "unknown"

    async def dispatch(self, request: Request, call_next) -> Response:
        client_ip = self._get_client_ip(request)
        allowed, bucket = self.limiter.check(client_ip)
        if not allowed:
            print(f"  Rate limit hit for {client_ip} on {request.url.path}")
            return JSONResponse(
                status_code=429,
                content={"ok": False, "error": "Too many requests"},
                headers={"Retry-After": str(int(bucket.retry_after) + 1)},
            )

        response = await call_next(request)

        response.headers["X-RateLimit-Limit"] = str(int(self.limiter.limit))
        response.headers["X-RateLimit-Remaining"] = str(int(bucket.tokens))
        return response
