"""
In-memory token bucket rate limiting, per client and path.
"""
import math
import time
from collections import defaultdict
from typing import Dict, Optional, Tuple
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

EXEMPT_PATHS = ("/healthz", "/readyz", "/metrics")


class TokenBucket:
    """Refills continuously at refill_rate tokens/second, up to burst."""

    def __init__(self, refill_rate: float, burst: int):
        self.refill_rate = refill_rate
        self.burst = burst
        self.tokens = float(burst)
        self.updated = time.monotonic()

    def _refill(self) -> None:
        now = time.monotonic()
        self.tokens = min(self.burst, self.tokens + (now - self.updated) * self.refill_rate)
        self.updated = now

    def consume(self, tokens: int = 1) -> bool:
        self._refill()
        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def retry_after(self) -> int:
        """Seconds until one token is available."""
        missing = max(0.0, 1 - self.tokens)
        return max(1, math.ceil(missing / self.refill_rate)) if self.refill_rate > 0 else 60


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rejects with 429 once a (client ip, path) bucket is empty."""

    def __init__(self, app, capacity: int = 60, burst: Optional[int] = None):
        super().__init__(app)
        self.capacity = capacity
        burst = burst if burst is not None else capacity
        refill_rate = capacity / 60.0
        self.buckets: Dict[Tuple[str, str], TokenBucket] = defaultdict(
            lambda: TokenBucket(refill_rate, burst)
        )

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        bucket = self.buckets[(client_ip, path)]
        if not bucket.consume():
            return JSONResponse(
                status_code=429,
                headers={"Retry-After": str(bucket.retry_after())},
                content={
                    "ok": False,
                    "error": {
                        "code": "rate_limited",
                        "message": f"Rate limit exceeded. Max {self.capacity} requests per minute.",
                    },
                },
            )

        return await call_next(request)
