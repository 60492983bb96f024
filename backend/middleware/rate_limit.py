"""Rate limiting middleware for the generation endpoints.

Every request to these paths costs a provider call, so clients are limited
per address with an in-memory sliding window. Limits are per process.
"""

import logging
import time
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from responses import ResponseCode, error_dict

logger = logging.getLogger(__name__)

BURST_WINDOW_SECONDS = 10

# Paths that call an LLM provider
RATE_LIMITED_PATHS = frozenset(
    {
        "/api/generate-response",
        "/api/generate-response-stream",
        "/api/suggestion",
        "/api/grade-response",
        "/api/analyze-intent",
        "/api/generate-from-direction",
        "/api/preview-prompt",
    }
)


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""

    requests_per_minute: int = 20
    requests_per_hour: int = 200
    burst_limit: int = 5


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    message: str | None
    headers: dict[str, str]


class RateLimiter:
    """In-memory sliding window limiter keyed by client address."""

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or RateLimitConfig()
        self._clock = clock
        self._requests: dict[str, list[float]] = defaultdict(list)

    @staticmethod
    def client_id(request: Request) -> str:
        """Address of the caller, honouring the first X-Forwarded-For hop."""
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"

    def _denied(self, message: str, limit: int, retry_after: int) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=False,
            message=message,
            headers={
                "X-RateLimit-Limit": str(limit),
                "X-RateLimit-Remaining": "0",
                "Retry-After": str(retry_after),
            },
        )

    def check(self, client_id: str) -> RateLimitDecision:
        """Check and, when allowed, record one request for ``client_id``."""
        now = self._clock()
        hour_ago = now - 3600
        requests = [ts for ts in self._requests[client_id] if ts > hour_ago]
        self._requests[client_id] = requests

        recent = sum(1 for ts in requests if ts > now - BURST_WINDOW_SECONDS)
        if recent >= self.config.burst_limit:
            return self._denied(
                "Too many requests. Please slow down.",
                self.config.burst_limit,
                BURST_WINDOW_SECONDS,
            )

        minute_requests = sum(1 for ts in requests if ts > now - 60)
        if minute_requests >= self.config.requests_per_minute:
            return self._denied(
                "Rate limit exceeded. Please wait a moment.",
                self.config.requests_per_minute,
                60,
            )

        if len(requests) >= self.config.requests_per_hour:
            return self._denied(
                "Hourly rate limit exceeded.", self.config.requests_per_hour, 3600
            )

        requests.append(now)
        return RateLimitDecision(
            allowed=True,
            message=None,
            headers={
                "X-RateLimit-Limit": str(self.config.requests_per_minute),
                "X-RateLimit-Remaining": str(
                    self.config.requests_per_minute - minute_requests - 1
                ),
            },
        )


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply rate limiting to the generation endpoints."""

    def __init__(self, app, config: RateLimitConfig | None = None) -> None:
        super().__init__(app)
        self.limiter = RateLimiter(config)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path not in RATE_LIMITED_PATHS:
            return await call_next(request)

        client_id = self.limiter.client_id(request)
        decision = self.limiter.check(client_id)

        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded for %s on %s", client_id, request.url.path
            )
            return JSONResponse(
                status_code=429,
                content=error_dict(ResponseCode.RATE_LIMITED, decision.message),
                headers=decision.headers,
            )

        response = await call_next(request)
        for key, value in decision.headers.items():
            response.headers[key] = value
        return response
