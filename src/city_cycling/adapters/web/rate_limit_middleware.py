"""Per-IP rate limiting of the JSON API using throttled-py."""

import logging
import math
from collections.abc import Awaitable, Callable
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from throttled import RateLimiterType, Throttled, rate_limiter, store

logger = logging.getLogger(__name__)

API_PATH_PREFIX = "/api/"


def extract_client_ip(request: Request) -> str:
    """Identify the client by the first X-Forwarded-For address, else the peer address."""
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    client_ip = forwarded_for.split(",", 1)[0].strip()
    if client_ip:
        return client_ip
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def retry_after_seconds(result: Any) -> int:
    """Whole seconds a limited client should wait, rounded up and at least one."""
    return max(1, math.ceil(result.state.retry_after))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Token bucket per client IP over the ``/api/`` routes.

    Every API request may reach storage, so only those are counted. The map
    page and the health check are never limited. A limit of 0 disables the
    middleware entirely.
    """

    def __init__(self, app: Callable, requests_per_minute: int = 100) -> None:
        """Initialize rate limiting middleware.

        Args:
            app: The ASGI application to wrap.
            requests_per_minute: Requests allowed per IP per minute, 0 to disable.
        """
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self._throttle: Throttled | None = None
        if requests_per_minute > 0:
            self._throttle = Throttled(
                using=RateLimiterType.TOKEN_BUCKET.value,
                quota=rate_limiter.per_min(requests_per_minute, burst=requests_per_minute),
                store=store.MemoryStore(),
            )
            logger.info(f"API rate limit: {requests_per_minute} requests per minute per IP")
        else:
            logger.info("API rate limit disabled")

    @property
    def enabled(self) -> bool:
        """Whether requests are counted at all."""
        return self._throttle is not None

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Answer 429 once the client's bucket for the API is empty."""
        if self._throttle is None or not request.url.path.startswith(API_PATH_PREFIX):
            return await call_next(request)

        client_ip = extract_client_ip(request)
        result = self._throttle.limit(client_ip)
        if result.limited:
            retry_after = retry_after_seconds(result)
            logger.warning(f"Rate limit exceeded for {client_ip}, retry after {retry_after}s")
            return JSONResponse(
                {"error": "Rate limit exceeded. Please try again later."},
                status_code=429,
                headers={"Retry-After": str(retry_after)},
            )

        return await call_next(request)
