"""
Vibe Backend — Rate Limiting Middleware
========================================

What:  Per-IP sliding window limiter in front of the whole API.
How:   Keeps a deque of request timestamps per client IP. Timestamps older
       than `rate_limit_window` seconds are dropped on each request; once
       `rate_limit_requests` remain the request is rejected with 429 and a
       Retry-After header.

State is process-local, so each uvicorn worker enforces its own budget.
Health and API documentation paths are never limited.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from vibe.config import settings
from vibe.exceptions import RateLimitExceededError
from vibe.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

EXCLUDED_PATHS = frozenset({"/health", "/swagger", "/openapi.json", "/redoc"})

# Sweep idle IPs once this many distinct clients are tracked.
_SWEEP_THRESHOLD = 1000


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window_seconds = window_seconds or settings.rate_limit_window
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in EXCLUDED_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()
        window_start = now - self.window_seconds

        hits = self._hits[client_ip]
        while hits and hits[0] <= window_start:
            hits.popleft()

        if len(hits) >= self.max_requests:
            retry_after = int(hits[0] + self.window_seconds - now) + 1
            logger.warning(
                "Rate limit exceeded for %s: %d requests in %ds",
                client_ip,
                len(hits),
                self.window_seconds,
            )
            return self._reject(RateLimitExceededError(retry_after=retry_after))

        hits.append(now)

        if len(self._hits) > _SWEEP_THRESHOLD:
            self._sweep(window_start)

        return await call_next(request)

    def _reject(self, exc: RateLimitExceededError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.error_code,
                "message": exc.message,
                "details": exc.context,
                "request_id": request_id_var.get(""),
            },
            headers={"Retry-After": str(exc.retry_after)},
        )

    def _sweep(self, window_start: float) -> None:
        """Forget clients whose newest request fell out of the window."""
        idle = [ip for ip, hits in self._hits.items() if not hits or hits[-1] <= window_start]
        for ip in idle:
            del self._hits[ip]
        if idle:
            logger.debug("Dropped rate limit state for %d idle clients", len(idle))
