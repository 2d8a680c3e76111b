"""
Customer Details Backend — Rate Limiting Middleware
=====================================================

What:  Per-IP sliding window limits: one budget for the whole API and a
       much smaller one for the Login action.
Why:   The login budget slows down password guessing; the general budget
       protects the database from a single noisy client.
How:   Each window keeps a deque of request timestamps per IP; timestamps
       older than the window are dropped before counting.

Limits (from settings):
    general: RATE_LIMIT_REQUESTS per RATE_LIMIT_WINDOW seconds
    login:   LOGIN_RATE_LIMIT_REQUESTS per LOGIN_RATE_LIMIT_WINDOW seconds
             (login requests count against both)

Counters live in process memory: with several uvicorn workers each worker
enforces its own budget.
"""

import logging
import time
from collections import defaultdict, deque
from typing import Deque, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.config import settings
from app.exceptions import RateLimitExceededError
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class SlidingWindow:
    """Timestamps of recent requests per client key within `window` seconds."""

    def __init__(self, limit: int, window: int):
        self.limit = limit
        self.window = window
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)

    def _prune(self, key: str, now: float) -> Deque[float]:
        hits = self._hits[key]
        cutoff = now - self.window
        while hits and hits[0] <= cutoff:
            hits.popleft()
        return hits

    def retry_after(self, key: str, now: float) -> Optional[int]:
        """Seconds until `key` may retry, or None if it is under the limit."""
        hits = self._prune(key, now)
        if len(hits) < self.limit:
            return None
        return int(hits[0] + self.window - now) + 1

    def record(self, key: str, now: float) -> None:
        self._hits[key].append(now)

    def forget_idle(self, now: float) -> int:
        idle = [key for key in self._hits if not self._prune(key, now)]
        for key in idle:
            del self._hits[key]
        return len(idle)


def is_login_path(path: str) -> bool:
    return path.startswith("/api/User/") and path.rstrip("/").endswith("/Login")


class RateLimitMiddleware(BaseHTTPMiddleware):

    EXCLUDED_PATHS = {"/health", "/docs", "/openapi.json", "/redoc"}
    # Idle client entries are swept every this many requests
    CLEANUP_INTERVAL = 1000

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self.general = SlidingWindow(settings.rate_limit_requests, settings.rate_limit_window)
        self.login = SlidingWindow(settings.login_rate_limit_requests, settings.login_rate_limit_window)
        self._requests_seen = 0

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.EXCLUDED_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()

        windows = [("general", self.general)]
        if is_login_path(path):
            windows.append(("login", self.login))

        for name, window in windows:
            retry_after = window.retry_after(client_ip, now)
            if retry_after is not None:
                logger.warning(
                    "Rate limit (%s) exceeded for IP %s on %s: %d requests per %ds",
                    name,
                    client_ip,
                    path,
                    window.limit,
                    window.window,
                )
                # Middleware sits outside FastAPI's exception handlers,
                # so the 429 body is built here from the exception itself
                exc = RateLimitExceededError(retry_after=retry_after, context={"limit": name})
                return JSONResponse(
                    status_code=429,
                    content={
                        "error": "rate_limit_exceeded",
                        "message": exc.message,
                        "details": exc.context,
                        "request_id": request_id_var.get(""),
                    },
                    headers={"Retry-After": str(exc.retry_after)},
                )

        for _, window in windows:
            window.record(client_ip, now)

        self._requests_seen += 1
        if self._requests_seen % self.CLEANUP_INTERVAL == 0:
            removed = self.general.forget_idle(now) + self.login.forget_idle(now)
            if removed:
                logger.debug("Cleaned up %d idle rate-limit entries", removed)

        return await call_next(request)
