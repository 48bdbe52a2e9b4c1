"""
HTTP middleware: rate limiting, security headers and access logging
"""
import math
import time
from threading import Lock
from typing import Callable, Dict, Tuple

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from drivehub.core.logging_config import get_logger

logger = get_logger(__name__)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Global request ceiling per client IP using a fixed time window.

    Counters live in process memory, so the limit applies per worker
    process and resets on restart. Expired windows are pruned at most once
    per window length, which bounds the map to the clients seen in the last
    two windows.
    """

    def __init__(self, app, max_requests: int = 150, window_seconds: int = 60):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        # ip -> (window start, request count)
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._last_prune = 0.0
        self._lock = Lock()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        client_ip = request.client.host if request.client else "unknown"
        allowed, remaining, retry_after = self._hit(client_ip, time.monotonic())

        if not allowed:
            logger.warning(f"Rate limit exceeded for {client_ip} on {request.url.path}")
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"error": "Too many requests, please try again later."},
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response

    def _hit(self, client_ip: str, now: float) -> Tuple[bool, int, int]:
        """Record one request; returns (allowed, remaining, retry_after seconds)"""
        with self._lock:
            if now - self._last_prune >= self.window_seconds:
                self._prune(now)

            window_start, count = self._windows.get(client_ip, (now, 0))
            if now - window_start >= self.window_seconds:
                window_start, count = now, 0

            if count >= self.max_requests:
                retry_after = math.ceil(self.window_seconds - (now - window_start))
                return False, 0, max(retry_after, 1)

            count += 1
            self._windows[client_ip] = (window_start, count)
            return True, self.max_requests - count, 0

    def _prune(self, now: float) -> None:
        """Drop windows that have expired; caller holds the lock"""
        expired = [
            ip for ip, (window_start, _) in self._windows.items()
            if now - window_start >= self.window_seconds
        ]
        for ip in expired:
            del self._windows[ip]
        self._last_prune = now


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds a baseline set of security headers to every response"""

    HEADERS: Dict[str, str] = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "SAMEORIGIN",
        "Referrer-Policy": "no-referrer",
        "X-DNS-Prefetch-Control": "off",
        "X-Download-Options": "noopen",
        "X-Permitted-Cross-Domain-Policies": "none",
        "Cross-Origin-Resource-Policy": "cross-origin",
        "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for name, value in self.HEADERS.items():
            response.headers.setdefault(name, value)
        if "server" in response.headers:
            del response.headers["server"]
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One access-log line per request"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f} ms")
        return response
