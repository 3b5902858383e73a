"""
API Middleware - Request Tracking, Cache Control, CORS

Middleware for the dashboard FastAPI application:
- Request ID tracking (for debugging)
- Cache-Control headers (client-side caching)
- Optional CORS for the browser dashboard
"""

import time
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from teamdash.core.logging_config import current_request_id, get_logger

logger = get_logger(__name__)


# ============================================================
# Request ID Middleware
# ============================================================


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Add unique request ID to each request for tracing and debugging.

    Adds X-Request-ID header to both request and response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = current_request_id.set(request_id)

        try:
            logger.info(
                "API request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "client_ip": request.client.host if request.client else "unknown",
                },
            )

            start_time = time.perf_counter()
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000

            response.headers["X-Request-ID"] = request_id
            logger.info(
                "API response",
                extra={"status_code": response.status_code, "duration_ms": round(duration_ms, 2)},
            )
            return response
        finally:
            current_request_id.reset(token)


# ============================================================
# Cache Control Middleware
# ============================================================


class CacheControlMiddleware(BaseHTTPMiddleware):
    """
    Add Cache-Control headers for client-side caching.

    - /api/dashboard/*: 5 minutes (server-side caches refresh on their own TTLs)
    - /docs, /redoc, /openapi.json: 1 day
    - everything else (health, debug): no cache
    """

    DASHBOARD_MAX_AGE = 300
    DOCS_MAX_AGE = 86400

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        # Only successful GET requests are cacheable
        if request.method != "GET" or response.status_code >= 400:
            return response

        path = request.url.path
        if path.startswith("/api/dashboard/"):
            self._cache_for(response, self.DASHBOARD_MAX_AGE)
        elif path in ("/docs", "/redoc", "/openapi.json"):
            self._cache_for(response, self.DOCS_MAX_AGE)
        else:
            response.headers["Cache-Control"] = "no-cache, must-revalidate"
        return response

    def _cache_for(self, response: Response, seconds: int) -> None:
        response.headers["Cache-Control"] = f"private, max-age={seconds}"
        response.headers["Expires"] = self._get_expires_header(seconds)

    def _get_expires_header(self, seconds: int) -> str:
        expires_time = datetime.now(UTC) + timedelta(seconds=seconds)
        return expires_time.strftime("%a, %d %b %Y %H:%M:%S GMT")


# ============================================================
# CORS Middleware (Optional)
# ============================================================


def add_cors_middleware(app: FastAPI, origins: list[str]) -> None:
    """
    Allow the browser dashboard to call the API from other origins.

    Does nothing when no origins are configured (CORS_ORIGINS unset).
    """
    if not origins:
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    logger.info("CORS middleware enabled", extra={"origins": origins})
