"""Middleware for request logging, correlation IDs, and metrics."""

import time
from collections import defaultdict
from typing import Any, Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match
from starlette.types import ASGIApp

from greenroute.core.logging_config import clear_request_id, get_logger, log_fields, set_request_id

logger = get_logger(__name__)

UNMATCHED_ROUTE = "unmatched"


def _route_template(request: Request) -> str:
    """Full path template of the matching route, e.g. ``/api/v1/routes/{route_id}``.

    Requests that match no route share the ``unmatched`` label.
    """
    partial = None
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return route.path
        if match == Match.PARTIAL and partial is None:
            partial = route.path
    return partial or UNMATCHED_ROUTE


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each HTTP request with a correlation ID and timing."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Log request and response with timing and correlation ID."""
        correlation_id = set_request_id(request.headers.get("X-Request-ID"))
        start_time = time.perf_counter()

        logger.info(
            "Request started",
            extra=log_fields(
                method=request.method,
                path=request.url.path,
                client_ip=request.client.host if request.client else None,
            ),
        )

        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

            logger.info(
                "Request completed",
                extra=log_fields(
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=duration_ms,
                ),
            )

            response.headers["X-Request-ID"] = correlation_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"
            return response

        except Exception as e:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.error(
                "Request failed",
                extra=log_fields(
                    method=request.method,
                    path=request.url.path,
                    duration_ms=duration_ms,
                    error_type=type(e).__name__,
                ),
                exc_info=True,
            )
            raise

        finally:
            clear_request_id()


class MetricsRegistry:
    """In-process request metrics.

    Tracks request counts and durations per endpoint template, status code
    counts, and the number of requests in flight.
    """

    def __init__(self):
        self.requests_in_progress = 0
        self._requests_total = 0
        self._total_duration = 0.0
        self._by_endpoint: Dict[str, Dict[str, float]] = defaultdict(
            lambda: {"count": 0, "total_duration": 0.0}
        )
        self._by_status: Dict[int, int] = defaultdict(int)

    def record(self, endpoint: str, status_code: int, duration: float) -> None:
        self._requests_total += 1
        self._total_duration += duration
        self._by_endpoint[endpoint]["count"] += 1
        self._by_endpoint[endpoint]["total_duration"] += duration
        self._by_status[status_code] += 1

    def get_metrics(self) -> Dict[str, Any]:
        """Snapshot of the collected metrics."""
        avg_duration = (
            self._total_duration / self._requests_total if self._requests_total else 0.0
        )

        endpoints = {
            endpoint: {
                "count": int(data["count"]),
                "avg_duration_seconds": round(data["total_duration"] / data["count"], 4),
            }
            for endpoint, data in self._by_endpoint.items()
            if data["count"]
        }

        return {
            "requests_total": self._requests_total,
            "requests_in_progress": self.requests_in_progress,
            "avg_duration_seconds": round(avg_duration, 4),
            "requests_by_endpoint": endpoints,
            "requests_by_status": dict(self._by_status),
        }


class MetricsMiddleware(BaseHTTPMiddleware):
    """Feeds every request into a shared MetricsRegistry."""

    def __init__(self, app: ASGIApp, registry: MetricsRegistry):
        super().__init__(app)
        self.registry = registry

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Track request metrics."""
        self.registry.requests_in_progress += 1
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            self.registry.record(
                endpoint=f"{request.method} {_route_template(request)}",
                status_code=response.status_code,
                duration=time.perf_counter() - start_time,
            )
            return response

        finally:
            self.registry.requests_in_progress -= 1
