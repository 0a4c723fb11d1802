"""
Prometheus metrics middleware for HTTP request tracking.

This middleware integrates with the prometheus_metrics module to
track HTTP request metrics including duration, status codes, and
in-progress requests.
"""

import time
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.constants import SSE_PATH_SUFFIX
from ..monitoring.prometheus_metrics import prometheus_metrics


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """
        Process the request and collect metrics.

        Args:
            request: The incoming request
            call_next: The next middleware/handler

        Returns:
            The response from the handler
        """
        # Skip the metrics endpoint itself and SSE streams
        # SSE endpoints need direct passthrough to avoid interference with streaming
        path = request.url.path
        if path == "/metrics" or path.endswith(SSE_PATH_SUFFIX):
            return await call_next(request)

        method = request.method
        # Routing has not run yet; label in-progress requests by resource prefix
        endpoint = "/".join(path.split("/")[:4])

        prometheus_metrics.track_http_request_start(method, endpoint)
        start_time = time.time()

        try:
            response = await call_next(request)
            duration = time.time() - start_time

            # Use the route template (/api/v1/offerings/{offering_id}) to bound cardinality
            route = request.scope.get("route")
            label = getattr(route, "path", None) or "unmatched"
            prometheus_metrics.record_http_request(
                method=method, endpoint=label, duration=duration, status_code=response.status_code
            )

            return response

        finally:
            # Always track request end
            prometheus_metrics.track_http_request_end(method, endpoint)
