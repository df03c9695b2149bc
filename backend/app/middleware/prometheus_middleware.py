"""
Prometheus middleware for collecting HTTP metrics.
"""

import re
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..monitoring.prometheus_metrics import prometheus_metrics

_ULID_SEGMENT = re.compile(r"^[0-9A-HJKMNP-TV-Z]{26}$")
_DATE_SEGMENT = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def normalize_path(raw_path: str) -> str:
    """Collapse ids and dates so the endpoint label stays low-cardinality."""
    segments = []
    for segment in raw_path.split("/"):
        if _ULID_SEGMENT.match(segment):
            segments.append(":id")
        elif _DATE_SEGMENT.match(segment):
            segments.append(":date")
        else:
            segments.append(segment)
    return "/".join(segments)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Skip the scrape endpoint itself
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        path = normalize_path(request.url.path)
        start_time = time.time()

        response = await call_next(request)
        prometheus_metrics.record_http_request(
            method=method,
            endpoint=path,
            duration=time.time() - start_time,
            status_code=response.status_code,
        )
        return response
