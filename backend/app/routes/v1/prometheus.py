"""
Prometheus metrics endpoint for monitoring infrastructure.

PUBLIC endpoint (no authentication required) following standard
Prometheus practices. Exposes the booking, cancellation, notification
and payment counters alongside the @measure_operation timings.
"""

from fastapi import APIRouter, Response

from app.monitoring.prometheus_metrics import prometheus_metrics

router = APIRouter(tags=["monitoring"])


@router.get("/metrics", include_in_schema=False)
def get_metrics() -> Response:
    """Expose metrics in the Prometheus text format."""
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
