"""
Prometheus metrics module for MindBridge.

Exposes service timings collected by @measure_operation, HTTP request
counters recorded by the metrics middleware, and a few booking domain
counters. Everything lives on a private registry.
"""

from typing import Optional, cast

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

http_request_duration_seconds = Histogram(
    "mindbridge_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

http_requests_total = Counter(
    "mindbridge_http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"],
    registry=REGISTRY,
)

service_operation_duration_seconds = Histogram(
    "mindbridge_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "mindbridge_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "mindbridge_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

# Domain counters
session_bookings_total = Counter(
    "mindbridge_session_bookings_total",
    "Session booking attempts by outcome",
    ["outcome"],  # booked | slot_taken | rejected
    registry=REGISTRY,
)

session_cancellations_total = Counter(
    "mindbridge_session_cancellations_total",
    "Session cancellation attempts by outcome",
    ["outcome"],  # cancelled | too_late
    registry=REGISTRY,
)

notifications_total = Counter(
    "mindbridge_notifications_total",
    "In-app notifications written, by event and status",
    ["event", "status"],  # status: created | failed
    registry=REGISTRY,
)

payments_total = Counter(
    "mindbridge_payments_total",
    "Payment transactions by purpose and status",
    ["purpose", "status"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Manages Prometheus metrics collection and exposure."""

    @staticmethod
    def record_http_request(method: str, endpoint: str, duration: float, status_code: int) -> None:
        """Record HTTP request metrics."""
        labels = {"method": method, "endpoint": endpoint, "status_code": str(status_code)}

        http_request_duration_seconds.labels(**labels).observe(duration)
        http_requests_total.labels(**labels).inc()

    @staticmethod
    def record_service_operation(
        service: str,
        operation: str,
        duration: float,
        status: str = "success",
        error_type: Optional[str] = None,
    ) -> None:
        """
        Record service operation metrics from @measure_operation decorator.

        Args:
            service: Service name (e.g., 'SessionService')
            operation: Operation/method name (e.g., 'book_session')
            duration: Operation duration in seconds
            status: Operation status ('success' or 'error')
            error_type: Type of error if status is 'error'
        """
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()

        if status == "error" and error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    # Domain helpers
    @staticmethod
    def inc_booking(outcome: str) -> None:
        session_bookings_total.labels(outcome=outcome).inc()

    @staticmethod
    def inc_cancellation(outcome: str) -> None:
        session_cancellations_total.labels(outcome=outcome).inc()

    @staticmethod
    def inc_notification(event: str, status: str) -> None:
        notifications_total.labels(event=event, status=status).inc()

    @staticmethod
    def inc_payment(purpose: str, status: str) -> None:
        payments_total.labels(purpose=purpose, status=status).inc()

    @staticmethod
    def get_metrics() -> bytes:
        """
        Generate Prometheus metrics in exposition format.

        Returns:
            Metrics data in Prometheus text format
        """
        return cast(bytes, generate_latest(REGISTRY))

    @staticmethod
    def get_content_type() -> str:
        """Get the content type for Prometheus metrics."""
        return cast(str, CONTENT_TYPE_LATEST)


# Singleton instance
prometheus_metrics = PrometheusMetrics()
