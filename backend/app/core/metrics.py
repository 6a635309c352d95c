"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total new booking proposals',
    ['outcome']  # accepted or a rejection kind
)

extension_attempts = Counter(
    'extension_attempts_total',
    'Total booking extension requests',
    ['outcome']  # accepted or a rejection kind
)

booking_latency = Histogram(
    'booking_latency_seconds',
    'Booking use-case latency',
    ['operation'],  # propose, extend
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Concurrency control metrics
unit_lock_wait = Histogram(
    'unit_lock_wait_seconds',
    'Time spent waiting for a per-unit lock',
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0]
)

unit_lock_failures = Counter(
    'unit_lock_failures_total',
    'Per-unit lock acquisitions that timed out or errored',
    ['strategy']
)

db_retries = Counter(
    'db_retry_attempts_total',
    'Extension retries due to version conflicts'
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(outcome: str):
    """Record a proposal outcome: 'accepted' or a rejection kind."""
    booking_attempts.labels(outcome=outcome).inc()


def record_extension_attempt(outcome: str):
    """Record an extension outcome: 'accepted' or a rejection kind."""
    extension_attempts.labels(outcome=outcome).inc()


def record_lock_failure(strategy: str):
    unit_lock_failures.labels(strategy=strategy).inc()
