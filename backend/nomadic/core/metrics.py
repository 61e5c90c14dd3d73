"""
Prometheus metrics for the booking flow.
Exposed at /metrics.
"""

from prometheus_client import Counter, Histogram, Gauge, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'nomadic_booking_attempts_total',
    'Booking submissions by outcome',
    ['status']  # created, rejected, error
)

booking_rejections = Counter(
    'nomadic_booking_rejections_total',
    'Booking submissions rejected by the admission rule',
    ['reason']
)

booking_latency = Histogram(
    'nomadic_booking_latency_seconds',
    'Booking submission latency',
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Tent hold metrics
admission_requests = Counter(
    'nomadic_tent_hold_requests_total',
    'Tent hold decisions',
    ['result']  # admitted, rejected
)

redis_connection_errors = Counter(
    'nomadic_redis_connection_errors_total',
    'Redis errors while placing or releasing tent holds'
)

redis_circuit_breaker_open = Gauge(
    'nomadic_redis_circuit_breaker_open',
    'Tent hold gate failing open (1=open, 0=closed)'
)

# Payment metrics
payment_confirmations = Counter(
    'nomadic_payment_confirmations_total',
    'Payment webhook outcomes',
    ['result']  # confirmed, duplicate, unknown_booking
)

webhook_rejections = Counter(
    'nomadic_webhook_rejections_total',
    'Webhook deliveries rejected before processing',
    ['reason']  # signature, payload, not_configured
)

notification_failures = Counter(
    'nomadic_notification_failures_total',
    'Confirmation emails that failed to send',
    ['kind']  # customer, admin
)


def metrics_endpoint() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_attempt(status: str):
    """Status: created, rejected, error"""
    booking_attempts.labels(status=status).inc()


def record_rejection(reason: str):
    booking_rejections.labels(reason=reason).inc()


def record_admission(admitted: bool):
    result = "admitted" if admitted else "rejected"
    admission_requests.labels(result=result).inc()


def record_payment_confirmation(result: str):
    payment_confirmations.labels(result=result).inc()


def record_webhook_rejection(reason: str):
    webhook_rejections.labels(reason=reason).inc()


def record_notification_failure(kind: str):
    notification_failures.labels(kind=kind).inc()
