"""
Prometheus Metrics for the Demo Bank service.

This module defines all metrics exposed at the /metrics endpoint.
Metrics are categorized into:

1. Business Metrics
   - Transfer outcomes, rejection reasons, amounts moved, logins

2. Technical Metrics
   - HTTP request counts and latencies, transfer latency
"""
from decimal import Decimal

from prometheus_client import Counter, Histogram, Info

from demobank import __version__

# =============================================================================
# SERVICE INFO
# =============================================================================

SERVICE_INFO = Info(
    "demobank_service",
    "Service information"
)
SERVICE_INFO.info({
    "version": __version__,
    "service": "demo-bank",
})

# =============================================================================
# BUSINESS METRICS
# =============================================================================

# Counter: Transfers by outcome
TRANSFER_TOTAL = Counter(
    "demobank_transfer_total",
    "Total transfer requests processed",
    ["outcome"]  # success, rejected
)

# Counter: Rejected transfers by error code
TRANSFER_REJECTED = Counter(
    "demobank_transfer_rejected_total",
    "Transfers rejected during validation",
    ["code"]  # INVALID_INPUT, INSUFFICIENT_FUNDS, ...
)

# Histogram: Amounts moved by successful transfers
TRANSFER_AMOUNT = Histogram(
    "demobank_transfer_amount",
    "Distribution of executed transfer amounts",
    buckets=[10, 50, 100, 250, 500, 1000, 2500, 5000, 10000]
)

# Counter: Login attempts by outcome
LOGIN_TOTAL = Counter(
    "demobank_login_total",
    "Login attempts",
    ["outcome"]  # success, failed
)

# =============================================================================
# TECHNICAL METRICS
# =============================================================================

TRANSFER_LATENCY = Histogram(
    "demobank_transfer_latency_seconds",
    "Time spent validating and executing a transfer",
    buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1]
)

HTTP_REQUESTS = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

HTTP_REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def record_transfer(amount: Decimal, latency_seconds: float) -> None:
    """Record metrics for an executed transfer."""
    TRANSFER_TOTAL.labels(outcome="success").inc()
    TRANSFER_AMOUNT.observe(float(amount))
    TRANSFER_LATENCY.observe(latency_seconds)


def record_transfer_rejected(code: str, latency_seconds: float) -> None:
    """Record metrics for a transfer rejected during validation."""
    TRANSFER_TOTAL.labels(outcome="rejected").inc()
    TRANSFER_REJECTED.labels(code=code).inc()
    TRANSFER_LATENCY.observe(latency_seconds)


def record_login(success: bool) -> None:
    LOGIN_TOTAL.labels(outcome="success" if success else "failed").inc()


def record_http_request(method: str, endpoint: str, status: int, latency_seconds: float) -> None:
    """Record metrics for a completed HTTP request."""
    HTTP_REQUESTS.labels(method=method, endpoint=endpoint, status=status).inc()
    HTTP_REQUEST_LATENCY.labels(method=method, endpoint=endpoint).observe(latency_seconds)
