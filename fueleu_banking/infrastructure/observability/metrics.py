"""Prometheus metrics for banking outcomes, transferred volumes and HTTP latency"""

from decimal import Decimal
from typing import Optional

from prometheus_client import Counter, Histogram

# Banking metrics
banking_operation_counter = Counter(
    "fueleu_banking_operations_total",
    "Banking operations by outcome",
    ["operation", "outcome"],  # BANK | APPLY, success | rejected | failed
)

banking_volume_counter = Counter(
    "fueleu_banking_gco2eq_total",
    "gCO2eq moved between ship CB and the bank",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_banking_outcome(operation: str, outcome: str, amount: Optional[Decimal] = None) -> None:
    """Count an operation outcome; committed operations also add their volume"""
    banking_operation_counter.labels(operation=operation, outcome=outcome).inc()

    if outcome == "success" and amount is not None:
        banking_volume_counter.labels(operation=operation).inc(float(amount))
