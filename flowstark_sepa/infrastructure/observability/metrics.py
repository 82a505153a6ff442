"""Prometheus metrics for remittance generation outcomes and volumes"""

from prometheus_client import Counter, Histogram

# Remittance metrics
remittance_counter = Counter(
    "flowstark_remittance_total",
    "Direct-debit remittance generation attempts",
    ["outcome"],  # generated | validation_failed | profile_incomplete | error
)

remittance_transactions_counter = Counter(
    "flowstark_remittance_transactions_total",
    "Direct-debit transactions written to generated files",
)

validation_errors_counter = Counter(
    "flowstark_validation_errors_total",
    "Validation problems reported to users",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_remittance(outcome: str, transaction_count: int = 0, error_count: int = 0) -> None:
    """Record outcome, volume and user-facing error counts of one attempt"""
    remittance_counter.labels(outcome=outcome).inc()
    if transaction_count:
        remittance_transactions_counter.inc(transaction_count)
    if error_count:
        validation_errors_counter.inc(error_count)
