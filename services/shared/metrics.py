"""Prometheus metrics for the invoice portal.

Exposes key metrics for monitoring:
- Invoice creation and status transition counts
- Extraction request outcomes and latency
- Current outstanding debt

Based on Prometheus best practices:
https://prometheus.io/docs/practices/naming/
"""

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

# Lifecycle metrics
invoices_created_total = Counter(
    "invoices_created_total",
    "Total invoices created from uploads",
    ["currency"],
)

invoice_transitions_total = Counter(
    "invoice_transitions_total",
    "Total invoice status transition requests",
    ["target", "outcome"],  # outcome: applied, rejected
)

outstanding_debt = Gauge(
    "invoice_outstanding_debt",
    "Sum of invoice amounts not yet paid, all currencies",
)

# Extraction metrics
extraction_requests_total = Counter(
    "extraction_requests_total",
    "Total invoice extraction requests",
    ["provider", "status"],  # success, failed
)

extraction_processing_duration_seconds = Histogram(
    "extraction_processing_duration_seconds",
    "Extraction round trip duration in seconds",
    ["provider"],
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0),
)


def get_metrics() -> tuple[bytes, str]:
    """Generate Prometheus metrics in text format.

    Returns:
        Tuple of (metrics bytes, content type)
    """
    return generate_latest(), CONTENT_TYPE_LATEST
