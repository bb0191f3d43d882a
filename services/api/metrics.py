"""Prometheus metrics for API service.

Exposes key metrics for monitoring:
- Request counts by endpoint and status
- Request duration histograms
- Invoice scan and extraction metrics
- CSV export metrics

Based on Prometheus best practices:
https://prometheus.io/docs/practices/naming/
"""

from prometheus_client import Counter, Histogram, generate_latest
from prometheus_client.openmetrics.exposition import CONTENT_TYPE_LATEST

# Request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Scan metrics
invoice_scans_total = Counter(
    "invoice_scans_total",
    "Total invoice scan requests",
    ["status"],  # success, failed
)

scan_upload_size_bytes = Histogram(
    "scan_upload_size_bytes",
    "Scanned invoice upload size in bytes",
    buckets=(1024, 10240, 102400, 1048576, 10485760),  # 1KB to 10MB
)

extraction_processing_duration_seconds = Histogram(
    "extraction_processing_duration_seconds",
    "Invoice extraction duration in seconds",
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0),
)

# Export metrics
invoice_exports_total = Counter(
    "invoice_exports_total",
    "Total CSV exports generated",
)

exported_rows = Histogram(
    "invoice_export_rows",
    "Number of invoice rows per CSV export",
    buckets=(0, 10, 100, 1000, 10000),
)


def get_metrics() -> tuple[bytes, str]:
    """Generate Prometheus metrics in text format.

    Returns:
        Tuple of (metrics bytes, content type)
    """
    return generate_latest(), CONTENT_TYPE_LATEST
