"""Prometheus metrics for statistics report requests."""

from prometheus_client import Counter, Histogram


# Report metrics
report_requests_total = Counter(
    'report_requests_total',
    'Total statistics report requests',
    ['report', 'status']
)

report_build_duration_seconds = Histogram(
    'report_build_duration_seconds',
    'Time spent assembling a statistics report',
    ['report'],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

report_rows = Histogram(
    'report_rows',
    'Number of rows in rendered statistics reports',
    ['report'],
    buckets=[1, 7, 31, 92, 366, 1000, 5000]
)

# HTTP metrics
request_duration_seconds = Histogram(
    'request_duration_seconds',
    'Request duration in seconds',
    ['endpoint', 'method', 'status'],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0]
)


def record_report_request(report: str, status: str):
    """Record a report request outcome.

    Args:
        report: Report name (e.g. 'tabRender.totals')
        status: 'success' or the error code of the failure
    """
    report_requests_total.labels(report=report, status=status).inc()


def record_report_build(report: str, duration_seconds: float, row_count: int):
    """Record how long a report took to build and how many rows it produced."""
    report_build_duration_seconds.labels(report=report).observe(duration_seconds)
    report_rows.labels(report=report).observe(row_count)


def record_request_duration(endpoint: str, method: str, status: int, duration_seconds: float):
    """Record overall request duration.

    Args:
        endpoint: API endpoint path
        method: HTTP method (GET, POST, etc.)
        status: HTTP status code
        duration_seconds: Request duration in seconds
    """
    request_duration_seconds.labels(
        endpoint=endpoint,
        method=method,
        status=str(status)
    ).observe(duration_seconds)
