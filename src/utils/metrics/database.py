"""
Process-wide database statement metrics.

Connectors record into these module-level collectors; they are created
through get_or_create_metric() so re-imports do not double-register.
"""

from prometheus_client import Counter, Gauge, Histogram

from .registry import get_or_create_metric

DB_QUERIES_TOTAL = get_or_create_metric(
    lambda: Counter(
        "db_queries_total",
        "Statements executed against source/target databases",
        ["engine", "status"],
    ),
    "db_queries_total",
)

DB_QUERY_DURATION = get_or_create_metric(
    lambda: Histogram(
        "db_query_duration_seconds",
        "Statement execution time including connect",
        ["engine"],
        buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
    ),
    "db_query_duration_seconds",
)

DB_CONNECTION_ERRORS = get_or_create_metric(
    lambda: Counter(
        "db_connection_errors_total",
        "Failures to open a database connection",
        ["engine"],
    ),
    "db_connection_errors_total",
)

DB_CONNECTIONS_OPEN = get_or_create_metric(
    lambda: Gauge(
        "db_connections_open",
        "Database connections currently open",
        ["engine"],
    ),
    "db_connections_open",
)
