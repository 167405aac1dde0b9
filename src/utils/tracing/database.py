"""
Database and HTTP operation tracing utilities.

Context managers that open CLIENT spans with the semantic attributes the
collector expects for database statements and outbound HTTP calls.
"""

from typing import Any

from opentelemetry import trace

from .context import trace_operation


def _statement_verb(statement: str) -> str:
    words = statement.strip().split(None, 1)
    return words[0].upper() if words else "UNKNOWN"


def trace_database_query(
    engine: str,
    statement: str,
    host: str = "unknown",
    database: str | None = None,
) -> Any:
    """
    Context manager for tracing one database statement.

    Args:
        engine: Engine type string (postgresql, mssql, ...)
        statement: SQL text; only the leading keyword and a truncated
            prefix are recorded
        host: Server host
        database: Database name, if any

    Example:
        >>> with trace_database_query("postgresql", "SELECT 1", "db.local"):
        ...     cursor.execute("SELECT 1")
    """
    verb = _statement_verb(statement)
    return trace_operation(
        f"db.{verb.lower()}",
        kind=trace.SpanKind.CLIENT,
        **{
            "db.system": engine,
            "db.operation": verb,
            "db.statement": statement[:500],
            "db.name": database or "",
            "net.peer.name": host,
            "component": "database",
        }
    )


def trace_http_request(method: str, url: str, **extra_attrs):
    """
    Context manager for tracing HTTP requests.

    Args:
        method: HTTP method (GET, POST, etc.)
        url: Request URL
        **extra_attrs: Additional attributes

    Example:
        >>> with trace_http_request("GET", f"{base_url}/jobs/poll"):
        ...     response = session.get(url)
    """
    return trace_operation(
        f"http.{method.lower()}",
        kind=trace.SpanKind.CLIENT,
        **{
            "http.method": method,
            "http.url": url,
            "component": "http",
            **extra_attrs
        }
    )
