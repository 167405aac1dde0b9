"""
Distributed tracing using OpenTelemetry.

Instruments:
- Database statements (PostgreSQL, MySQL, SQL Server, SQLite)
- Comparison runs
- Control-plane HTTP calls
- Agent job processing

Spans are no-ops until initialize_tracing() installs a provider.
"""

from .comparison import trace_comparison, trace_job
from .context import add_span_attributes, add_span_event, trace_operation
from .database import trace_database_query, trace_http_request
from .decorators import trace_function
from .tracer import (
    get_tracer,
    initialize_tracing,
    instrument_psycopg2,
    instrument_requests,
    setup_auto_instrumentation,
    shutdown_tracing,
)

__all__ = [
    "initialize_tracing",
    "get_tracer",
    "shutdown_tracing",
    "trace_operation",
    "trace_function",
    "add_span_attributes",
    "add_span_event",
    "trace_database_query",
    "trace_http_request",
    "trace_comparison",
    "trace_job",
    "instrument_psycopg2",
    "instrument_requests",
    "setup_auto_instrumentation",
]
