"""
Tracing helpers for comparison runs and agent jobs.

Decorators that open a span around a comparison or a job and record the
outcome as span attributes.
"""

import logging
from functools import wraps

from .context import add_span_attributes, add_span_event, trace_operation

logger = logging.getLogger(__name__)


def trace_comparison(func):
    """
    Decorator for tracing a source/target comparison.

    Expects the wrapped function to take the comparison request as its
    first argument and return a ComparisonResult.

    Example:
        >>> @trace_comparison
        ... def compare(request, executor=execute_query):
        ...     ...
    """
    @wraps(func)
    def wrapper(request, *args, **kwargs):
        with trace_operation(
            "compare_tables",
            component="comparison",
            source_engine=request.source_connection.engine.value,
            target_engine=request.target_connection.engine.value,
            source_query=request.source_query[:200],
        ):
            add_span_event("comparison_started")

            try:
                result = func(request, *args, **kwargs)
            except Exception as e:
                add_span_event("comparison_failed", error=str(e))
                raise

            summary = result.summary
            add_span_attributes(
                status=result.status,
                source_rows=summary.source_row_count,
                target_rows=summary.target_row_count,
                matched=summary.matched_rows,
                mismatched=summary.mismatched_rows,
                source_only=summary.source_only_rows,
                target_only=summary.target_only_rows,
            )
            add_span_event("comparison_completed", status=result.status)
            return result

    return wrapper


def trace_job(func):
    """
    Decorator for tracing the processing of one control-plane job.

    The job is the first positional argument after self.
    """
    @wraps(func)
    def wrapper(self, job, *args, **kwargs):
        with trace_operation(
            "process_job",
            component="agent",
            job_id=job.id,
            job_type=job.job_type,
        ):
            try:
                result = func(self, job, *args, **kwargs)
                add_span_attributes(job_status=getattr(result, "value", "completed"))
                return result
            except Exception as e:
                add_span_attributes(job_status="failed")
                add_span_event("job_failed", error=str(e))
                raise

    return wrapper
