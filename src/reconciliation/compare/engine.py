"""
Comparison engine.

Runs the source and target queries independently, matches rows by
fingerprint over the columns both sides share, and summarizes the
differences with a bounded sample.
"""

import logging
import time
from collections.abc import Callable, Sequence

from src.utils.db_connector import ConnectionConfig, ResultSet, execute_query
from src.utils.exceptions import NoCommonColumnsError
from src.utils.metrics.comparison import ComparisonMetrics
from src.utils.tracing import trace_comparison

from ..models import (
    ComparisonRequest,
    ComparisonResult,
    ComparisonStatus,
    ComparisonSummary,
    MismatchType,
    SampleMismatch,
)
from .fingerprint import index_rows

logger = logging.getLogger(__name__)

MAX_SAMPLE_MISMATCHES = 10

Executor = Callable[[ConnectionConfig, str], ResultSet]


def resolve_compare_columns(
    source_fields: Sequence[str],
    target_fields: Sequence[str],
    key_columns: Sequence[str] | None = None,
) -> list[str]:
    """
    Pick the columns rows are matched on.

    Common columns keep source order and are matched case-sensitively.
    Key columns, when given, are narrowed to the common ones and keep
    their own order. If none of them is shared, all common columns are
    used instead.

    Raises:
        NoCommonColumnsError: No column is shared
    """
    target_set = set(target_fields)
    common = [column for column in source_fields if column in target_set]
    if not common:
        raise NoCommonColumnsError("No common columns found between source and target")

    if not key_columns:
        return common

    common_set = set(common)
    selected = [column for column in key_columns if column in common_set]
    if not selected:
        logger.warning(
            f"[Comparison] None of the key columns {list(key_columns)} exist in both "
            f"source and target, comparing on all common columns"
        )
        return common
    return selected


def compare_result_sets(
    source: ResultSet,
    target: ResultSet,
    key_columns: Sequence[str] | None = None,
    max_samples: int = MAX_SAMPLE_MISMATCHES,
) -> tuple[ComparisonSummary, list[SampleMismatch], list[str]]:
    """
    Classify rows of two materialized result sets.

    Returns:
        (summary, sample mismatches, columns used for matching)
    """
    columns = resolve_compare_columns(source.fields, target.fields, key_columns)

    source_index = index_rows(source.rows, columns)
    target_index = index_rows(target.rows, columns)

    samples: list[SampleMismatch] = []
    matched = 0
    source_only = 0
    for key, row in source_index.items():
        if key in target_index:
            matched += 1
            continue
        source_only += 1
        if len(samples) < max_samples:
            samples.append(SampleMismatch(MismatchType.SOURCE_ONLY, row))

    target_only = 0
    for key, row in target_index.items():
        if key in source_index:
            continue
        target_only += 1
        if len(samples) < max_samples:
            samples.append(SampleMismatch(MismatchType.TARGET_ONLY, row))

    passed = source_only == 0 and target_only == 0
    summary = ComparisonSummary(
        source_row_count=source.row_count,
        target_row_count=target.row_count,
        matched_rows=matched,
        mismatched_rows=source_only,
        source_only_rows=source_only,
        target_only_rows=target_only,
        comparison_status=ComparisonStatus.PASSED if passed else ComparisonStatus.FAILED,
    )
    return summary, samples, columns


@trace_comparison
def compare(
    request: ComparisonRequest,
    executor: Executor = execute_query,
    metrics: ComparisonMetrics | None = None,
) -> ComparisonResult:
    """
    Execute both queries and compare the results.

    Args:
        request: Connections, queries and optional key columns
        executor: Statement runner, execute_query unless injected
        metrics: Optional comparison metrics to record into

    Raises:
        NoCommonColumnsError: The result sets share no comparable column
        DatabaseConnectionError, QueryError, ConfigurationError: From the executor
    """
    start_time = time.perf_counter()
    source_engine = request.source_connection.type
    target_engine = request.target_connection.type

    try:
        logger.info("[Comparison] Executing source query...")
        source = executor(request.source_connection, request.source_query)

        logger.info("[Comparison] Executing target query...")
        target = executor(request.target_connection, request.target_query)

        logger.info(
            f"[Comparison] Source rows: {source.row_count}, Target rows: {target.row_count}"
        )

        summary, samples, columns = compare_result_sets(source, target, request.key_columns)
        logger.info(f"[Comparison] Comparing using columns: {', '.join(columns)}")
    except Exception as e:
        logger.error(f"[Comparison] Error: {e}")
        if metrics:
            metrics.record_failure(source_engine, target_engine)
        raise

    result = ComparisonResult(
        summary=summary,
        sample_mismatches=tuple(samples),
        execution_time_ms=int((time.perf_counter() - start_time) * 1000),
        compare_columns=tuple(columns),
    )

    logger.info(f"[Comparison] Complete: {result.status}")
    if metrics:
        metrics.record_run(source_engine, target_engine, result)
    return result
