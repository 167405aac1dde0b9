"""
Metrics for data comparison runs.

Tracks run outcomes, row classifications and durations per engine pair.
"""

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Histogram,
)


class ComparisonMetrics:
    """
    Metrics for source/target comparisons.

    Args:
        registry: Custom Prometheus registry (default: global REGISTRY)
    """

    def __init__(self, registry: CollectorRegistry | None = None):
        self.registry = registry or REGISTRY

        self.runs_total = Counter(
            "comparison_runs_total",
            "Comparison runs by outcome",
            ["source_engine", "target_engine", "status"],
            registry=self.registry,
        )

        self.rows_total = Counter(
            "comparison_rows_total",
            "Rows classified by comparison runs",
            ["classification"],
            registry=self.registry,
        )

        self.duration_seconds = Histogram(
            "comparison_duration_seconds",
            "Duration of comparison runs in seconds",
            ["source_engine", "target_engine"],
            buckets=(0.1, 0.5, 1, 5, 10, 30, 60, 120, 300, 600),
            registry=self.registry,
        )

    def record_run(self, source_engine: str, target_engine: str, result) -> None:
        """
        Record a finished comparison.

        Args:
            source_engine: Source engine type string
            target_engine: Target engine type string
            result: ComparisonResult
        """
        self.runs_total.labels(
            source_engine=source_engine,
            target_engine=target_engine,
            status=result.status,
        ).inc()

        self.duration_seconds.labels(
            source_engine=source_engine,
            target_engine=target_engine,
        ).observe(result.execution_time_ms / 1000)

        summary = result.summary
        self.rows_total.labels(classification="matched").inc(summary.matched_rows)
        self.rows_total.labels(classification="mismatched").inc(summary.mismatched_rows)
        self.rows_total.labels(classification="source_only").inc(summary.source_only_rows)
        self.rows_total.labels(classification="target_only").inc(summary.target_only_rows)

    def record_failure(self, source_engine: str, target_engine: str) -> None:
        self.runs_total.labels(
            source_engine=source_engine,
            target_engine=target_engine,
            status="error",
        ).inc()
