"""
Cross-database data comparison.

Components:
- models: ComparisonRequest / ComparisonResult
- compare: fingerprint matching and the compare() entry point
- report: console, JSON and CSV output

Usage:
    from src.reconciliation import ComparisonRequest, compare

    result = compare(ComparisonRequest.from_dict(payload))
    result.to_dict()
"""

from .compare import MAX_SAMPLE_MISMATCHES, compare, compare_result_sets
from .models import (
    ComparisonRequest,
    ComparisonResult,
    ComparisonStatus,
    ComparisonSummary,
    MismatchType,
    SampleMismatch,
)

__version__ = "1.0.0"
__all__ = [
    "compare",
    "compare_result_sets",
    "MAX_SAMPLE_MISMATCHES",
    "ComparisonRequest",
    "ComparisonResult",
    "ComparisonStatus",
    "ComparisonSummary",
    "MismatchType",
    "SampleMismatch",
]
