"""
Source/target comparison.

compare() executes a ComparisonRequest; compare_result_sets() does the
matching on result sets that are already in memory.
"""

from .engine import (
    MAX_SAMPLE_MISMATCHES,
    compare,
    compare_result_sets,
    resolve_compare_columns,
)
from .fingerprint import fingerprint, index_rows, render_value

__all__ = [
    "compare",
    "compare_result_sets",
    "resolve_compare_columns",
    "fingerprint",
    "index_rows",
    "render_value",
    "MAX_SAMPLE_MISMATCHES",
]
