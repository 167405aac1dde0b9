"""Comparison report formatting and export."""

from .formatters import (
    export_result_json,
    export_samples_csv,
    format_result_console,
    result_to_json,
)

__all__ = [
    "format_result_console",
    "result_to_json",
    "export_result_json",
    "export_samples_csv",
]
