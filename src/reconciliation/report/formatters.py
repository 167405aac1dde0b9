"""
Comparison report output.

Console text for the `compare` CLI command, plus JSON and CSV exports of
a ComparisonResult.
"""

import csv
import json
from typing import Any

from ..models import ComparisonResult


def result_to_json(result: ComparisonResult, indent: int | None = 2) -> str:
    """Serialize a result; Decimal, datetime and similar values become strings."""
    return json.dumps(result.to_dict(), indent=indent, default=str)


def export_result_json(result: ComparisonResult, output_path: str) -> None:
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(result_to_json(result))


def export_samples_csv(result: ComparisonResult, output_path: str) -> None:
    """
    Write the sample mismatches as CSV.

    Columns: type followed by the union of the sampled rows' columns in
    first-seen order.
    """
    columns: list[str] = []
    for sample in result.sample_mismatches:
        for column in sample.row:
            if column not in columns:
                columns.append(column)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["type", *columns])
        for sample in result.sample_mismatches:
            writer.writerow([sample.type.value, *(_cell(sample.row.get(c)) for c in columns)])


def _cell(value: Any) -> str:
    return "NULL" if value is None else str(value)


def format_result_console(result: ComparisonResult) -> str:
    """Human-readable report for terminal output."""
    summary = result.summary
    lines = []

    lines.append("=" * 80)
    lines.append("DATA COMPARISON REPORT")
    lines.append("=" * 80)
    lines.append(f"Status: {summary.comparison_status.value.upper()}")
    lines.append(f"Compared On: {', '.join(result.compare_columns) or '-'}")
    lines.append(f"Execution Time: {result.execution_time_ms:,} ms")
    lines.append("")

    lines.append("SUMMARY")
    lines.append("-" * 80)
    lines.append(f"Source Rows:      {summary.source_row_count:,}")
    lines.append(f"Target Rows:      {summary.target_row_count:,}")
    lines.append(f"Matched Rows:     {summary.matched_rows:,}")
    lines.append(f"Source-Only Rows: {summary.source_only_rows:,}")
    lines.append(f"Target-Only Rows: {summary.target_only_rows:,}")
    lines.append("")

    if result.sample_mismatches:
        lines.append(f"SAMPLE MISMATCHES ({len(result.sample_mismatches)})")
        lines.append("-" * 80)
        for sample in result.sample_mismatches:
            row = ", ".join(f"{k}={_cell(v)}" for k, v in sample.row.items())
            lines.append(f"[{sample.type.value}] {row}")
        lines.append("")

    lines.append("=" * 80)

    return "\n".join(lines)
