"""
Comparison request and result types.

Requests are parsed from control-plane payloads (camelCase or snake_case
keys); results serialize back to the camelCase shape the control plane
stores.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.utils.db_connector import ConnectionConfig
from src.utils.exceptions import ConfigurationError


class ComparisonStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"


class MismatchType(str, Enum):
    SOURCE_ONLY = "source_only"
    TARGET_ONLY = "target_only"


def _get(payload: Mapping[str, Any], camel: str, snake: str) -> Any:
    value = payload.get(camel)
    return payload.get(snake) if value is None else value


@dataclass(frozen=True)
class ComparisonRequest:
    """Two connections, one query for each, and optional key columns."""

    source_connection: ConnectionConfig
    target_connection: ConnectionConfig
    source_query: str
    target_query: str
    key_columns: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any] | str) -> "ComparisonRequest":
        """
        Parse an etl_comparison payload.

        Args:
            payload: Mapping, or a JSON string encoding one

        Raises:
            ConfigurationError: Missing connections or queries, malformed
                key columns or undecodable JSON
        """
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Comparison payload is not valid JSON: {e}") from e

        if not isinstance(payload, Mapping):
            raise ConfigurationError("Comparison payload must be an object")

        source = _get(payload, "sourceConnection", "source_connection")
        target = _get(payload, "targetConnection", "target_connection")
        if source is None or target is None:
            raise ConfigurationError(
                "Comparison payload requires sourceConnection and targetConnection"
            )

        source_query = _get(payload, "sourceQuery", "source_query")
        target_query = _get(payload, "targetQuery", "target_query")
        for label, query in (("sourceQuery", source_query), ("targetQuery", target_query)):
            if not isinstance(query, str) or not query.strip():
                raise ConfigurationError(f"Comparison payload requires a non-empty {label}")

        key_columns = _get(payload, "keyColumns", "key_columns") or ()
        if isinstance(key_columns, str) or not all(isinstance(c, str) for c in key_columns):
            raise ConfigurationError("keyColumns must be a list of column names")

        return cls(
            source_connection=ConnectionConfig.coerce(source),
            target_connection=ConnectionConfig.coerce(target),
            source_query=source_query,
            target_query=target_query,
            key_columns=tuple(key_columns),
        )


@dataclass(frozen=True)
class ComparisonSummary:
    source_row_count: int
    target_row_count: int
    matched_rows: int
    mismatched_rows: int
    source_only_rows: int
    target_only_rows: int
    comparison_status: ComparisonStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "sourceRowCount": self.source_row_count,
            "targetRowCount": self.target_row_count,
            "matchedRows": self.matched_rows,
            "mismatchedRows": self.mismatched_rows,
            "sourceOnlyRows": self.source_only_rows,
            "targetOnlyRows": self.target_only_rows,
            "comparisonStatus": self.comparison_status.value,
        }


@dataclass(frozen=True)
class SampleMismatch:
    type: MismatchType
    row: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "row": self.row}


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of one comparison. sample_mismatches never exceeds ten entries."""

    summary: ComparisonSummary
    sample_mismatches: tuple[SampleMismatch, ...] = ()
    execution_time_ms: int = 0
    compare_columns: tuple[str, ...] = field(default=())

    @property
    def status(self) -> str:
        return self.summary.comparison_status.value

    @property
    def passed(self) -> bool:
        return self.summary.comparison_status == ComparisonStatus.PASSED

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "sampleMismatches": [m.to_dict() for m in self.sample_mismatches],
            "compareColumns": list(self.compare_columns),
            "executionTimeMs": self.execution_time_ms,
        }
