"""
SQL dialect abstraction layer.

Handles engine-specific identifier quoting, string literals, pagination
and metadata queries, and the pure query builder on top of it.

Usage:
    from src.dialects import get_dialect, build_select_query

    dialect = get_dialect("mssql")
    dialect.quote_identifier("order]s")          # '[order]]s]'
    build_select_query("mssql", "orders", limit=10)
"""

from .base import SQLDialect
from .builder import (
    DEFAULT_SAMPLE_LIMIT,
    build_catalog_query,
    build_count_query,
    build_schema_query,
    build_select_query,
    generate_duplicate_check_query,
    generate_null_check_query,
    generate_row_count_query,
    generate_sample_data_query,
    qualified_table_name,
)
from .registry import get_dialect, registered_engines

__all__ = [
    "SQLDialect",
    "get_dialect",
    "registered_engines",
    "qualified_table_name",
    "build_select_query",
    "build_count_query",
    "build_schema_query",
    "build_catalog_query",
    "generate_row_count_query",
    "generate_sample_data_query",
    "generate_null_check_query",
    "generate_duplicate_check_query",
    "DEFAULT_SAMPLE_LIMIT",
]
