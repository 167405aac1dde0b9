"""
Query builder.

Pure functions that assemble SELECT, COUNT and schema-introspection
statements from a dialect plus identifiers. Every identifier passes
through the dialect's quote_identifier() and every literal through
quote_string(); nothing here executes SQL.

WHERE clauses are passed through verbatim: they are caller-authored SQL,
not identifiers or values.
"""

from src.utils.database_types import DatabaseType

from .base import SQLDialect
from .registry import get_dialect

DEFAULT_SAMPLE_LIMIT = 100


def qualified_table_name(
    dialect: SQLDialect | str,
    table: str,
    schema: str | None = None,
    database: str | None = None,
) -> str:
    """
    Build a [database.]schema.table reference, quoting each segment.

    The database qualifier is only emitted for engines with three-part
    naming (SQL Server and MySQL families).

    Example:
        >>> qualified_table_name("mssql", "orders", schema="dbo", database="sales")
        '[sales].[dbo].[orders]'
    """
    dialect = get_dialect(dialect)
    parts = []

    if database and dialect.supports_three_part_names:
        parts.append(dialect.quote_identifier(database))

    if schema:
        parts.append(dialect.quote_identifier(schema))

    parts.append(dialect.quote_identifier(table))

    return ".".join(parts)


def build_select_query(
    dialect: SQLDialect | str,
    table: str,
    columns: list[str] | None = None,
    where: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
    order_by: list[str] | None = None,
    schema: str | None = None,
    database: str | None = None,
) -> str:
    """
    Build a SELECT statement with engine-correct row limiting.

    Args:
        dialect: Dialect or engine type string
        table: Unquoted table name
        columns: Unquoted column names; None or ['*'] selects everything
        where: Optional raw WHERE condition
        limit: Optional row limit
        offset: Optional row offset (ignored without a limit)
        order_by: Optional unquoted ORDER BY columns
        schema: Optional schema qualifier
        database: Optional database qualifier (three-part naming engines only)

    Returns:
        SQL statement string
    """
    dialect = get_dialect(dialect)
    full_table = qualified_table_name(dialect, table, schema, database)
    quoted_columns = [
        column if column == "*" else dialect.quote_identifier(column)
        for column in (columns or ["*"])
    ]

    use_top = bool(limit) and not offset and dialect.supports_top

    query = "SELECT "
    if use_top:
        query += f"{dialect.top_clause(limit)} "
    query += ", ".join(quoted_columns)
    query += f" FROM {full_table}"

    if where:
        query += f" WHERE {where}"

    if order_by:
        query += " ORDER BY " + ", ".join(dialect.quote_identifier(c) for c in order_by)
    elif limit and offset and dialect.supports_top:
        # T-SQL only accepts OFFSET/FETCH after an ORDER BY
        query += " ORDER BY (SELECT NULL)"

    if limit and not use_top:
        query += f" {dialect.limit_clause(limit, offset)}"

    return query


def build_count_query(
    dialect: SQLDialect | str,
    table: str,
    where: str | None = None,
    schema: str | None = None,
    database: str | None = None,
) -> str:
    """Build a row-count statement returning a single 'count' column."""
    dialect = get_dialect(dialect)
    full_table = qualified_table_name(dialect, table, schema, database)

    query = f"SELECT COUNT(*) AS count FROM {full_table}"
    if where:
        query += f" WHERE {where}"

    return query


def build_schema_query(
    dialect: SQLDialect | str,
    table: str,
    schema: str | None = None,
    database: str | None = None,
) -> str:
    """
    Build the column-metadata statement for one table.

    Uses the engine's information_schema equivalent; SQLite uses
    PRAGMA table_info.
    """
    return get_dialect(dialect).schema_query(table, schema=schema, database=database)


def build_catalog_query(dialect: SQLDialect | str, database: str | None = None) -> str:
    """Build the whole-database column listing used by metadata fetch."""
    return get_dialect(dialect).catalog_query(database=database)


def generate_row_count_query(
    engine: str | DatabaseType,
    table: str,
    schema: str | None = None,
    database: str | None = None,
) -> str:
    """Row count for a table on the given engine."""
    return build_count_query(engine, table, schema=schema, database=database)


def generate_sample_data_query(
    engine: str | DatabaseType,
    table: str,
    columns: list[str] | None = None,
    limit: int | None = None,
    offset: int | None = None,
    schema: str | None = None,
    database: str | None = None,
) -> str:
    """First rows of a table, DEFAULT_SAMPLE_LIMIT unless told otherwise."""
    return build_select_query(
        engine,
        table,
        columns=columns,
        limit=limit or DEFAULT_SAMPLE_LIMIT,
        offset=offset,
        schema=schema,
        database=database,
    )


def generate_null_check_query(
    engine: str | DatabaseType,
    table: str,
    column: str,
    check_for_nulls: bool = True,
    limit: int | None = None,
    schema: str | None = None,
    database: str | None = None,
) -> str:
    """Rows where a column is NULL (or NOT NULL when check_for_nulls is False)."""
    dialect = get_dialect(engine)
    quoted_column = dialect.quote_identifier(column)
    condition = "IS NULL" if check_for_nulls else "IS NOT NULL"

    return build_select_query(
        dialect,
        table,
        columns=[column],
        where=f"{quoted_column} {condition}",
        limit=limit or DEFAULT_SAMPLE_LIMIT,
        schema=schema,
        database=database,
    )


def generate_duplicate_check_query(
    engine: str | DatabaseType,
    table: str,
    columns: list[str],
    limit: int | None = None,
    schema: str | None = None,
    database: str | None = None,
) -> str:
    """Value tuples of the given columns that occur more than once."""
    if not columns:
        raise ValueError("Duplicate check requires at least one column")

    dialect = get_dialect(engine)
    full_table = qualified_table_name(dialect, table, schema, database)
    column_list = ", ".join(dialect.quote_identifier(c) for c in columns)
    limit = limit or DEFAULT_SAMPLE_LIMIT

    top = f"{dialect.top_clause(limit)} " if dialect.supports_top else ""
    query = (
        f"SELECT {top}{column_list}, COUNT(*) AS duplicate_count\n"
        f"FROM {full_table}\n"
        f"GROUP BY {column_list}\n"
        "HAVING COUNT(*) > 1"
    )
    if not dialect.supports_top:
        query += f"\n{dialect.limit_clause(limit)}"

    return query
