"""SQL Server and Azure SQL dialects."""

from src.utils.sql_safety import validate_integer_param

from .base import SQLDialect


class SQLServerDialect(SQLDialect):
    """
    Microsoft SQL Server dialect.

    Identifiers are bracket-quoted with ']' doubled. Without an offset the
    row limit is expressed as SELECT TOP n and limit_clause() is empty;
    with an offset it becomes OFFSET m ROWS FETCH NEXT n ROWS ONLY.
    """

    name = "Microsoft SQL Server"
    quote_char = "["
    close_quote_char = "]"
    supports_three_part_names = True
    supports_top = True

    def limit_clause(self, limit: int, offset: int | None = None) -> str:
        self._validate_pagination(limit, offset)
        if offset:
            return f"OFFSET {offset} ROWS FETCH NEXT {limit} ROWS ONLY"
        return ""

    def top_clause(self, limit: int) -> str:
        validate_integer_param(limit, "limit")
        return f"TOP {limit}"

    def current_timestamp(self) -> str:
        return "GETDATE()"

    def substring(self, expr: str, start: int, length: int | None = None) -> str:
        if length:
            return f"SUBSTRING({expr}, {start}, {length})"
        return f"SUBSTRING({expr}, {start}, LEN({expr}))"

    def if_null(self, expr: str, replacement: str) -> str:
        return f"ISNULL({expr}, {replacement})"

    def schema_query(
        self,
        table: str,
        schema: str | None = None,
        database: str | None = None,
    ) -> str:
        catalog = self.quote_identifier(database or "master")
        return (
            "SELECT COLUMN_NAME AS name, DATA_TYPE AS type, IS_NULLABLE AS nullable,\n"
            "       CHARACTER_MAXIMUM_LENGTH AS max_length\n"
            f"FROM {catalog}.INFORMATION_SCHEMA.COLUMNS\n"
            f"WHERE TABLE_SCHEMA = {self.quote_string(schema or 'dbo')}"
            f" AND TABLE_NAME = {self.quote_string(table)}\n"
            "ORDER BY ORDINAL_POSITION"
        )

    def catalog_query(self, database: str | None = None) -> str:
        return """
SELECT
    s.name AS schema_name,
    o.name AS table_name,
    o.type_desc AS table_type,
    c.name AS column_name,
    ty.name AS data_type,
    c.is_nullable AS is_nullable,
    COALESCE((
        SELECT TOP 1 1
        FROM sys.index_columns ic
        JOIN sys.indexes i ON ic.object_id = i.object_id AND ic.index_id = i.index_id
        WHERE ic.object_id = o.object_id
          AND ic.column_id = c.column_id
          AND i.is_primary_key = 1
    ), 0) AS is_primary
FROM sys.objects o
JOIN sys.schemas s ON o.schema_id = s.schema_id
LEFT JOIN sys.columns c ON o.object_id = c.object_id
LEFT JOIN sys.types ty ON c.user_type_id = ty.user_type_id
WHERE o.type IN ('U', 'V') AND o.is_ms_shipped = 0
ORDER BY s.name, o.name, c.column_id
""".strip()


class AzureSQLDialect(SQLServerDialect):
    """Azure SQL Database shares the SQL Server dialect."""

    name = "Azure SQL Database"
