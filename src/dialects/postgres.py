"""PostgreSQL and Redshift dialects."""

from .base import SQLDialect


class PostgreSQLDialect(SQLDialect):
    """PostgreSQL: double-quoted identifiers, LIMIT n OFFSET m."""

    name = "PostgreSQL"
    case_sensitive = True

    def concat(self, *args: str) -> str:
        return " || ".join(args)

    def substring(self, expr: str, start: int, length: int | None = None) -> str:
        if length:
            return f"SUBSTRING({expr} FROM {start} FOR {length})"
        return f"SUBSTRING({expr} FROM {start})"

    def schema_query(
        self,
        table: str,
        schema: str | None = None,
        database: str | None = None,
    ) -> str:
        return (
            "SELECT column_name AS name, data_type AS type, is_nullable AS nullable,\n"
            "       character_maximum_length AS max_length\n"
            "FROM information_schema.columns\n"
            f"WHERE table_schema = {self.quote_string(schema or 'public')}"
            f" AND table_name = {self.quote_string(table)}\n"
            "ORDER BY ordinal_position"
        )

    def catalog_query(self, database: str | None = None) -> str:
        return """
SELECT
    c.table_schema AS schema_name,
    c.table_name AS table_name,
    CASE WHEN t.table_type = 'VIEW' THEN 'view' ELSE 'table' END AS table_type,
    c.column_name AS column_name,
    c.data_type AS data_type,
    c.is_nullable AS is_nullable,
    COALESCE((
        SELECT 1
        FROM information_schema.table_constraints tc
        JOIN information_schema.key_column_usage kcu
            ON tc.constraint_name = kcu.constraint_name
            AND tc.table_schema = kcu.table_schema
            AND tc.table_name = kcu.table_name
        WHERE tc.constraint_type = 'PRIMARY KEY'
          AND tc.table_schema = c.table_schema
          AND tc.table_name = c.table_name
          AND kcu.column_name = c.column_name
        LIMIT 1
    ), 0) AS is_primary
FROM information_schema.columns c
JOIN information_schema.tables t
    ON c.table_schema = t.table_schema
    AND c.table_name = t.table_name
WHERE c.table_schema NOT IN ('pg_catalog', 'information_schema')
  AND t.table_type IN ('BASE TABLE', 'VIEW')
ORDER BY c.table_schema, c.table_name, c.ordinal_position
""".strip()


class RedshiftDialect(PostgreSQLDialect):
    """Amazon Redshift speaks the PostgreSQL dialect."""

    name = "Amazon Redshift"
