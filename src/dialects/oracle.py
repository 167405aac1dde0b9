"""Oracle dialect."""

from .base import SQLDialect


class OracleDialect(SQLDialect):
    """Oracle: double-quoted identifiers, OFFSET/FETCH row limiting."""

    name = "Oracle"

    def limit_clause(self, limit: int, offset: int | None = None) -> str:
        self._validate_pagination(limit, offset)
        if offset:
            return f"OFFSET {offset} ROWS FETCH NEXT {limit} ROWS ONLY"
        return f"FETCH FIRST {limit} ROWS ONLY"

    def current_timestamp(self) -> str:
        return "SYSDATE"

    def concat(self, *args: str) -> str:
        return " || ".join(args)

    def substring(self, expr: str, start: int, length: int | None = None) -> str:
        if length:
            return f"SUBSTR({expr}, {start}, {length})"
        return f"SUBSTR({expr}, {start})"

    def if_null(self, expr: str, replacement: str) -> str:
        return f"NVL({expr}, {replacement})"

    def schema_query(
        self,
        table: str,
        schema: str | None = None,
        database: str | None = None,
    ) -> str:
        owner_filter = f" AND OWNER = {self.quote_string(schema)}" if schema else ""
        return (
            "SELECT COLUMN_NAME AS name, DATA_TYPE AS type, NULLABLE AS nullable,\n"
            "       DATA_LENGTH AS max_length\n"
            "FROM ALL_TAB_COLUMNS\n"
            f"WHERE TABLE_NAME = {self.quote_string(table)}{owner_filter}\n"
            "ORDER BY COLUMN_ID"
        )
