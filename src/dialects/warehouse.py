"""Cloud warehouse dialects: Snowflake and Databricks."""

import re

from src.utils.sql_safety import validate_identifier

from .base import SQLDialect

# Snowflake folds unquoted identifiers to upper case, so these need no quotes
_SNOWFLAKE_BARE_IDENTIFIER = re.compile(r"^[A-Z][A-Z0-9_]*$")


class SnowflakeDialect(SQLDialect):
    """Snowflake: quotes only identifiers that would not survive case folding."""

    name = "Snowflake"
    backslash_escapes = True

    def quote_identifier(self, identifier: str) -> str:
        validate_identifier(identifier)
        if _SNOWFLAKE_BARE_IDENTIFIER.match(identifier):
            return identifier
        return super().quote_identifier(identifier)

    def current_timestamp(self) -> str:
        return "CURRENT_TIMESTAMP()"

    def if_null(self, expr: str, replacement: str) -> str:
        return f"IFNULL({expr}, {replacement})"


class DatabricksDialect(SQLDialect):
    """Databricks SQL: backtick identifiers, LIMIT n OFFSET m."""

    name = "Databricks"
    quote_char = "`"
    close_quote_char = "`"
    backslash_escapes = True

    def current_timestamp(self) -> str:
        return "CURRENT_TIMESTAMP()"
