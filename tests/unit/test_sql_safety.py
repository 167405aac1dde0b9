"""
Unit tests for src/utils/sql_safety.py

Identifiers and literals are quoted rather than pattern-matched, so the
validators only reject what quoting cannot make safe.
"""

import pytest

from src.utils.exceptions import InvalidIdentifierError
from src.utils.sql_safety import (
    validate_identifier,
    validate_integer_param,
    validate_string_literal,
)


class TestValidateIdentifier:
    """Test identifier validation"""

    @pytest.mark.parametrize("name", [
        "orders", "Order Details", "dbo", "table; DROP TABLE users--", 'a"b', "名前",
    ])
    def test_quotable_names_accepted(self, name):
        """Anything the dialect can quote is allowed through"""
        validate_identifier(name)

    @pytest.mark.parametrize("name", ["", "bad\x00name", None, 42])
    def test_rejected(self, name):
        with pytest.raises(InvalidIdentifierError):
            validate_identifier(name)


class TestValidateStringLiteral:
    """Test string literal validation"""

    def test_quotes_allowed(self):
        validate_string_literal("O'Brien")
        validate_string_literal("")

    @pytest.mark.parametrize("value", ["a\x00b", b"bytes", 3])
    def test_rejected(self, value):
        with pytest.raises(InvalidIdentifierError):
            validate_string_literal(value)


class TestValidateIntegerParam:
    """Test pagination parameter validation"""

    def test_valid(self):
        validate_integer_param(0, "offset")
        validate_integer_param(10, "limit", min_value=1)

    @pytest.mark.parametrize("value,min_value", [(-1, 0), (0, 1), (True, 0), ("5", 0), (1.5, 0)])
    def test_invalid(self, value, min_value):
        with pytest.raises(ValueError, match="Invalid limit"):
            validate_integer_param(value, "limit", min_value=min_value)
