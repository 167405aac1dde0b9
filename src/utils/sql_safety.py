"""
SQL safety utilities for preventing SQL injection.

Identifiers and literals are never validated against an allow-list here:
they are quoted by the dialect. These checks reject the inputs no quoting
rule can make safe.
"""

from .exceptions import InvalidIdentifierError


def validate_identifier(identifier: str) -> None:
    """
    Validate a SQL identifier before quoting.

    Args:
        identifier: The identifier to validate

    Raises:
        InvalidIdentifierError: If the identifier is empty, not a string,
            or contains a NUL byte
    """
    if not isinstance(identifier, str):
        raise InvalidIdentifierError(
            f"SQL identifier must be a string, got {type(identifier).__name__}"
        )

    if not identifier:
        raise InvalidIdentifierError("SQL identifier cannot be empty")

    if "\x00" in identifier:
        raise InvalidIdentifierError(
            f"Invalid SQL identifier: {identifier!r}. NUL bytes are not allowed."
        )


def validate_string_literal(value: str) -> None:
    """
    Validate a string literal before quoting.

    Raises:
        InvalidIdentifierError: If the value is not a string or contains a NUL byte
    """
    if not isinstance(value, str):
        raise InvalidIdentifierError(
            f"SQL string literal must be a string, got {type(value).__name__}"
        )

    if "\x00" in value:
        raise InvalidIdentifierError("SQL string literal cannot contain NUL bytes")


def validate_integer_param(value: int, param_name: str, min_value: int = 0) -> None:
    """
    Validate an integer parameter for SQL queries.

    Args:
        value: The value to validate
        param_name: Name of the parameter (for error messages)
        min_value: Minimum allowed value (default 0)

    Raises:
        ValueError: If the value is not a valid integer or below minimum
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(
            f"Invalid {param_name}: {value!r}. Must be an integer."
        )

    if value < min_value:
        raise ValueError(
            f"Invalid {param_name}: {value}. Must be >= {min_value}."
        )
