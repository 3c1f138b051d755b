"""
Error types for crudkit table schemas, field validation and sessions.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional


class CrudkitError(Exception):
    """Base exception for all crudkit errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class ConfigurationError(CrudkitError):
    """
    Raised when a table or column definition is inconsistent.

    Examples:
    - Duplicate api_name within a table
    - More than one column holding the active sort
    - Display-only column marked editable
    - Inverted length or number range
    """

    pass


# =============================================================================
# Field validation
# =============================================================================


class FieldValidationError(CrudkitError):
    """
    Raised (or returned) when a candidate value violates its column's value type.

    Subclasses carry a stable ``code`` so that callers can map failures
    to messages without matching on class names.
    """

    code = "invalid"

    def __init__(
        self,
        message: str,
        value: Any = None,
        context: Optional["ErrorContext"] = None,
    ):
        self.value = value
        super().__init__(message, context)


class LengthOutOfRange(FieldValidationError):
    """Text length is below the minimum or above the maximum."""

    code = "length_out_of_range"


class PatternMismatch(FieldValidationError):
    """Text does not match the column's regex."""

    code = "pattern_mismatch"


class RangeViolation(FieldValidationError):
    """Number lies outside the inclusive range."""

    code = "range_violation"


class NotInteger(FieldValidationError):
    """Number has a fractional part on an integer column."""

    code = "not_integer"


class StepMismatch(FieldValidationError):
    """Number is not reachable from the range base in whole steps."""

    code = "step_mismatch"


class NotAnOption(FieldValidationError):
    """Value is not one of the select options."""

    code = "not_an_option"


class EditNotPermitted(FieldValidationError):
    """Column is display-only and cannot be edited."""

    code = "edit_not_permitted"


class TypeMismatch(FieldValidationError):
    """Value has the wrong Python type for the column (e.g. text for a number)."""

    code = "type_mismatch"


# =============================================================================
# Session / backend
# =============================================================================


class SessionError(CrudkitError):
    """Base exception for authentication and backend communication failures."""

    pass


class IncorrectCredentials(SessionError):
    """Backend rejected the username/password pair (HTTP 401)."""

    pass


class ServerError(SessionError):
    """Backend answered with HTTP 500."""

    pass


class UnreachableServer(SessionError):
    """Transport failure: the backend could not be reached at all."""

    pass


class RefreshFailed(SessionError):
    """Login succeeded but the follow-up status refresh did not authenticate."""

    pass


class SettingsFetchError(SessionError):
    """A settings endpoint answered with a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


@dataclass
class ErrorContext:
    """
    Location of a configuration problem.

    Attributes:
        file: Definition file the table was loaded from
        table: Table name
        column: Column api_name
    """

    file: Path | None = None
    table: str | None = None
    column: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "tables.toml: table 'customers', column 'phone'"
        """
        parts = []
        if self.table:
            parts.append(f"table '{self.table}'")
        if self.column:
            parts.append(f"column '{self.column}'")
        location = ", ".join(parts)
        if self.file:
            return f"{self.file}: {location}" if location else str(self.file)
        return location


def make_configuration_error(
    message: str,
    file: Path | None = None,
    table: str | None = None,
    column: str | None = None,
) -> ConfigurationError:
    """
    Helper to create a ConfigurationError with optional context.

    Args:
        message: Error description
        file: Optional definition file path
        table: Optional table name
        column: Optional column api_name

    Returns:
        ConfigurationError with context if any location is provided
    """
    if file or table or column:
        return ConfigurationError(message, ErrorContext(file=file, table=table, column=column))
    return ConfigurationError(message)
