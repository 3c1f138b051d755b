"""Core crudkit functionality: table schema IR, field validation, display, loading, configuration."""

from . import ir
from .config import ClientConfig, load_config
from .display import CurrencyFormat, format_value
from .errors import (
    ConfigurationError,
    CrudkitError,
    ErrorContext,
    FieldValidationError,
    SessionError,
)
from .field_validator import FieldValidationResult, check_value, validate_value
from .loader import load_tables
from .schema_validator import validate_table, validate_tables

__all__ = [
    "ir",
    "ClientConfig",
    "load_config",
    "CurrencyFormat",
    "format_value",
    "CrudkitError",
    "ConfigurationError",
    "ErrorContext",
    "FieldValidationError",
    "SessionError",
    "FieldValidationResult",
    "check_value",
    "validate_value",
    "load_tables",
    "validate_table",
    "validate_tables",
]
