"""
Field-level validation of candidate values against a column's value type.

Validation is a pure function over (value type, value). It never contacts
the backend; a failing result blocks submission of the edit form.

Usage:
    result = validate_value(NumberType(range=(0, 100), integer=True, step=5), 37)
    if not result.is_valid:
        print(result.error.code)  # "step_mismatch"
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any, assert_never

from crudkit.core.errors import (
    EditNotPermitted,
    FieldValidationError,
    LengthOutOfRange,
    NotAnOption,
    NotInteger,
    PatternMismatch,
    RangeViolation,
    StepMismatch,
    TypeMismatch,
)
from crudkit.core.ir.value_types import (
    CheckboxType,
    CrudValueType,
    CurrencyType,
    DateTimeType,
    DateType,
    DisplayOnlyType,
    FileType,
    ImageType,
    NumberType,
    PasswordType,
    SelectType,
    StringType,
    TextareaType,
    TimeType,
)

# =============================================================================
# Validation Result
# =============================================================================


@dataclass
class FieldValidationResult:
    """Result of validating one value."""

    is_valid: bool
    error: FieldValidationError | None = None

    @classmethod
    def success(cls) -> FieldValidationResult:
        """Create a successful validation result."""
        return cls(is_valid=True)

    @classmethod
    def failure(cls, error: FieldValidationError) -> FieldValidationResult:
        """Create a failed validation result."""
        return cls(is_valid=False, error=error)


# =============================================================================
# Per-type checks
# =============================================================================


def _validate_text(value_type: StringType | TextareaType, value: Any) -> FieldValidationResult:
    if value is None:
        value = ""
    if not isinstance(value, str):
        return FieldValidationResult.failure(
            TypeMismatch(f"Expected text, got {type(value).__name__}", value)
        )

    low, high = value_type.length_range
    length = len(value)

    # A zero minimum marks the field optional: empty input skips every other check
    if length == 0 and low == 0:
        return FieldValidationResult.success()

    if length < low or (high is not None and length > high):
        bounds = f"{low}..{high}" if high is not None else f"at least {low}"
        return FieldValidationResult.failure(
            LengthOutOfRange(f"Length {length} is outside {bounds}", value)
        )

    if value_type.regex is not None and re.fullmatch(value_type.regex, value) is None:
        return FieldValidationResult.failure(
            PatternMismatch(f"Value does not match pattern {value_type.regex!r}", value)
        )

    return FieldValidationResult.success()


def _to_decimal(value: Any) -> Decimal | None:
    """Convert a candidate number to Decimal; None if it is not numeric."""
    # bool is an int subclass but never a meaningful number here
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float | Decimal):
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            return None
    else:
        return None
    return number if number.is_finite() else None


def _validate_number(value_type: NumberType, value: Any) -> FieldValidationResult:
    number = _to_decimal(value)
    if number is None:
        return FieldValidationResult.failure(TypeMismatch(f"Expected a number, got {value!r}", value))

    low, high = value_type.range
    low_d = Decimal(str(low)) if low is not None else None
    high_d = Decimal(str(high)) if high is not None else None

    if (low_d is not None and number < low_d) or (high_d is not None and number > high_d):
        return FieldValidationResult.failure(
            RangeViolation(f"{number} is outside [{low}, {high}]", value)
        )

    if value_type.integer and number != number.to_integral_value():
        return FieldValidationResult.failure(NotInteger(f"{number} is not a whole number", value))

    if value_type.step is not None:
        step = Decimal(str(value_type.step))
        base = low_d if low_d is not None else Decimal(0)
        # Fraction keeps this exact for values wider than the decimal context
        if (Fraction(number) - Fraction(base)) % Fraction(step) != 0:
            return FieldValidationResult.failure(
                StepMismatch(f"{number} is not {base} plus a multiple of {step}", value)
            )

    return FieldValidationResult.success()


def _is_option(value: Any, options: list[Any]) -> bool:
    # True == 1 in Python; a bool only matches a bool option
    return any(
        option == value and isinstance(option, bool) == isinstance(value, bool)
        for option in options
    )


def _validate_select(value_type: SelectType, value: Any) -> FieldValidationResult:
    if not _is_option(value, value_type.options):
        return FieldValidationResult.failure(
            NotAnOption(f"{value!r} is not one of the allowed options", value)
        )
    return FieldValidationResult.success()


# =============================================================================
# Public API
# =============================================================================


def validate_value(value_type: CrudValueType, value: Any) -> FieldValidationResult:
    """
    Check whether ``value`` is acceptable for a column of ``value_type``.

    Args:
        value_type: The column's value type
        value: Candidate value from the edit form

    Returns:
        FieldValidationResult; ``error`` carries the first violation found
    """
    match value_type:
        case StringType() | TextareaType():
            return _validate_text(value_type, value)
        case NumberType():
            return _validate_number(value_type, value)
        case SelectType():
            return _validate_select(value_type, value)
        case DisplayOnlyType():
            return FieldValidationResult.failure(
                EditNotPermitted("Display-only columns cannot be edited", value)
            )
        case (
            CurrencyType()
            | CheckboxType()
            | DateType()
            | TimeType()
            | DateTimeType()
            | FileType()
            | ImageType()
            | PasswordType()
        ):
            # Widget-level constraints (file type, date pickers) live outside this core
            return FieldValidationResult.success()
        case _:
            assert_never(value_type)


def check_value(value_type: CrudValueType, value: Any) -> None:
    """Like validate_value, but raise the FieldValidationError on failure."""
    result = validate_value(value_type, value)
    if result.error is not None:
        raise result.error
