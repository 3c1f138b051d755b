"""
Tests for field-level value validation.

Covers every value type with constraints plus the error taxonomy exposed
through ``code`` and ``check_value``.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from crudkit.core import ir
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
from crudkit.core.field_validator import check_value, validate_value


def assert_fails(value_type: ir.CrudValueType, value: object, error: type) -> None:
    result = validate_value(value_type, value)
    assert not result.is_valid, f"{value!r} should be rejected"
    assert isinstance(result.error, error), f"got {type(result.error).__name__}"


def assert_valid(value_type: ir.CrudValueType, value: object) -> None:
    result = validate_value(value_type, value)
    assert result.is_valid, f"{value!r} rejected: {result.error}"
    assert result.error is None


# =============================================================================
# Text
# =============================================================================


class TestText:
    def test_optional_field_accepts_empty(self) -> None:
        vt = ir.StringType(length_range=(0, 10))
        assert_valid(vt, "")
        assert_valid(vt, None)

    def test_empty_optional_skips_pattern(self) -> None:
        assert_valid(ir.StringType(regex=r"[0-9]+", length_range=(0, 10)), "")

    def test_max_plus_one_rejected(self) -> None:
        vt = ir.StringType(length_range=(0, 10))
        assert_valid(vt, "x" * 10)
        assert_fails(vt, "x" * 11, LengthOutOfRange)

    def test_required_field_rejects_empty(self) -> None:
        assert_fails(ir.StringType(length_range=(1, None)), "", LengthOutOfRange)

    def test_unbounded_maximum(self) -> None:
        assert_valid(ir.TextareaType(length_range=(1, None)), "x" * 10_000)

    def test_pattern_must_match_whole_value(self) -> None:
        vt = ir.StringType(regex=r"[0-9]+")
        assert_valid(vt, "12345")
        assert_fails(vt, "12a45", PatternMismatch)
        assert_fails(vt, "123 ", PatternMismatch)

    def test_length_checked_before_pattern(self) -> None:
        assert_fails(ir.StringType(regex=r"[a-z]+", length_range=(0, 3)), "ABCDE", LengthOutOfRange)

    def test_textarea_same_semantics(self) -> None:
        assert_fails(ir.TextareaType(length_range=(2, 4)), "a", LengthOutOfRange)

    def test_non_text_rejected(self) -> None:
        assert_fails(ir.StringType(), 12, TypeMismatch)


# =============================================================================
# Number
# =============================================================================


class TestNumber:
    def test_in_range(self) -> None:
        vt = ir.NumberType(range=(0, 100))
        assert_valid(vt, 0)
        assert_valid(vt, 100)
        assert_valid(vt, 55.5)

    def test_out_of_range(self) -> None:
        vt = ir.NumberType(range=(0, 100))
        assert_fails(vt, -1, RangeViolation)
        assert_fails(vt, 100.01, RangeViolation)

    def test_missing_bounds_are_unbounded(self) -> None:
        assert_valid(ir.NumberType(range=(None, 10)), -1_000_000)
        assert_valid(ir.NumberType(range=(0, None)), 1e12)

    def test_integer_rejects_fraction(self) -> None:
        vt = ir.NumberType(integer=True)
        assert_valid(vt, 4)
        assert_valid(vt, 4.0)
        assert_fails(vt, 4.5, NotInteger)

    def test_step_from_minimum(self) -> None:
        vt = ir.NumberType(range=(0, 100), integer=True, step=5)
        assert_valid(vt, 35)
        assert_fails(vt, 37, StepMismatch)

    def test_step_base_is_minimum(self) -> None:
        vt = ir.NumberType(range=(1, None), step=2)
        assert_valid(vt, 3)
        assert_fails(vt, 4, StepMismatch)

    def test_step_without_minimum_uses_zero(self) -> None:
        vt = ir.NumberType(step=0.25)
        assert_valid(vt, -0.75)
        assert_fails(vt, 0.3, StepMismatch)

    def test_decimal_step_has_no_float_drift(self) -> None:
        assert_valid(ir.NumberType(step=0.1), 0.3)

    def test_step_on_values_wider_than_decimal_precision(self) -> None:
        vt = ir.NumberType(integer=True, step=5)
        assert_valid(vt, 10**30)
        assert_fails(vt, 10**30 + 1, StepMismatch)
        assert_valid(ir.NumberType(step=0.5), "1e40")

    def test_range_checked_first(self) -> None:
        assert_fails(ir.NumberType(range=(0, 10), integer=True, step=5), 12.5, RangeViolation)

    def test_numeric_strings_and_decimals(self) -> None:
        vt = ir.NumberType(range=(0, 10))
        assert_valid(vt, "7.5")
        assert_valid(vt, Decimal("2"))

    @pytest.mark.parametrize("value", [None, "abc", True, [], "nan"])
    def test_non_numbers_rejected(self, value: object) -> None:
        assert_fails(ir.NumberType(), value, TypeMismatch)


# =============================================================================
# Select and the rest
# =============================================================================


class TestSelect:
    def test_every_option_valid(self) -> None:
        vt = ir.SelectType(options=["draft", "issued", 3])
        for option in vt.options:
            assert_valid(vt, option)

    def test_non_option_rejected(self) -> None:
        assert_fails(ir.SelectType(options=["draft", "issued"]), "void", NotAnOption)

    def test_bool_does_not_match_numeric_option(self) -> None:
        vt = ir.SelectType(options=[1, 2])
        assert_fails(vt, True, NotAnOption)
        assert_valid(vt, 1)

    def test_bool_option_matches_bool(self) -> None:
        vt = ir.SelectType(options=[True, False])
        assert_valid(vt, False)
        assert_fails(vt, 0, NotAnOption)


class TestOtherTypes:
    def test_display_only_never_editable(self) -> None:
        assert_fails(ir.DisplayOnlyType(), "anything", EditNotPermitted)

    @pytest.mark.parametrize(
        "value_type",
        [
            ir.CurrencyType(),
            ir.CheckboxType(),
            ir.DateType(),
            ir.TimeType(),
            ir.DateTimeType(),
            ir.FileType(),
            ir.ImageType(),
            ir.PasswordType(),
        ],
    )
    def test_unconstrained_types_accept(self, value_type: ir.CrudValueType) -> None:
        assert_valid(value_type, "whatever")


class TestCheckValue:
    def test_raises_error(self) -> None:
        with pytest.raises(StepMismatch) as exc_info:
            check_value(ir.NumberType(range=(0, 100), step=5), 37)
        assert exc_info.value.code == "step_mismatch"
        assert exc_info.value.value == 37

    def test_passes_silently(self) -> None:
        check_value(ir.SelectType(options=["a"]), "a")

    def test_errors_share_base(self) -> None:
        with pytest.raises(FieldValidationError):
            check_value(ir.StringType(length_range=(3, None)), "ab")
