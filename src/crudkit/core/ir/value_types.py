"""
Value type definitions for crudkit columns.

A column's value type is a closed tagged union: the ``type`` tag selects
the variant and each variant carries only the constraint payload that makes
sense for it. The union drives both read display and edit-form generation.

Wire form (as exchanged with renderers and table definition files) is
adjacently tagged:

    {"type": "string", "data": {"regex": null, "length_range": [0, 64]}}
    {"type": "checkbox"}

The flat form ``{"type": "string", "length_range": [0, 64]}`` is accepted too.

Examples:
    - StringType(length_range=(1, 200))
    - NumberType(range=(0, 100), integer=True, step=5)
    - SelectType(options=["draft", "issued"])
    - DateTimeType(accuracy=Accuracy.MINUTE, format="%d/%m/%y %H:%M")
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

from crudkit.core.errors import ConfigurationError


class SortOrder(StrEnum):
    """Direction of the active sort on a table."""

    ASC = "asc"
    DESC = "desc"


class Align(StrEnum):
    """Horizontal alignment hint for renderers."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class Accuracy(StrEnum):
    """Precision a datetime is truncated to before formatting."""

    DAY = "day"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"


class ResizeMode(StrEnum):
    """Resize handle allowed on a textarea."""

    NONE = "none"
    BOTH = "both"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class SortKind(StrEnum):
    """How values of a type compare when a list request sorts on them."""

    LEXICAL = "lexical"
    NUMERIC = "numeric"
    TEMPORAL = "temporal"
    BOOLEAN = "boolean"
    UNSORTABLE = "unsortable"


# =============================================================================
# Variants
# =============================================================================


class _ValueTypeBase(BaseModel):
    """Shared behaviour: wire-form input and output."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="before")
    @classmethod
    def _lift_data_payload(cls, raw: Any) -> Any:
        # {"type": ..., "data": {...}} -> {"type": ..., **data}
        if isinstance(raw, dict) and "data" in raw:
            payload = raw["data"] or {}
            if not isinstance(payload, dict):
                raise ValueError("'data' payload must be an object")
            lifted = {k: v for k, v in raw.items() if k != "data"}
            lifted.update(payload)
            return lifted
        return raw

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the adjacently tagged form."""
        payload = self.model_dump(mode="json", exclude={"type"})
        if payload:
            return {"type": self.type, "data": payload}  # type: ignore[attr-defined]
        return {"type": self.type}  # type: ignore[attr-defined]


def _check_length_range(value: tuple[int, int | None]) -> tuple[int, int | None]:
    low, high = value
    if low < 0:
        raise ConfigurationError(f"length_range minimum must be >= 0, got {low}")
    if high is not None and high < low:
        raise ConfigurationError(f"length_range maximum {high} is below minimum {low}")
    return value


def _check_regex(value: str | None) -> str | None:
    if value is not None:
        try:
            re.compile(value)
        except re.error as e:
            raise ConfigurationError(f"regex {value!r} does not compile: {e}") from e
    return value


class StringType(_ValueTypeBase):
    """Single-line text. A ``length_range`` minimum of 0 makes the field optional."""

    type: Literal["string"] = "string"
    regex: str | None = None
    # Inclusive; None maximum means unbounded
    length_range: tuple[int, int | None] = (0, None)

    @field_validator("regex")
    @classmethod
    def validate_regex(cls, v: str | None) -> str | None:
        return _check_regex(v)

    @field_validator("length_range")
    @classmethod
    def validate_length_range(cls, v: tuple[int, int | None]) -> tuple[int, int | None]:
        return _check_length_range(v)


class TextareaType(_ValueTypeBase):
    """Multi-line text with the same length semantics as ``string``."""

    type: Literal["textarea"] = "textarea"
    regex: str | None = None
    length_range: tuple[int, int | None] = (0, None)
    resize: ResizeMode = ResizeMode.VERTICAL

    @field_validator("regex")
    @classmethod
    def validate_regex(cls, v: str | None) -> str | None:
        return _check_regex(v)

    @field_validator("length_range")
    @classmethod
    def validate_length_range(cls, v: tuple[int, int | None]) -> tuple[int, int | None]:
        return _check_length_range(v)


class NumberType(_ValueTypeBase):
    """
    Numeric input.

    ``range`` bounds are inclusive and each may be None (unbounded).
    ``integer`` overrides any decimal-place formatting.
    ``step`` constrains values to ``min + k * step`` (base 0 when unbounded below).
    """

    type: Literal["number"] = "number"
    range: tuple[float | None, float | None] = (None, None)
    integer: bool = False
    step: float | None = None

    @field_validator("range")
    @classmethod
    def validate_range(
        cls, v: tuple[float | None, float | None]
    ) -> tuple[float | None, float | None]:
        low, high = v
        if low is not None and high is not None and high < low:
            raise ConfigurationError(f"range maximum {high} is below minimum {low}")
        return v

    @field_validator("step")
    @classmethod
    def validate_step(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ConfigurationError(f"step must be positive, got {v}")
        return v


class CurrencyType(_ValueTypeBase):
    """Monetary amount, formatted from the currency settings."""

    type: Literal["currency"] = "currency"


class SelectType(_ValueTypeBase):
    """One value out of an ordered list of options."""

    type: Literal["select"] = "select"
    options: list[Any]

    @field_validator("options")
    @classmethod
    def validate_options(cls, v: list[Any]) -> list[Any]:
        if not v:
            raise ConfigurationError("select type needs at least one option")
        return v


class CheckboxType(_ValueTypeBase):
    type: Literal["checkbox"] = "checkbox"


class DateType(_ValueTypeBase):
    type: Literal["date"] = "date"


class TimeType(_ValueTypeBase):
    type: Literal["time"] = "time"


class DateTimeType(_ValueTypeBase):
    """Timestamp, truncated to ``accuracy`` and rendered with a strftime ``format``."""

    type: Literal["datetime"] = "datetime"
    accuracy: Accuracy = Accuracy.MINUTE
    format: str = "%Y-%m-%d %H:%M"


class FileType(_ValueTypeBase):
    type: Literal["file"] = "file"


class ImageType(_ValueTypeBase):
    type: Literal["image"] = "image"


class PasswordType(_ValueTypeBase):
    type: Literal["password"] = "password"


class DisplayOnlyType(_ValueTypeBase):
    """Rendered through the column's display_map_fn; never editable."""

    type: Literal["use_display_map_fn_and_no_edit"] = "use_display_map_fn_and_no_edit"


CrudValueType = Annotated[
    StringType
    | NumberType
    | CurrencyType
    | SelectType
    | CheckboxType
    | DateType
    | TimeType
    | DateTimeType
    | FileType
    | ImageType
    | PasswordType
    | TextareaType
    | DisplayOnlyType,
    Field(discriminator="type"),
]

VALUE_TYPE_TAGS: tuple[str, ...] = (
    "string",
    "number",
    "currency",
    "select",
    "checkbox",
    "date",
    "time",
    "datetime",
    "file",
    "image",
    "password",
    "textarea",
    "use_display_map_fn_and_no_edit",
)

SORT_KINDS: dict[str, SortKind] = {
    "string": SortKind.LEXICAL,
    "textarea": SortKind.LEXICAL,
    "select": SortKind.LEXICAL,
    "number": SortKind.NUMERIC,
    "currency": SortKind.NUMERIC,
    "checkbox": SortKind.BOOLEAN,
    "date": SortKind.TEMPORAL,
    "time": SortKind.TEMPORAL,
    "datetime": SortKind.TEMPORAL,
    "file": SortKind.UNSORTABLE,
    "image": SortKind.UNSORTABLE,
    "password": SortKind.UNSORTABLE,
    # Ordering follows the raw backend value, not the mapped display text
    "use_display_map_fn_and_no_edit": SortKind.LEXICAL,
}

_value_type_adapter: TypeAdapter[CrudValueType] = TypeAdapter(CrudValueType)


def parse_value_type(raw: Any) -> CrudValueType:
    """Parse a wire or flat dict (or an existing variant) into a value type."""
    if isinstance(raw, _ValueTypeBase):
        return raw  # type: ignore[return-value]
    return _value_type_adapter.validate_python(raw)


def sort_kind(value_type: CrudValueType) -> SortKind:
    """Get the sort semantics for a value type."""
    return SORT_KINDS[value_type.type]


def is_text_type(value_type: CrudValueType) -> bool:
    """Check if the type is free text (string or textarea)."""
    return isinstance(value_type, StringType | TextareaType)
