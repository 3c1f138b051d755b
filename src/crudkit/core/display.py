"""
Default read-display formatting for column values.

Used by ``CrudColumn.display`` when the column carries no display_map_fn.
Every function here is pure.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, assert_never

from crudkit.core.ir.value_types import (
    Accuracy,
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

PASSWORD_MASK = "••••••••"


@dataclass(frozen=True)
class CurrencyFormat:
    """Currency rendering rules, normally populated from backend settings."""

    prefix: str = ""
    suffix: str = ""
    decimal_places: int = 2
    decimal_separator: str = "."
    thousand_separator: str = ","

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> CurrencyFormat:
        """Build from a ``{setting_key: plain value}`` mapping.

        Missing keys keep their defaults.
        """
        defaults = cls()
        return cls(
            prefix=str(settings.get("currency_prefix", defaults.prefix)),
            suffix=str(settings.get("currency_suffix", defaults.suffix)),
            decimal_places=int(settings.get("currency_decimal_places", defaults.decimal_places)),
            decimal_separator=str(
                settings.get("currency_decimal_separator", defaults.decimal_separator)
            ),
            thousand_separator=str(
                settings.get("currency_thousand_separator", defaults.thousand_separator)
            ),
        )

    def format(self, amount: Any) -> str:
        try:
            value = Decimal(str(amount))
        except InvalidOperation:
            return str(amount)

        quantum = Decimal(1).scaleb(-self.decimal_places)
        value = value.quantize(quantum, rounding=ROUND_HALF_UP)
        sign = "-" if value < 0 else ""
        whole, _, fraction = f"{abs(value):f}".partition(".")

        groups = []
        while len(whole) > 3:
            groups.insert(0, whole[-3:])
            whole = whole[:-3]
        groups.insert(0, whole)
        text = self.thousand_separator.join(groups)
        if self.decimal_places > 0:
            text = f"{text}{self.decimal_separator}{fraction}"
        return f"{sign}{self.prefix}{text}{self.suffix}"


def truncate_datetime(value: datetime, accuracy: Accuracy) -> datetime:
    """Drop every component finer than ``accuracy``."""
    if accuracy == Accuracy.DAY:
        return value.replace(hour=0, minute=0, second=0, microsecond=0)
    if accuracy == Accuracy.HOUR:
        return value.replace(minute=0, second=0, microsecond=0)
    if accuracy == Accuracy.MINUTE:
        return value.replace(second=0, microsecond=0)
    return value.replace(microsecond=0)


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def _format_number(value_type: NumberType, value: Any) -> str:
    if value_type.integer:
        try:
            return str(int(Decimal(str(value)).to_integral_value(rounding=ROUND_HALF_UP)))
        except (InvalidOperation, ValueError):
            return str(value)
    return str(value)


def format_value(
    value_type: CrudValueType,
    value: Any,
    currency: CurrencyFormat | None = None,
) -> str:
    """
    Format a raw backend value for read display.

    Args:
        value_type: The column's value type
        value: Raw value as returned by the backend
        currency: Currency rules; defaults apply when omitted

    Returns:
        Display text ("" for missing values)
    """
    if value is None:
        return ""

    match value_type:
        case NumberType():
            return _format_number(value_type, value)
        case CurrencyType():
            return (currency or CurrencyFormat()).format(value)
        case CheckboxType():
            return "Yes" if value else "No"
        case DateTimeType():
            parsed = _as_datetime(value)
            if parsed is None:
                return str(value)
            return truncate_datetime(parsed, value_type.accuracy).strftime(value_type.format)
        case DateType():
            if isinstance(value, date | datetime):
                return value.isoformat()[:10]
            return str(value)
        case TimeType():
            if isinstance(value, time):
                return value.isoformat(timespec="minutes")
            return str(value)
        case PasswordType():
            return PASSWORD_MASK
        case (
            StringType()
            | TextareaType()
            | SelectType()
            | FileType()
            | ImageType()
            | DisplayOnlyType()
        ):
            return str(value)
        case _:
            assert_never(value_type)


def middle_ellipsis(text: str, max_length: int) -> str:
    """Shorten ``text`` by replacing its middle with '...'."""
    if len(text) <= max_length:
        return text
    half = max_length // 2
    return text[:half] + "..." + text[len(text) - half :]


def utc_to_local_iso(iso_string: str) -> str:
    """Convert a UTC ISO timestamp to a naive local-time ISO string.

    Suitable for ``datetime-local`` inputs, which take no offset.
    """
    parsed = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone().replace(tzinfo=None).isoformat(timespec="milliseconds")
