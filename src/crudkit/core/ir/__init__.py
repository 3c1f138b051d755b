"""
crudkit table schema types.

Value types, columns and tables are re-exported from this package.
"""

from .value_types import (
    VALUE_TYPE_TAGS,
    Accuracy,
    Align,
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
    ResizeMode,
    SelectType,
    SortKind,
    SortOrder,
    StringType,
    TextareaType,
    TimeType,
    is_text_type,
    parse_value_type,
    sort_kind,
)
from .columns import CrudColumn
from .table import CrudTable

__all__ = [
    "VALUE_TYPE_TAGS",
    "Accuracy",
    "Align",
    "CheckboxType",
    "CrudColumn",
    "CrudTable",
    "CrudValueType",
    "CurrencyType",
    "DateTimeType",
    "DateType",
    "DisplayOnlyType",
    "FileType",
    "ImageType",
    "NumberType",
    "PasswordType",
    "ResizeMode",
    "SelectType",
    "SortKind",
    "SortOrder",
    "StringType",
    "TextareaType",
    "TimeType",
    "is_text_type",
    "parse_value_type",
    "sort_kind",
]
