"""
Column definitions for crudkit tables.

A CrudColumn describes one displayable field of an entity: how it is
identified on the wire, whether and how it is shown, sorted, searched and
edited. Columns are static configuration; the only field that changes after
construction is ``current_sort``, which the owning table toggles.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from crudkit.core.errors import ConfigurationError
from crudkit.core.ir.value_types import (
    Align,
    CrudValueType,
    DisplayOnlyType,
    SortKind,
    SortOrder,
    sort_kind,
)

if TYPE_CHECKING:
    from crudkit.core.display import CurrencyFormat

# Fields a table coordinator may reassign after construction
_MUTABLE_FIELDS = frozenset({"current_sort"})


class CrudColumn(BaseModel):
    """
    Specification for a single table column.

    Attributes:
        api_name: Field name in records returned by the backend (identity key)
        api_request_name: Name used in list/sort/search requests; falls back to api_name
        display_name: Header text; None hides the column from the table view
        display_map_fn: Pure ``value -> str`` formatter, the sole display path when set
        current_sort: Active sort direction, if this column is the sort key
        type: Value type driving display and edit-form generation
        edit: Whether the column appears in the edit form
        readonly: Shown in the edit form but disabled; value is server-authoritative
        searchable: Whether free-text search matches against this column
        search_nested: Path of a nested/related field to search instead
        align: Horizontal alignment hint
    """

    api_name: str
    api_request_name: str | None = None
    display_name: str | None = None
    display_map_fn: Callable[[Any], str] | None = Field(default=None, exclude=True)
    current_sort: SortOrder | None = None
    type: CrudValueType
    edit: bool = False
    readonly: bool = False
    searchable: bool = False
    search_nested: str | None = None
    align: Align | None = None

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    @model_validator(mode="after")
    def validate_display_only(self) -> CrudColumn:
        """Display-only columns cannot be editable."""
        if isinstance(self.type, DisplayOnlyType) and self.edit:
            raise ConfigurationError(
                f"Column '{self.api_name}' uses {self.type.type} and cannot set edit=true"
            )
        return self

    def __setattr__(self, name: str, value: Any) -> None:
        if name in type(self).model_fields and name not in _MUTABLE_FIELDS:
            raise AttributeError(f"CrudColumn.{name} is immutable after construction")
        super().__setattr__(name, value)

    @property
    def request_name(self) -> str:
        """Name to use when building list, sort and search requests."""
        return self.api_request_name or self.api_name

    @property
    def is_visible(self) -> bool:
        """Check if the column is shown in the table view."""
        return self.display_name is not None

    @property
    def is_submittable(self) -> bool:
        """Check if the column's value belongs in an edit submission."""
        return self.edit and not self.readonly

    @property
    def sortable(self) -> bool:
        """Check if list requests can sort on this column."""
        return sort_kind(self.type) != SortKind.UNSORTABLE

    @property
    def search_field(self) -> str | None:
        """Field path free-text search should match, or None if not searchable."""
        if not self.searchable:
            return None
        return self.search_nested or self.request_name

    def display(self, value: Any, currency: CurrencyFormat | None = None) -> str:
        """Render a raw value for read display."""
        from crudkit.core.display import format_value

        if self.display_map_fn is not None:
            return self.display_map_fn(value)
        return format_value(self.type, value, currency)
