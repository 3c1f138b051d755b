"""
Table definitions: an ordered set of columns plus the coordination rules
that span columns (identity uniqueness, single active sort, edit payloads).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from crudkit.core.errors import ConfigurationError, ErrorContext, FieldValidationError
from crudkit.core.ir.columns import CrudColumn
from crudkit.core.ir.value_types import SortOrder

# toggle_sort cycle: unsorted -> ascending -> descending -> unsorted
_NEXT_SORT: dict[SortOrder | None, SortOrder | None] = {
    None: SortOrder.ASC,
    SortOrder.ASC: SortOrder.DESC,
    SortOrder.DESC: None,
}


class CrudTable(BaseModel):
    """
    Complete column configuration for one entity's table.

    Attributes:
        name: Table identifier (usually the entity or endpoint name)
        columns: Columns in display order
    """

    name: str
    columns: list[CrudColumn] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def validate_columns(self) -> CrudTable:
        """Enforce unique api_name and at most one sorted column."""
        names = [c.api_name for c in self.columns]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigurationError(
                f"duplicate api_name values: {', '.join(duplicates)}",
                ErrorContext(table=self.name),
            )

        sorted_columns = [c.api_name for c in self.columns if c.current_sort is not None]
        if len(sorted_columns) > 1:
            raise ConfigurationError(
                f"more than one column holds the active sort: {', '.join(sorted_columns)}",
                ErrorContext(table=self.name),
            )
        return self

    # =========================================================================
    # Read access
    # =========================================================================

    def column(self, api_name: str) -> CrudColumn:
        """Get a column by api_name.

        Raises:
            KeyError: If no column has that api_name
        """
        for col in self.columns:
            if col.api_name == api_name:
                return col
        raise KeyError(f"Table '{self.name}' has no column '{api_name}'")

    @property
    def visible_columns(self) -> list[CrudColumn]:
        return [c for c in self.columns if c.is_visible]

    @property
    def edit_columns(self) -> list[CrudColumn]:
        """Columns rendered in the edit form (including readonly ones)."""
        return [c for c in self.columns if c.edit]

    @property
    def searchable_columns(self) -> list[CrudColumn]:
        return [c for c in self.columns if c.searchable]

    @property
    def search_fields(self) -> list[str]:
        """Field paths a list-request builder should match search text against."""
        return [c.search_field for c in self.columns if c.search_field is not None]

    @property
    def sorted_column(self) -> CrudColumn | None:
        """The column currently holding the sort, if any."""
        for col in self.columns:
            if col.current_sort is not None:
                return col
        return None

    # =========================================================================
    # Sort coordination
    # =========================================================================

    def set_sort(self, api_name: str, order: SortOrder | None) -> None:
        """
        Make ``api_name`` the only sorted column (or clear it with ``order=None``).

        Raises:
            KeyError: If the column does not exist
            ConfigurationError: If the column's type cannot be sorted
        """
        target = self.column(api_name)
        if order is not None and not target.sortable:
            raise ConfigurationError(
                f"type '{target.type.type}' is not sortable",
                ErrorContext(table=self.name, column=api_name),
            )
        for col in self.columns:
            if col is not target and col.current_sort is not None:
                col.current_sort = None
        target.current_sort = order

    def toggle_sort(self, api_name: str) -> SortOrder | None:
        """Advance a column through unsorted -> asc -> desc -> unsorted.

        Returns:
            The column's new sort direction
        """
        order = _NEXT_SORT[self.column(api_name).current_sort]
        self.set_sort(api_name, order)
        return order

    def sort_request(self) -> list[dict[str, str]]:
        """Sort clause for a list request: ``[{"column", "order"}]`` or empty."""
        col = self.sorted_column
        if col is None or col.current_sort is None:
            return []
        return [{"column": col.request_name, "order": col.current_sort.value}]

    # =========================================================================
    # Edit payloads
    # =========================================================================

    def submission_payload(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """
        Filter a draft record down to what may be submitted.

        Keys that are not columns, columns with ``edit=False`` and
        ``readonly`` columns are dropped.
        """
        submittable = {c.api_name for c in self.columns if c.is_submittable}
        return {k: v for k, v in values.items() if k in submittable}

    def validate_record(self, values: Mapping[str, Any]) -> dict[str, FieldValidationError]:
        """
        Validate every submittable value in a draft record.

        Returns:
            Mapping of api_name to the first error found for that column;
            empty when the record may be submitted.
        """
        from crudkit.core.field_validator import validate_value

        errors: dict[str, FieldValidationError] = {}
        for api_name, value in self.submission_payload(values).items():
            result = validate_value(self.column(api_name).type, value)
            if result.error is not None:
                errors[api_name] = result.error
        return errors
