"""
Semantic validation for crudkit table definitions.

Construction already rejects definitions that can never work (duplicate
api_name, two sorted columns, an editable display-only column, inverted
ranges). This module reports the problems a constructed table can still
have, split into errors and warnings.
"""

from . import ir
from .ir.value_types import SortKind

# Value types whose values make no sense as free-text search targets
UNSEARCHABLE_TAGS = frozenset({"password", "file", "image"})


def validate_columns(table: ir.CrudTable) -> tuple[list[str], list[str]]:
    """
    Validate every column of a table.

    Checks:
    - Sorted columns have a sortable type
    - Select options are unique
    - Integer number columns have whole-number bounds and step
    - Search flags are meaningful for the type
    - readonly is only set on columns shown in the edit form
    - Display-only columns have a display_map_fn

    Returns:
        Tuple of (errors, warnings)
    """
    errors = []
    warnings = []

    for col in table.columns:
        where = f"Table '{table.name}' column '{col.api_name}'"
        vt = col.type

        if col.current_sort is not None and ir.sort_kind(vt) == SortKind.UNSORTABLE:
            errors.append(f"{where} is sorted but type '{vt.type}' is not sortable")

        if isinstance(vt, ir.SelectType):
            seen = []
            for option in vt.options:
                if option in seen:
                    errors.append(f"{where} has duplicate select option {option!r}")
                seen.append(option)

        if isinstance(vt, ir.NumberType) and vt.integer:
            low, high = vt.range
            for label, bound in (("minimum", low), ("maximum", high), ("step", vt.step)):
                if bound is not None and bound != int(bound):
                    errors.append(
                        f"{where} is integer but its {label} {bound} is not a whole number"
                    )

        if col.searchable and vt.type in UNSEARCHABLE_TAGS:
            warnings.append(f"{where} is searchable but '{vt.type}' values cannot be searched")

        if col.searchable and isinstance(vt, ir.DisplayOnlyType) and not col.search_nested:
            warnings.append(
                f"{where} is display-only and searchable without search_nested; "
                "search matches raw values, not the mapped text"
            )

        if col.search_nested and not col.searchable:
            warnings.append(
                f"{where} sets search_nested but is not searchable; the path is ignored"
            )

        if col.readonly and not col.edit:
            warnings.append(f"{where} is readonly but not in the edit form; readonly has no effect")

        if isinstance(vt, ir.DisplayOnlyType) and col.display_map_fn is None:
            warnings.append(
                f"{where} is display-only but has no display_map_fn; raw values will be shown"
            )

        if isinstance(vt, ir.PasswordType) and col.is_visible:
            warnings.append(f"{where} shows a password column in the table view")

    return errors, warnings


def validate_table(table: ir.CrudTable) -> tuple[list[str], list[str]]:
    """
    Validate a table definition for semantic correctness.

    Returns:
        Tuple of (errors, warnings)
    """
    errors, warnings = validate_columns(table)

    if not table.columns:
        errors.append(f"Table '{table.name}' has no columns")
    elif not table.visible_columns:
        warnings.append(f"Table '{table.name}' has no visible columns (all display_name unset)")

    request_names = [c.request_name for c in table.columns]
    clashes = sorted({n for n in request_names if request_names.count(n) > 1})
    if clashes:
        errors.append(
            f"Table '{table.name}' has columns sharing a request name: {', '.join(clashes)}"
        )

    return errors, warnings


def validate_tables(tables: list[ir.CrudTable]) -> tuple[list[str], list[str]]:
    """Validate several tables, also checking that table names are unique."""
    errors: list[str] = []
    warnings: list[str] = []

    names = [t.name for t in tables]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        errors.append(f"Duplicate table names: {', '.join(duplicates)}")

    for table in tables:
        table_errors, table_warnings = validate_table(table)
        errors.extend(table_errors)
        warnings.extend(table_warnings)

    return errors, warnings
