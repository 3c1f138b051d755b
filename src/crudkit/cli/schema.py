"""
Table definition commands: check a definition file, validate a value.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from crudkit.core.errors import ConfigurationError
from crudkit.core.field_validator import validate_value
from crudkit.core.ir import CrudTable, SelectType
from crudkit.core.loader import load_tables
from crudkit.core.schema_validator import validate_tables

console = Console()


def _load_or_exit(file: Path) -> list[CrudTable]:
    try:
        # Display maps are host-application code; render raw values instead
        return load_tables(file, fallback_display_map=str)
    except ConfigurationError as e:
        console.print(f"[red]Invalid table definitions:[/red] {e}")
        raise typer.Exit(1)


def check_command(
    file: Annotated[Path, typer.Argument(help="Table definition file (.json or .toml)")],
) -> None:
    """Load table definitions and report errors and warnings."""
    tables = _load_or_exit(file)
    errors, warnings = validate_tables(tables)

    column_count = sum(len(t.columns) for t in tables)
    console.print(f"Loaded {len(tables)} table(s), {column_count} column(s) from {file}")

    if errors or warnings:
        table = Table(title="Schema problems")
        table.add_column("Severity")
        table.add_column("Message")
        for message in errors:
            table.add_row("[red]error[/red]", message)
        for message in warnings:
            table.add_row("[yellow]warning[/yellow]", message)
        console.print(table)

    if errors:
        console.print(f"[red]✗ {len(errors)} error(s)[/red], {len(warnings)} warning(s)")
        raise typer.Exit(1)

    console.print(f"[green]✓ OK[/green] ({len(warnings)} warning(s))")


def _coerce_option(select: SelectType, raw: str) -> Any:
    """Map command-line text onto the matching select option, if any."""
    for option in select.options:
        if str(option) == raw:
            return option
    return raw


def validate_command(
    file: Annotated[Path, typer.Argument(help="Table definition file (.json or .toml)")],
    table_name: Annotated[str, typer.Argument(metavar="TABLE", help="Table name")],
    column_name: Annotated[str, typer.Argument(metavar="COLUMN", help="Column api_name")],
    value: Annotated[str, typer.Argument(help="Candidate value")],
) -> None:
    """Validate a value against a column's type."""
    tables = {t.name: t for t in _load_or_exit(file)}
    if table_name not in tables:
        console.print(f"[red]Unknown table '{table_name}'[/red]")
        raise typer.Exit(1)

    try:
        column = tables[table_name].column(column_name)
    except KeyError:
        console.print(f"[red]Unknown column '{column_name}' in table '{table_name}'[/red]")
        raise typer.Exit(1)

    # Numbers arrive as text; the validator parses numeric strings itself
    candidate: Any = value
    if isinstance(column.type, SelectType):
        candidate = _coerce_option(column.type, value)

    result = validate_value(column.type, candidate)
    if result.error is not None:
        console.print(f"[red]✗ {result.error.code}[/red]: {result.error.message}")
        raise typer.Exit(1)

    console.print(f"[green]✓ valid[/green] {column.display_name}: {value}")
