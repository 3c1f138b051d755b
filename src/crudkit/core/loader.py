"""
Load table definitions from JSON or TOML files.

File layout (TOML shown; JSON uses the same structure):

    [[tables]]
    name = "customers"

    [[tables.columns]]
    api_name = "name"
    display_name = "Name"
    edit = true
    searchable = true
    type = { type = "string", data = { length_range = [1, 120] } }

    [[tables.columns]]
    api_name = "balance"
    display_name = "Balance"
    display_map = "money"          # looked up in the display_maps argument
    type = { type = "use_display_map_fn_and_no_edit" }

TOML has no null, so ranges may be written as ``{ min = 0, max = 100 }`` or
as a list with the upper bound omitted (``[0]``).
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from crudkit.core.errors import ConfigurationError, make_configuration_error
from crudkit.core.ir import CrudColumn, CrudTable
from crudkit.logging import get_schema_logger

logger = get_schema_logger()

DisplayMap = Callable[[Any], str]

_RANGE_KEYS = ("length_range", "range")


def _normalize_range(raw: Any) -> Any:
    if isinstance(raw, Mapping):
        return (raw.get("min"), raw.get("max"))
    if isinstance(raw, list) and len(raw) < 2:
        return tuple(raw) + (None,) * (2 - len(raw))
    return raw


def _normalize_type(raw: Any) -> Any:
    """Rewrite TOML-friendly range spellings inside a value type dict."""
    if not isinstance(raw, Mapping):
        return raw
    normalized = dict(raw)
    for key in _RANGE_KEYS:
        if key in normalized:
            normalized[key] = _normalize_range(normalized[key])
    data = normalized.get("data")
    if isinstance(data, Mapping):
        normalized["data"] = {
            k: _normalize_range(v) if k in _RANGE_KEYS else v for k, v in data.items()
        }
    return normalized


def _read_definitions(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Table definition file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix == ".toml":
            return tomllib.loads(text)
        if path.suffix == ".json":
            data = json.loads(text)
            if not isinstance(data, dict):
                raise ConfigurationError(f"{path}: top level must be an object")
            return data
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not parse {path}: {e}") from e

    raise ConfigurationError(f"Unsupported table definition format: {path.suffix} ({path})")


def build_column(
    raw: Mapping[str, Any],
    display_maps: Mapping[str, DisplayMap] | None = None,
    *,
    file: Path | None = None,
    table: str | None = None,
    fallback_display_map: DisplayMap | None = None,
) -> CrudColumn:
    """
    Build a CrudColumn from a definition dict.

    A ``display_map`` name missing from ``display_maps`` resolves to
    ``fallback_display_map`` when one is given.

    Raises:
        ConfigurationError: If the definition is invalid or names an unknown display map
    """
    data = dict(raw)
    api_name = data.get("api_name")
    map_name = data.pop("display_map", None)

    if map_name is not None:
        if display_maps and map_name in display_maps:
            data["display_map_fn"] = display_maps[map_name]
        elif fallback_display_map is not None:
            logger.debug("display_map '%s' not provided, using fallback for %s", map_name, api_name)
            data["display_map_fn"] = fallback_display_map
        else:
            raise make_configuration_error(
                f"unknown display_map '{map_name}'", file=file, table=table, column=api_name
            )

    if "type" in data:
        data["type"] = _normalize_type(data["type"])

    try:
        return CrudColumn(**data)
    except ValidationError as e:
        raise make_configuration_error(
            _summarize(e), file=file, table=table, column=api_name
        ) from e
    except ConfigurationError as e:
        if e.context is not None:
            raise
        raise make_configuration_error(
            e.message, file=file, table=table, column=api_name
        ) from e


def build_table(
    raw: Mapping[str, Any],
    display_maps: Mapping[str, DisplayMap] | None = None,
    *,
    file: Path | None = None,
    fallback_display_map: DisplayMap | None = None,
) -> CrudTable:
    """Build a CrudTable from a definition dict."""
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise make_configuration_error("table is missing a name", file=file)

    columns = [
        build_column(
            col,
            display_maps,
            file=file,
            table=name,
            fallback_display_map=fallback_display_map,
        )
        for col in raw.get("columns", [])
    ]
    try:
        return CrudTable(name=name, columns=columns)
    except ConfigurationError as e:
        raise make_configuration_error(e.message, file=file, table=name) from e


def load_tables(
    path: Path,
    display_maps: Mapping[str, DisplayMap] | None = None,
    *,
    fallback_display_map: DisplayMap | None = None,
) -> list[CrudTable]:
    """
    Load every table defined in a JSON or TOML file.

    Args:
        path: Definition file (.json or .toml)
        display_maps: Named display_map_fn callables that columns may reference
        fallback_display_map: Used for display_map names not in display_maps;
            when None such names are an error

    Returns:
        Tables in file order

    Raises:
        ConfigurationError: On unreadable files or invalid definitions
    """
    data = _read_definitions(path)
    raw_tables = data.get("tables")
    if not isinstance(raw_tables, list):
        raise make_configuration_error("expected a 'tables' list", file=path)

    tables = [
        build_table(raw, display_maps, file=path, fallback_display_map=fallback_display_map)
        for raw in raw_tables
    ]
    logger.debug("Loaded %d table(s) from %s", len(tables), path)
    return tables


def _summarize(error: ValidationError) -> str:
    """Condense a pydantic ValidationError into one line."""
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{loc}: {item.get('msg')}" if loc else str(item.get("msg")))
    return "; ".join(parts)
