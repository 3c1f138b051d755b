"""Shared pytest fixtures for crudkit tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from crudkit.core import ir


@pytest.fixture(autouse=True)
def crudkit_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test in the test environment with no backend overrides."""
    monkeypatch.setenv("CRUDKIT_ENV", "test")
    monkeypatch.delenv("CRUDKIT_API_BASE_URL", raising=False)
    monkeypatch.delenv("CRUDKIT_ORIGIN", raising=False)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return Path(__file__).parent / "fixtures"


def _make_response(status_code: int, json_data: Any = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    if json_data is None:
        response.json.side_effect = ValueError("No JSON body")
    else:
        response.json.return_value = json_data
    return response


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    """Factory for mocked httpx.Response objects: ``make_response(200, {...})``."""
    return _make_response


@pytest.fixture
def mock_gateway() -> MagicMock:
    """Gateway double whose ``call`` is an AsyncMock; tests set side effects."""
    gateway = MagicMock()
    gateway.call = AsyncMock()
    return gateway


@pytest.fixture
def customers_table() -> ir.CrudTable:
    """Return a small customers table covering the common column kinds."""
    return ir.CrudTable(
        name="customers",
        columns=[
            ir.CrudColumn(
                api_name="id",
                display_name="ID",
                type=ir.NumberType(integer=True),
                readonly=True,
                edit=True,
            ),
            ir.CrudColumn(
                api_name="name",
                display_name="Name",
                type=ir.StringType(length_range=(1, 40)),
                edit=True,
                searchable=True,
                current_sort=ir.SortOrder.ASC,
            ),
            ir.CrudColumn(
                api_name="phone",
                api_request_name="phone_number",
                display_name="Phone",
                type=ir.StringType(regex=r"\+?[0-9 ]+", length_range=(0, 20)),
                edit=True,
                searchable=True,
            ),
            ir.CrudColumn(
                api_name="tier",
                display_name="Tier",
                type=ir.SelectType(options=["bronze", "silver", "gold"]),
                edit=True,
            ),
            ir.CrudColumn(
                api_name="balance",
                display_name="Balance",
                type=ir.CurrencyType(),
            ),
            ir.CrudColumn(
                api_name="region",
                display_name="Region",
                type=ir.DisplayOnlyType(),
                display_map_fn=lambda v: v["name"] if v else "-",
                searchable=True,
                search_nested="region.name",
            ),
            ir.CrudColumn(
                api_name="password",
                type=ir.PasswordType(),
                edit=True,
            ),
        ],
    )
