"""Tests for the crudkit CLI."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from crudkit.cli import app
from crudkit.core.config import ClientConfig
from crudkit.session.gateway import BackendGateway

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_crudkit_logger() -> Iterator[None]:
    yield
    root = logging.getLogger("crudkit")
    for handler in list(root.handlers):
        handler.close()
    root.handlers.clear()


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "crudkit version" in result.output


class TestCheck:
    def test_clean_file(self, fixtures_dir: Path) -> None:
        result = runner.invoke(app, ["check", str(fixtures_dir / "shop_tables.toml")])
        assert result.exit_code == 0, result.output
        assert "Loaded 2 table(s)" in result.output
        assert "OK" in result.output

    def test_file_with_errors(self, fixtures_dir: Path) -> None:
        result = runner.invoke(app, ["check", str(fixtures_dir / "broken_tables.json")])
        assert result.exit_code == 1
        assert "error(s)" in result.output

    def test_unloadable_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["check", str(tmp_path / "missing.toml")])
        assert result.exit_code == 1
        assert "Invalid table definitions" in result.output


class TestValidate:
    @pytest.mark.parametrize(
        ("column", "value", "exit_code", "expected"),
        [
            ("discount", "35", 0, "valid"),
            ("discount", "37", 1, "step_mismatch"),
            ("discount", "150", 1, "range_violation"),
            ("discount", "lots", 1, "type_mismatch"),
            ("tier", "gold", 0, "valid"),
            ("tier", "platinum", 1, "not_an_option"),
            ("name", "", 1, "length_out_of_range"),
            ("balance", "10", 1, "edit_not_permitted"),
        ],
    )
    def test_values(
        self, fixtures_dir: Path, column: str, value: str, exit_code: int, expected: str
    ) -> None:
        result = runner.invoke(
            app, ["validate", str(fixtures_dir / "shop_tables.toml"), "customers", column, value]
        )
        assert result.exit_code == exit_code, result.output
        assert expected in result.output

    def test_unknown_table(self, fixtures_dir: Path) -> None:
        result = runner.invoke(
            app, ["validate", str(fixtures_dir / "shop_tables.toml"), "orders", "id", "1"]
        )
        assert result.exit_code == 1
        assert "Unknown table" in result.output

    def test_unknown_column(self, fixtures_dir: Path) -> None:
        result = runner.invoke(
            app, ["validate", str(fixtures_dir / "shop_tables.toml"), "customers", "nope", "1"]
        )
        assert result.exit_code == 1
        assert "Unknown column" in result.output


class TestStatus:
    @pytest.fixture
    def project(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        (tmp_path / "crudkit.toml").write_text(
            '[api]\norigin = "https://shop.test"\n\n[logging]\ndir = "logs"\n'
        )
        monkeypatch.chdir(tmp_path)
        return tmp_path

    def use_backend(self, monkeypatch: pytest.MonkeyPatch, response: httpx.Response) -> None:
        def make_gateway(config: ClientConfig) -> BackendGateway:
            client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: response))
            return BackendGateway(config.api_base, client=client)

        monkeypatch.setattr("crudkit.cli.session.make_gateway", make_gateway)

    def test_authenticated(self, project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self.use_backend(
            monkeypatch, httpx.Response(200, json={"username": "ada", "permissions": ["REPORTS"]})
        )
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0, result.output
        assert "https://shop.test/api" in result.output
        assert "Environment: test" in result.output
        assert "AUTHENTICATED" in result.output
        assert "ada" in result.output

    def test_not_authenticated(self, project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        self.use_backend(monkeypatch, httpx.Response(401))
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "NOT_AUTHENTICATED" in result.output

    def test_fetch_error_exits_nonzero(
        self, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        self.use_backend(monkeypatch, httpx.Response(503))
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 1
        assert "FETCH_ERROR" in result.output

    def test_explicit_missing_config(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["status", "--config", str(tmp_path / "nope.toml")])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestHelp:
    def test_help_text(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "crudkit: config-driven" in result.output
