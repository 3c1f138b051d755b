"""Tests for client configuration and environment detection."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from crudkit.core.config import ApiConfig, ClientConfig, load_config, resolve_api_base
from crudkit.core.environment import (
    CrudkitEnv,
    default_log_level,
    get_crudkit_env,
    get_environment_info,
)
from crudkit.core.errors import ConfigurationError

# =============================================================================
# API base resolution
# =============================================================================


class TestResolveApiBase:
    def test_default_origin_fallback(self) -> None:
        assert resolve_api_base(ApiConfig()) == "http://localhost:8000/api"

    def test_origin_from_config(self) -> None:
        assert resolve_api_base(ApiConfig(origin="https://shop.test/")) == "https://shop.test/api"

    def test_explicit_base_url(self) -> None:
        api = ApiConfig(base_url="https://api.shop.test/v1/")
        assert resolve_api_base(api) == "https://api.shop.test/v1"

    def test_env_base_url_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRUDKIT_API_BASE_URL", "https://env.test/api")
        assert resolve_api_base(ApiConfig(base_url="https://file.test/api")) == "https://env.test/api"

    def test_env_origin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRUDKIT_ORIGIN", "https://origin.test")
        assert resolve_api_base(ApiConfig()) == "https://origin.test/api"

    def test_resolved_once_at_construction(self, monkeypatch: pytest.MonkeyPatch) -> None:
        config = ClientConfig()
        monkeypatch.setenv("CRUDKIT_API_BASE_URL", "https://later.test/api")
        assert config.api_base == "http://localhost:8000/api"


# =============================================================================
# Config file loading
# =============================================================================


class TestLoadConfig:
    def test_missing_default_file_gives_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert config.source is None
        assert config.api.timeout == 30.0
        assert config.logging.level is None

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "crudkit.toml")

    def test_reads_default_file_from_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "crudkit.toml").write_text('[api]\norigin = "https://cwd.test"\n')
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert config.api_base == "https://cwd.test/api"
        assert config.source == tmp_path / "crudkit.toml"

    def test_full_file(self, tmp_path: Path) -> None:
        path = tmp_path / "crudkit.toml"
        path.write_text(
            "[api]\n"
            'base_url = "https://shop.test/api"\n'
            "timeout = 5\n\n"
            "[logging]\n"
            'level = "warning"\n'
            'dir = "logs"\n'
        )
        config = load_config(path)
        assert config.api_base == "https://shop.test/api"
        assert config.api.timeout == 5.0
        assert config.logging.level == "warning"
        assert config.logging.dir == "logs"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "crudkit.toml"
        path.write_text("[api\n")
        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_config(path)

    def test_invalid_timeout(self, tmp_path: Path) -> None:
        path = tmp_path / "crudkit.toml"
        path.write_text('[api]\ntimeout = "soon"\n')
        with pytest.raises(ConfigurationError, match=r"Invalid \[api\] section"):
            load_config(path)


# =============================================================================
# Environment
# =============================================================================


class TestEnvironment:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("production", CrudkitEnv.PRODUCTION),
            ("prod", CrudkitEnv.PRODUCTION),
            ("TEST", CrudkitEnv.TEST),
            ("dev", CrudkitEnv.DEVELOPMENT),
            ("", CrudkitEnv.DEVELOPMENT),
            ("staging", CrudkitEnv.DEVELOPMENT),
        ],
    )
    def test_get_crudkit_env(
        self, monkeypatch: pytest.MonkeyPatch, value: str, expected: CrudkitEnv
    ) -> None:
        monkeypatch.setenv("CRUDKIT_ENV", value)
        assert get_crudkit_env() == expected

    def test_default_log_levels(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CRUDKIT_ENV", "development")
        assert default_log_level() == logging.DEBUG
        monkeypatch.setenv("CRUDKIT_ENV", "test")
        assert default_log_level() == logging.WARNING
        monkeypatch.setenv("CRUDKIT_ENV", "production")
        assert default_log_level() == logging.INFO

    def test_configured_level_wins(self) -> None:
        assert default_log_level("error") == logging.ERROR

    def test_unknown_configured_level_ignored(self) -> None:
        assert default_log_level("chatty") == logging.WARNING

    def test_environment_info(self) -> None:
        assert get_environment_info() == {"env": "test", "default_log_level": "WARNING"}
