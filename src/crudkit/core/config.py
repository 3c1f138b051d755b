"""
Client configuration loaded from crudkit.toml and the environment.

Example crudkit.toml:

    [api]
    base_url = "https://shop.example.com/api"   # optional
    origin = "https://shop.example.com"         # used when base_url is unset
    timeout = 30

    [logging]
    level = "INFO"
    dir = ".crudkit/logs"

Environment variables CRUDKIT_API_BASE_URL and CRUDKIT_ORIGIN take
precedence over the file. The API base is resolved once, when the
configuration is loaded.
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from crudkit.core.errors import ConfigurationError

CONFIG_FILENAME = "crudkit.toml"
API_PATH_PREFIX = "/api"
DEFAULT_ORIGIN = "http://localhost:8000"
DEFAULT_TIMEOUT = 30.0

API_BASE_URL_VAR = "CRUDKIT_API_BASE_URL"
ORIGIN_VAR = "CRUDKIT_ORIGIN"


@dataclass
class ApiConfig:
    """Backend location and transport settings."""

    base_url: str | None = None
    origin: str = DEFAULT_ORIGIN
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class LoggingConfig:
    """Logging configuration. ``level`` None means use the environment default."""

    level: str | None = None
    dir: str = ".crudkit/logs"


@dataclass
class ClientConfig:
    """Complete client configuration."""

    api: ApiConfig = field(default_factory=ApiConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    source: Path | None = None
    api_base: str = field(init=False)

    def __post_init__(self) -> None:
        self.api_base = resolve_api_base(self.api)


def resolve_api_base(api: ApiConfig) -> str:
    """
    Resolve the API base URL (no trailing slash).

    Resolution order:
    1. CRUDKIT_API_BASE_URL environment variable
    2. ``[api].base_url`` from the config file
    3. origin (CRUDKIT_ORIGIN or ``[api].origin``) + "/api"
    """
    explicit = os.environ.get(API_BASE_URL_VAR) or api.base_url
    if explicit:
        return explicit.rstrip("/")
    origin = os.environ.get(ORIGIN_VAR) or api.origin
    return origin.rstrip("/") + API_PATH_PREFIX


def load_config(path: Path | None = None) -> ClientConfig:
    """
    Load configuration from a TOML file.

    Args:
        path: Config file; defaults to ./crudkit.toml, which may be absent

    Raises:
        ConfigurationError: If an explicit path is missing or the file is malformed
    """
    if path is None:
        candidate = Path.cwd() / CONFIG_FILENAME
        if not candidate.exists():
            return ClientConfig()
        path = candidate
    elif not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e

    api_data = data.get("api", {})
    logging_data = data.get("logging", {})

    try:
        api_config = ApiConfig(
            base_url=api_data.get("base_url"),
            origin=api_data.get("origin", DEFAULT_ORIGIN),
            timeout=float(api_data.get("timeout", DEFAULT_TIMEOUT)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid [api] section in {path}: {e}") from e

    logging_config = LoggingConfig(
        level=logging_data.get("level"),
        dir=logging_data.get("dir", ".crudkit/logs"),
    )

    return ClientConfig(api=api_config, logging=logging_config, source=path)
