"""
Environment configuration for crudkit clients.

The CRUDKIT_ENV environment variable selects the runtime environment and
with it the defaults for developer-facing behaviour such as log verbosity.

Environment values:
    - development (default): verbose logging
    - test: quiet logging, used by the test suite
    - production: quiet logging

Usage:
    from crudkit.core.environment import get_crudkit_env, default_log_level

    env = get_crudkit_env()  # Returns "development", "test", or "production"
    level = default_log_level(config.logging.level)
"""

from __future__ import annotations

import logging
import os
from enum import StrEnum


class CrudkitEnv(StrEnum):
    """Runtime environment values."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


# Environment variable name
CRUDKIT_ENV_VAR = "CRUDKIT_ENV"


def get_crudkit_env() -> CrudkitEnv:
    """Get the current environment from CRUDKIT_ENV.

    Returns:
        CrudkitEnv: The current environment (development, test, or production).
        Defaults to development if CRUDKIT_ENV is not set or invalid.

    Examples:
        >>> import os
        >>> os.environ["CRUDKIT_ENV"] = "prod"
        >>> get_crudkit_env()
        <CrudkitEnv.PRODUCTION: 'production'>
    """
    env_value = os.environ.get(CRUDKIT_ENV_VAR, "").lower().strip()

    if env_value == "production" or env_value == "prod":
        return CrudkitEnv.PRODUCTION
    elif env_value == "test" or env_value == "testing":
        return CrudkitEnv.TEST
    elif env_value == "development" or env_value == "dev" or env_value == "":
        return CrudkitEnv.DEVELOPMENT
    else:
        logging.getLogger(__name__).warning(
            "Unknown CRUDKIT_ENV value '%s'. "
            "Valid values: development, test, production. Defaulting to development.",
            env_value,
        )
        return CrudkitEnv.DEVELOPMENT


def default_log_level(configured: str | None = None) -> int:
    """Determine the log level.

    Resolution order:
    1. An explicit level name from configuration (e.g. "INFO")
    2. Environment defaults: DEBUG in development, WARNING in test, INFO in production
    """
    if configured:
        level = logging.getLevelName(configured.upper())
        if isinstance(level, int):
            return level
        logging.getLogger(__name__).warning("Unknown log level '%s', ignoring", configured)

    env = get_crudkit_env()
    if env == CrudkitEnv.DEVELOPMENT:
        return logging.DEBUG
    elif env == CrudkitEnv.TEST:
        return logging.WARNING
    else:
        return logging.INFO


def get_environment_info() -> dict[str, str]:
    """Get a summary of the current environment configuration for startup logging."""
    env = get_crudkit_env()
    return {
        "env": env.value,
        "default_log_level": logging.getLevelName(default_log_level()),
    }
