"""
Session commands: query the configured backend for the current session.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from crudkit.core.config import ClientConfig, load_config
from crudkit.core.environment import default_log_level, get_environment_info
from crudkit.core.errors import ConfigurationError
from crudkit.logging import setup_logging
from crudkit.session.gateway import BackendGateway
from crudkit.session.machine import SessionStateMachine
from crudkit.session.models import AuthStatus, RefreshOutcome

console = Console()

_STATUS_STYLES = {
    AuthStatus.AUTHENTICATED: "green",
    AuthStatus.NOT_AUTHENTICATED: "yellow",
    AuthStatus.FETCH_ERROR: "red",
    AuthStatus.LOADING: "dim",
}


def make_gateway(config: ClientConfig) -> BackendGateway:
    return BackendGateway.from_config(config)


async def _refresh(config: ClientConfig) -> RefreshOutcome:
    async with make_gateway(config) as gateway:
        machine = SessionStateMachine(gateway)
        return await machine.refresh()


def status_command(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to crudkit.toml (default: ./crudkit.toml)"),
    ] = None,
) -> None:
    """Refresh the session against the configured backend and print its status."""
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    setup_logging(log_dir=config.logging.dir, level=default_log_level(config.logging.level))
    console.print(f"Backend: {config.api_base}")
    console.print(f"Environment: {get_environment_info()['env']}")

    outcome = asyncio.run(_refresh(config))
    style = _STATUS_STYLES[outcome.status]
    console.print(f"Status: [{style}]{outcome.status.name}[/{style}]")

    if outcome.principal is not None:
        console.print(f"  User: {outcome.principal.username}")
        if outcome.principal.permissions:
            console.print(f"  Permissions: {', '.join(outcome.principal.permissions)}")
    if outcome.error is not None:
        console.print(f"  [red]{outcome.error.message}[/red]")

    if outcome.status == AuthStatus.FETCH_ERROR:
        raise typer.Exit(1)
