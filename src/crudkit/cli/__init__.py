"""
crudkit CLI.

Commands:

- check: load table definitions and report schema problems
- validate: validate one value against a column
- status: refresh the session against the configured backend
"""

import typer

from crudkit.cli.schema import check_command, validate_command
from crudkit.cli.session import status_command
from crudkit.cli.utils import version_callback

app = typer.Typer(
    help="crudkit: config-driven CRUD tables and backend session client",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
) -> None:
    """crudkit CLI main callback for global options."""
    pass


app.command(name="check")(check_command)
app.command(name="validate")(validate_command)
app.command(name="status")(status_command)


def main() -> None:
    app()


__all__ = ["app", "main"]
