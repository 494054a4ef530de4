"""
CLI: ``kubeship config`` — show the effective settings.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError
from rich.table import Table

from kubeship.cli.utils import console, err_console, settings_rows


def show_config(
    json_out: bool = typer.Option(False, "--json", help="Output settings as JSON."),
) -> None:
    """Show the effective configuration and the variables that override it."""
    from kubeship.core.settings import get_settings

    try:
        settings = get_settings(_force_reload=True)
    except ValidationError as e:
        err_console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(code=1) from None

    if json_out:
        typer.echo(settings.model_dump_json(indent=2))
        return

    table = Table(title="kubeship settings")
    table.add_column("Setting", style="bold")
    table.add_column("Environment variable", style="cyan")
    table.add_column("Value")
    for name, env_var, value in settings_rows(settings.model_dump()):
        table.add_row(name, env_var, value)
    console.print(table)
