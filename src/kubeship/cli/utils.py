"""
CLI utility helpers — deployer construction, error-to-exit mapping and
result rendering.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from kubeship.core.errors import KubeshipError, MissingArgumentError, ToolError
from kubeship.core.logging import LogContext, get_logger
from kubeship.core.settings import get_settings
from kubeship.deploy.actions import get_action
from kubeship.deploy.operations import Deployer
from kubeship.deploy.results import OverallStatus, WorkflowResult

console = Console()
err_console = Console(stderr=True)

logger = get_logger(__name__)

T = TypeVar("T")


def _echo_err(message: str) -> None:
    typer.echo(message, err=True)


def make_deployer(*, quiet: bool = False) -> Deployer:
    """Build a ``Deployer`` wired to the terminal.

    Progress lines go to stdout, or to stderr when ``quiet`` is set so
    that machine-readable stdout stays clean.
    """
    return Deployer(settings=get_settings(), notify=_echo_err if quiet else typer.echo)


def run_action(action: str, operation: Callable[[], T]) -> T:
    """Run ``operation`` and translate kubeship errors into exit codes.

    - missing argument: message on stdout, exit 1 (0 with legacy exit codes)
    - external tool failure: message on stderr, the tool's exit status
    - anything else kubeship raises: message on stderr, exit 1
    """
    spec = get_action(action)
    with LogContext(action=spec.name):
        logger.debug("action.started", signature=spec.signature)
        try:
            return operation()
        except MissingArgumentError as exc:
            typer.echo(exc.message)
            code = 0 if get_settings().legacy_exit_codes else 1
            raise typer.Exit(code=code) from None
        except ToolError as exc:
            logger.error("action.failed", **exc.to_dict())
            err_console.print(f"[bold red]Error[/bold red] ({exc.category.value}): {escape(exc.message)}")
            if exc.stderr:
                err_console.print(f"[dim]{escape(exc.stderr.strip())}[/dim]")
            code = exc.exit_code if exc.exit_code and exc.exit_code > 0 else 1
            raise typer.Exit(code=code) from None
        except KubeshipError as exc:
            logger.error("action.failed", **exc.to_dict())
            err_console.print(f"[bold red]Error[/bold red] ({exc.category.value}): {escape(exc.message)}")
            raise typer.Exit(code=1) from None


# ── Output helpers ───────────────────────────────────────────────────────


_STATUS_STYLE: dict[OverallStatus, str] = {
    OverallStatus.PASSED: "green",
    OverallStatus.FAILED: "red bold",
    OverallStatus.SKIPPED: "dim",
    OverallStatus.ROLLED_BACK: "yellow",
}


def _styled(status: OverallStatus) -> str:
    style = _STATUS_STYLE.get(status, "white")
    return f"[{style}]{status.value}[/{style}]"


def print_workflow_result(result: WorkflowResult) -> None:
    """Pretty-print the step table of an ``all`` run."""
    table = Table(title=f"Deployment {result.run_id}")
    table.add_column("Step", style="bold")
    table.add_column("Status")
    table.add_column("Time")
    table.add_column("Detail", overflow="fold")

    for step in result.steps:
        if step.error:
            detail = escape(step.error)
        else:
            detail = ", ".join(f"{k}={v}" for k, v in step.output.items()) or "—"
        table.add_row(
            step.name,
            _styled(step.status),
            f"{step.duration_seconds:.1f}s" if step.started_at else "—",
            detail,
        )
    console.print(table)

    if result.compensations:
        rollback = Table(title="Rollback")
        rollback.add_column("Resource", style="bold")
        rollback.add_column("Result")
        for comp in result.compensations:
            outcome = "[green]removed[/green]" if comp.success else f"[red]{escape(comp.error or 'failed')}[/red]"
            rollback.add_row(comp.name, outcome)
        console.print(rollback)

    if result.endpoint:
        console.print(f"Application URL: [bold]{result.endpoint}[/bold]")

    style = "green" if result.succeeded else "red"
    console.print(f"\n[bold {style}]{result.overall_status.value}[/] — {result.summary}")


def settings_rows(values: dict[str, Any]) -> list[tuple[str, str, str]]:
    """(field, env var, value) triples for the settings table."""
    return [
        (key, f"KUBESHIP_{key.upper()}", "—" if value is None else str(value))
        for key, value in sorted(values.items())
    ]
