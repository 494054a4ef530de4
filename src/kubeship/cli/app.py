"""
Root Typer application for the kubeship CLI.

``kubeship <action> [arguments...]`` — one command per action.  An
unknown or absent action prints the usage block and exits 0; extra
trailing arguments are ignored.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

import click
import typer
from pydantic import ValidationError
from typer.core import TyperGroup

from kubeship.cli.config import show_config
from kubeship.cli.utils import err_console, make_deployer, print_workflow_result, run_action
from kubeship.core.logging import clear_context, configure_logging
from kubeship.core.settings import get_settings
from kubeship.deploy import actions
from kubeship.deploy.actions import usage_text


class DispatchGroup(TyperGroup):
    """Prints the usage block instead of failing on an unknown action."""

    def resolve_command(self, ctx: click.Context, args: list[str]):  # type: ignore[override]
        if args and not args[0].startswith("-") and self.get_command(ctx, args[0]) is None:
            typer.echo(usage_text())
            ctx.exit(0)
        return super().resolve_command(ctx, args)


app = typer.Typer(
    name="kubeship",
    cls=DispatchGroup,
    help="Build, push and expose a containerised app on an IBM Cloud Kubernetes cluster.",
    no_args_is_help=False,
    add_completion=False,
    rich_markup_mode="rich",
)

ACTION_CONTEXT = {"ignore_unknown_options": True, "allow_extra_args": True}


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("kubeship")
        except PackageNotFoundError:
            from kubeship import __version__ as v
        typer.echo(f"kubeship {v}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
) -> None:
    """kubeship — deploy an app to IBM Cloud with bx, docker and kubectl."""
    clear_context()
    try:
        settings = get_settings()
    except ValidationError as e:
        err_console.print(f"[red]Configuration Error:[/red] {e}")
        raise typer.Exit(code=1) from None

    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.log_json,
    )

    if ctx.invoked_subcommand is None:
        typer.echo(usage_text())
        raise typer.Exit()


# ── Tooling and session ──────────────────────────────────────────────────


@app.command("install_tools", context_settings=ACTION_CONTEXT)
def install_tools() -> None:
    """Installs necessary tools for config, like Cloud Foundry CLI."""
    run_action("install_tools", lambda: make_deployer().install_tools())


@app.command("login", context_settings=ACTION_CONTEXT)
def login() -> None:
    """Logs into Bluemix and Container APIs."""
    run_action("login", lambda: make_deployer().login())


# ── Cluster ──────────────────────────────────────────────────────────────


@app.command("setup", context_settings=ACTION_CONTEXT)
def setup(
    cluster: str | None = typer.Argument(None, metavar="CLUSTER_NAME"),
    namespace: str | None = typer.Argument(None, metavar="NAME_SPACE"),
) -> None:
    """Sets up the clusters."""
    info = run_action("setup", lambda: make_deployer().setup(cluster, namespace))
    # eval-able in the calling shell
    typer.echo(f"export KUBECONFIG={info.kubeconfig}")


# ── Container image ──────────────────────────────────────────────────────


@app.command("build", context_settings=ACTION_CONTEXT)
def build(image: str | None = typer.Argument(None, metavar="DOCKER_NAME")) -> None:
    """Builds Docker container from Dockerfile."""
    run_action("build", lambda: make_deployer().build(image))


@app.command("run", context_settings=ACTION_CONTEXT)
def run_container(image: str | None = typer.Argument(None, metavar="DOCKER_NAME")) -> None:
    """Runs Docker container, ensuring it was built properly."""
    run_action("run", lambda: make_deployer().run(image))


@app.command("stop", context_settings=ACTION_CONTEXT)
def stop(image: str | None = typer.Argument(None, metavar="DOCKER_NAME")) -> None:
    """Stops Docker container, if running."""
    run_action("stop", lambda: make_deployer().stop(image))


@app.command("push", context_settings=ACTION_CONTEXT)
def push(
    image: str | None = typer.Argument(None, metavar="DOCKER_NAME"),
    namespace: str | None = typer.Argument(None, metavar="NAME_SPACE"),
) -> None:
    """Tags and pushes Docker container to IBM Cloud."""
    run_action("push", lambda: make_deployer().push(image, namespace))


# ── Database and exposure ────────────────────────────────────────────────


@app.command("create_db", context_settings=ACTION_CONTEXT)
def create_db(
    cluster: str | None = typer.Argument(None, metavar="CLUSTER_NAME"),
    instance: str | None = typer.Argument(None, metavar="INSTANCE_NAME"),
) -> None:
    """Creates database service."""
    run_action("create_db", lambda: make_deployer().create_db(cluster, instance))


@app.command("get_ip", context_settings=ACTION_CONTEXT)
def get_ip(cluster: str | None = typer.Argument(None, metavar="CLUSTER_NAME")) -> None:
    """Get the public IP."""
    run_action("get_ip", lambda: make_deployer().get_ip(cluster))


@app.command("deploy", context_settings=ACTION_CONTEXT)
def deploy(
    app_name: str | None = typer.Argument(None, metavar="APP_NAME"),
    cluster: str | None = typer.Argument(
        None, metavar="[CLUSTER_NAME]", help="Cluster whose worker IP is used (defaults to APP_NAME)."
    ),
) -> None:
    """Exposes the deployment."""
    run_action("deploy", lambda: make_deployer().deploy(app_name, cluster))


@app.command("populate_db", context_settings=ACTION_CONTEXT)
def populate_db(url: str | None = typer.Argument(None, metavar="APP_URL")) -> None:
    """Populates database with initial data."""
    run_action("populate_db", lambda: make_deployer().populate_db(url))


# ── Teardown ─────────────────────────────────────────────────────────────


@app.command("delete", context_settings=ACTION_CONTEXT)
def delete(
    cluster: str | None = typer.Argument(None, metavar="CLUSTER_NAME"),
    instance: str | None = typer.Argument(None, metavar="INSTANCE_NAME"),
    namespace: str | None = typer.Argument(None, metavar="NAME_SPACE"),
) -> None:
    """Delete the created service and cluster if possible."""
    run_action("delete", lambda: make_deployer().delete(cluster, instance, namespace))


# ── Full workflow ────────────────────────────────────────────────────────


@app.command("all", context_settings=ACTION_CONTEXT)
def deploy_all(
    cluster: str | None = typer.Argument(None, metavar="CLUSTER_NAME"),
    instance: str | None = typer.Argument(None, metavar="INSTANCE_NAME"),
    image: str | None = typer.Argument(None, metavar="DOCKER_NAME"),
    namespace: str | None = typer.Argument(None, metavar="NAME_SPACE"),
    rollback: bool = typer.Option(False, "--rollback", help="Undo created resources if a step fails."),
    skip_install: bool = typer.Option(False, "--skip-install", help="Skip the install_tools step."),
    json_out: bool = typer.Option(False, "--json", help="Output the run result as JSON."),
) -> None:
    """Combines all necessary commands to deploy an app to IBM Cloud in a Docker container.

    Runs install_tools, login, setup, build, push, create_db, deploy and
    get_ip in order, stopping at the first failure.
    """
    from kubeship.deploy.config import DeployAllConfig
    from kubeship.deploy.workflow import DeployAllRunner

    def _run():
        actions.require(actions.ALL, cluster, instance, image, namespace)
        config = DeployAllConfig(
            cluster=cluster,
            instance=instance,
            image=image,
            namespace=namespace,
            rollback=rollback,
            install_tools=not skip_install,
        )
        return DeployAllRunner(config, make_deployer(quiet=json_out)).run()

    result = run_action("all", _run)

    if json_out:
        typer.echo(result.model_dump_json(indent=2))
    else:
        print_workflow_result(result)

    if not result.succeeded:
        raise typer.Exit(code=result.exit_code)


app.command("config")(show_config)
