"""Action specifications for kubeship.

Provides the immutable registry of the thirteen actions the dispatcher
understands.  Each ``ActionSpec`` carries the positional argument names
(in order), the one-line help shown in the usage text, and the exact
message printed when a required argument is missing.

Key Concepts:
    ActionSpec: Frozen dataclass — name, arguments, help, missing_message.
    ACTIONS: Registry dict mapping name → ActionSpec, in usage order.
    usage_text(): Renders the help block from the registry.
    require(): Raises ``MissingArgumentError`` unless every value is non-empty.

Architecture Decisions:
    - Frozen dataclasses (not Pydantic): specs are constants, not input.
    - Missing-argument messages are fixed strings; wrapper scripts grep
      for them.

Tags:
    actions, registry, dispatcher, usage
"""

from __future__ import annotations

from dataclasses import dataclass

from kubeship.core.errors import MissingArgumentError


@dataclass(frozen=True)
class ActionSpec:
    """Specification for one dispatcher action."""

    name: str
    """Action name as typed on the command line."""

    arguments: tuple[str, ...]
    """Required positional argument names, in order."""

    help: str
    """One-line description for the usage text."""

    missing_message: str = ""
    """Exact line printed when a required argument is empty."""

    @property
    def signature(self) -> str:
        """``name <arg1> <arg2>`` as shown in the usage text."""
        return " ".join([self.name, *(f"<{a}>" for a in self.arguments)])


INSTALL_TOOLS = ActionSpec(
    name="install_tools",
    arguments=(),
    help="Installs necessary tools for config, like Cloud Foundry CLI",
)

LOGIN = ActionSpec(
    name="login",
    arguments=(),
    help="Logs into Bluemix and Container APIs",
)

SETUP = ActionSpec(
    name="setup",
    arguments=("clusterName", "nameSpace"),
    help="Sets up the clusters",
    missing_message="Error: setup failed, cluster name, and name space not provided.",
)

BUILD = ActionSpec(
    name="build",
    arguments=("dockerName",),
    help="Builds Docker container from Dockerfile",
    missing_message="Error: run failed, docker name not provided.",
)

RUN = ActionSpec(
    name="run",
    arguments=("dockerName",),
    help="Runs Docker container, ensuring it was built properly",
    missing_message="Error: run failed, docker name not provided.",
)

STOP = ActionSpec(
    name="stop",
    arguments=("dockerName",),
    help="Stops Docker container, if running",
    missing_message="Error: clean failed, docker name not provided.",
)

PUSH = ActionSpec(
    name="push",
    arguments=("dockerName", "nameSpace"),
    help="Tags and pushes Docker container to IBM Cloud",
    missing_message="Error: clean failed, docker name, and name space not provided.",
)

CREATE_DB = ActionSpec(
    name="create_db",
    arguments=("clusterName", "instanceName"),
    help="Creates database service",
    missing_message=(
        "Error: Creating database failed, cluster name, and service name not provided."
    ),
)

GET_IP = ActionSpec(
    name="get_ip",
    arguments=("clusterName",),
    help="Get the public IP",
    missing_message="Error: Getting IP failed, cluster name not provided.",
)

DEPLOY = ActionSpec(
    name="deploy",
    arguments=("appName",),
    help="Exposes the deployment",
    missing_message="Error: Deploying container failed, app name not provided.",
)

POPULATE_DB = ActionSpec(
    name="populate_db",
    arguments=("appURL",),
    help="Populates database with initial data",
    missing_message="Error: Could not populate db with sample data. App URL not provided.",
)

DELETE = ActionSpec(
    name="delete",
    arguments=("clusterName", "instanceName", "nameSpace"),
    help="Delete the created service and cluster if possible",
    missing_message=(
        "Error: Could not delete container group and service, cluster name, "
        "service instance name, and name space not provided."
    ),
)

ALL = ActionSpec(
    name="all",
    arguments=("clusterName", "instanceName", "dockerName", "nameSpace"),
    help="Combines all necessary commands to deploy an app to IBM Cloud in a Docker container.",
    missing_message=(
        "Error: Could not complete entire deployment process, cluster name, "
        "service instance name, docker name, and name space not provided."
    ),
)


ACTIONS: dict[str, ActionSpec] = {
    spec.name: spec
    for spec in (
        INSTALL_TOOLS,
        LOGIN,
        SETUP,
        BUILD,
        RUN,
        STOP,
        PUSH,
        CREATE_DB,
        GET_IP,
        DEPLOY,
        POPULATE_DB,
        DELETE,
        ALL,
    )
}


def get_action(name: str) -> ActionSpec:
    """Look up an action spec by name.

    Raises
    ------
    ValueError
        If the action name is not recognized.
    """
    key = name.strip()
    if key not in ACTIONS:
        available = ", ".join(ACTIONS)
        raise ValueError(f"Unknown action: {name!r}. Available: {available}")
    return ACTIONS[key]


def require(spec: ActionSpec, *values: str | None) -> None:
    """Check that every required positional value is non-empty.

    Raises
    ------
    MissingArgumentError
        Carrying ``spec.missing_message`` when any value is ``None`` or blank.
    """
    missing = [
        name
        for name, value in zip(spec.arguments, values)
        if value is None or not str(value).strip()
    ]
    if len(values) < len(spec.arguments):
        missing.extend(spec.arguments[len(values):])
    if missing:
        raise MissingArgumentError(spec.name, spec.missing_message, missing=missing)


def usage_text(prog: str = "kubeship") -> str:
    """Render the usage block listing every action."""
    width = max(len(spec.signature) for spec in ACTIONS.values()) + 4
    lines = [
        f"Usage: {prog} <action> [arguments...]",
        "Where:",
    ]
    for spec in ACTIONS.values():
        lines.append(f"  {spec.signature.ljust(width)}{spec.help}")
    return "\n".join(lines)
