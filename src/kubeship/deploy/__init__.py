"""kubeship.deploy — the actions behind the ``kubeship`` command.

Key Concepts:
    ActionSpec / ACTIONS: Registry of the thirteen dispatcher actions, their
        positional arguments and missing-argument messages.
    CommandRunner: subprocess wrapper for ``bx``, ``docker`` and ``kubectl``.
    Deployer: One method per action, issuing commands in a fixed order.
    Poller / PollPolicy: Bounded readiness polling for new clusters.
    DeployAllRunner: The composed ``all`` workflow with per-step results
        and optional rollback.

Related Modules:
    - :mod:`kubeship.deploy.actions` — Action registry and usage text
    - :mod:`kubeship.deploy.tools` — External command execution
    - :mod:`kubeship.deploy.parsing` — CLI output interpretation
    - :mod:`kubeship.deploy.polling` — Bounded polling policy
    - :mod:`kubeship.deploy.operations` — The actions
    - :mod:`kubeship.deploy.results` — Result models
    - :mod:`kubeship.deploy.workflow` — The ``all`` workflow
    - :mod:`kubeship.cli.app` — CLI commands
"""

from __future__ import annotations

from kubeship.deploy.actions import ACTIONS, ActionSpec, get_action, usage_text
from kubeship.deploy.config import DeployAllConfig
from kubeship.deploy.operations import Deployer
from kubeship.deploy.polling import Poller, PollPolicy
from kubeship.deploy.results import (
    AppEndpoint,
    ClusterInfo,
    OverallStatus,
    StepResult,
    WorkflowResult,
)
from kubeship.deploy.tools import CommandResult, CommandRunner
from kubeship.deploy.workflow import DeployAllRunner

__all__ = [
    "ACTIONS",
    "ActionSpec",
    "AppEndpoint",
    "ClusterInfo",
    "CommandResult",
    "CommandRunner",
    "DeployAllConfig",
    "DeployAllRunner",
    "Deployer",
    "OverallStatus",
    "Poller",
    "PollPolicy",
    "StepResult",
    "WorkflowResult",
    "get_action",
    "usage_text",
]
