"""The composed ``all`` workflow.

``DeployAllRunner`` runs the full sequence

    install_tools → login → setup → build → push → create_db → deploy → get_ip

recording a ``StepResult`` per action.  The first failing step stops the
run; the steps after it are recorded SKIPPED.  With ``rollback=True`` the
resources this run created (as logged by ``Deployer.created``) are undone
in reverse order: the NodePort service, the database service, the
cluster.  A failed compensation is recorded and logged but never hides
the step failure that triggered it.

Example::

    config = DeployAllConfig(cluster="todo", instance="todo-db",
                             image="todolist", namespace="todo_ns")
    result = DeployAllRunner(config, Deployer(notify=print)).run()
    print(result.summary)

Tags:
    workflow, orchestration, rollback, deploy
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from kubeship.core.errors import KubeshipError
from kubeship.core.logging import LogContext, get_logger
from kubeship.deploy.config import DeployAllConfig
from kubeship.deploy.operations import Deployer
from kubeship.deploy.results import (
    AppEndpoint,
    ClusterInfo,
    CompensationResult,
    OverallStatus,
    StepResult,
    WorkflowResult,
)

logger = get_logger(__name__)

STEP_ORDER = (
    "install_tools",
    "login",
    "setup",
    "build",
    "push",
    "create_db",
    "deploy",
    "get_ip",
)


class DeployAllRunner:
    """Runs every action needed to take an image to a public URL.

    Parameters
    ----------
    config
        Typed arguments for the run.
    deployer
        Executes the individual actions.
    """

    def __init__(self, config: DeployAllConfig, deployer: Deployer) -> None:
        self.config = config
        self.deployer = deployer

    def _steps(self) -> list[tuple[str, Callable[[], Any]]]:
        c, d = self.config, self.deployer
        steps: list[tuple[str, Callable[[], Any]]] = [
            ("install_tools", d.install_tools),
            ("login", d.login),
            ("setup", lambda: d.setup(c.cluster, c.namespace)),
            ("build", lambda: d.build(c.image)),
            ("push", lambda: d.push(c.image, c.namespace)),
            ("create_db", lambda: d.create_db(c.cluster, c.instance)),
            ("deploy", lambda: d.deploy(c.cluster)),
            ("get_ip", lambda: d.get_ip(c.cluster)),
        ]
        if not c.install_tools:
            steps = steps[1:]
        return steps

    def run(self) -> WorkflowResult:
        """Execute the workflow and return its aggregated result."""
        result = WorkflowResult(run_id=self.config.run_id)
        failed = False

        with LogContext(run_id=self.config.run_id, workflow="all"):
            for name, action in self._steps():
                step = StepResult(name=name)
                result.steps.append(step)
                if failed:
                    step.status = OverallStatus.SKIPPED
                    continue

                step.start()
                try:
                    value = action()
                except KubeshipError as exc:
                    step.finish(exc)
                    failed = True
                    logger.error("step.failed", step=name, **exc.to_dict())
                    continue

                step.finish()
                step.output = _describe(value)
                if isinstance(value, AppEndpoint):
                    result.endpoint = value.url
                logger.info("step.passed", step=name, seconds=round(step.duration_seconds, 2))

            if failed and self.config.rollback:
                result.compensations = self._compensate()

        result.mark_complete()
        logger.info("workflow.complete", status=result.overall_status.value, summary=result.summary)
        return result

    def _compensate(self) -> list[CompensationResult]:
        """Undo created resources, newest first."""
        undo: dict[str, Callable[[str], None]] = {
            "exposure": self.deployer.unexpose,
            "service": lambda instance: self.deployer.discard_service(self.config.cluster, instance),
            "cluster": self.deployer.remove_cluster,
        }
        outcomes: list[CompensationResult] = []
        for kind, name in reversed(self.deployer.created):
            label = f"{kind}:{name}"
            try:
                undo[kind](name)
            except KubeshipError as exc:
                logger.error("rollback.failed", resource=label, error=exc.message)
                outcomes.append(CompensationResult(name=label, success=False, error=exc.message))
                continue
            logger.info("rollback.done", resource=label)
            outcomes.append(CompensationResult(name=label, success=True))
        return outcomes


def _describe(value: Any) -> dict[str, Any]:
    """Flatten an action's return value into StepResult.output."""
    if isinstance(value, ClusterInfo):
        return {
            "cluster": value.name,
            "created": value.created,
            "datacenter": value.datacenter,
            "kubeconfig": str(value.kubeconfig),
        }
    if isinstance(value, AppEndpoint):
        return {"ip": value.ip, "port": value.port, "url": value.url}
    if isinstance(value, str):
        return {"value": value}
    return {}
