"""
Test support utilities for kubeship tests.

Fakes for the two seams every action goes through (the command runner
and the poll clock), plus captured output samples from ``bx`` and
``kubectl``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from kubeship.core.errors import ToolError
from kubeship.deploy.tools import CommandResult, CommandRunner


@dataclass
class FakeRunner(CommandRunner):
    """Records every command and answers from a script.

    ``script(*prefix, ...)`` queues results for commands starting with
    ``prefix``; the longest matching prefix wins.  Queued results are
    consumed in order and the last one repeats.  Unscripted commands
    succeed with empty output.
    """

    calls: list[list[str]] = field(default_factory=list)
    responses: dict[tuple[str, ...], list[CommandResult]] = field(default_factory=dict)

    def script(
        self,
        *prefix: str,
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> FakeRunner:
        result = CommandResult(argv=list(prefix), returncode=returncode, stdout=stdout, stderr=stderr)
        self.responses.setdefault(tuple(prefix), []).append(result)
        return self

    def run(self, argv: list[str], *, check: bool = True, capture: bool = False) -> CommandResult:
        self.calls.append(list(argv))
        result = self._lookup(argv)
        if check and not result.ok:
            raise ToolError(
                f"Command failed (exit {result.returncode}): {' '.join(argv)}",
                argv=argv,
                exit_code=result.returncode,
                stderr=result.stderr,
            )
        return result

    def export_env(self, name: str, value: str) -> None:
        self.env[name] = value

    def _lookup(self, argv: list[str]) -> CommandResult:
        matches = [p for p in self.responses if tuple(argv[: len(p)]) == p]
        if not matches:
            return CommandResult(argv=list(argv), returncode=0)
        queue = self.responses[max(matches, key=len)]
        template = queue.pop(0) if len(queue) > 1 else queue[0]
        return CommandResult(
            argv=list(argv),
            returncode=template.returncode,
            stdout=template.stdout,
            stderr=template.stderr,
        )

    def commands(self, *prefix: str) -> list[list[str]]:
        """Recorded calls starting with ``prefix``."""
        return [c for c in self.calls if tuple(c[: len(prefix)]) == prefix]


class FakeClock:
    """Monotonic clock that only moves when ``sleep`` is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


# ── Captured CLI output ─────────────────────────────────────────────────

WORKERS_OUTPUT = """\
OK
ID                                                 Public IP        Private IP       Machine Type   State    Status   Zone    Version
kube-hou02-pa1e3ee39f549640aebea69a444f51fe55-w1   184.172.252.167  10.76.194.30     free           normal   Ready    hou02   1.9.7_1510
"""

WORKER_IP = "184.172.252.167"

CLUSTER_READY_OUTPUT = """\
Retrieving cluster todo...
OK

Name:                   todo
ID:                     1e3ee39f549640aebea69a444f51fe55
State:                  normal
Created:                2018-05-01T17:32:11+0000
Datacenter:             hou02
Master URL:             https://184.173.1.85:23456
Workers:                1
"""

CLUSTER_PENDING_OUTPUT = CLUSTER_READY_OUTPUT.replace("normal", "pending")

CLUSTER_ABSENT_OUTPUT = """\
Retrieving cluster todo...
FAILED

The specified cluster could not be found. (A0006)
"""

SERVICES_JSON = """\
{
  "apiVersion": "v1",
  "kind": "List",
  "items": [
    {"metadata": {"name": "kubernetes"}, "spec": {"type": "ClusterIP", "ports": [{"port": 443}]}},
    {"metadata": {"name": "todo"}, "spec": {"type": "NodePort", "ports": [{"port": 8080, "nodePort": 31234}]}}
  ]
}
"""

NODE_PORT = 31234


def script_healthy_cluster(runner: FakeRunner) -> FakeRunner:
    """Script an existing, ready cluster named ``todo`` with one worker."""
    runner.script("bx", "cs", "cluster-get", stdout=CLUSTER_READY_OUTPUT)
    runner.script("bx", "cs", "workers", stdout=WORKERS_OUTPUT)
    runner.script("kubectl", "get", "services", stdout=SERVICES_JSON)
    return runner
