"""Result models for kubeship.

Runtime facts returned by individual actions (``ClusterInfo``,
``AppEndpoint``) are plain dataclasses.  The composed ``all`` workflow
reports through Pydantic models: one ``StepResult`` per action, rolled up
into a ``WorkflowResult`` whose ``mark_complete()`` finalises timing,
status and summary.

Key Concepts:
    OverallStatus: PASSED, FAILED, SKIPPED, RUNNING, PENDING, ROLLED_BACK.
    StepResult: name, status, timing, error, output fields.
    WorkflowResult: ordered steps + compensation records.

Architecture Decisions:
    - Pydantic v2 for workflow results: ``model_dump_json(indent=2)`` is
      what ``kubeship all --json`` prints.
    - ``mark_complete()`` pattern: the runner calls it once when done.

Tags:
    results, models, pydantic, workflow, status
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from kubeship.core.errors import categorize_error, is_retryable


def _now() -> str:
    return datetime.now(UTC).isoformat()


# ---------------------------------------------------------------------------
# Action return values
# ---------------------------------------------------------------------------


@dataclass
class ClusterInfo:
    """What ``setup`` learned about the target cluster."""

    name: str
    created: bool
    datacenter: str
    kubeconfig: Path
    poll_attempts: int = 0


@dataclass
class AppEndpoint:
    """Public address of the exposed application."""

    ip: str
    port: int

    @property
    def url(self) -> str:
        return f"http://{self.ip}:{self.port}"


# ---------------------------------------------------------------------------
# Workflow results
# ---------------------------------------------------------------------------


class OverallStatus(str, Enum):
    """Status of a step or of a whole run."""

    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"
    RUNNING = "RUNNING"
    PENDING = "PENDING"
    ROLLED_BACK = "ROLLED_BACK"


class StepResult(BaseModel):
    """Result of one action inside a composed workflow."""

    name: str
    status: OverallStatus = OverallStatus.PENDING
    started_at: str | None = None
    completed_at: str | None = None
    duration_seconds: float = 0.0
    error: str | None = None
    error_type: str | None = None
    error_category: str | None = None
    retryable: bool = False
    exit_code: int | None = None
    output: dict[str, Any] = Field(default_factory=dict)

    def start(self) -> None:
        self.status = OverallStatus.RUNNING
        self.started_at = _now()

    def finish(self, error: Exception | None = None) -> None:
        """Record completion; ``error`` marks the step FAILED."""
        self.completed_at = _now()
        if self.started_at:
            start = datetime.fromisoformat(self.started_at)
            end = datetime.fromisoformat(self.completed_at)
            self.duration_seconds = (end - start).total_seconds()
        if error is None:
            self.status = OverallStatus.PASSED
        else:
            self.status = OverallStatus.FAILED
            self.error = getattr(error, "message", None) or str(error)
            self.error_type = type(error).__name__
            self.error_category = categorize_error(error).value
            self.retryable = is_retryable(error)
            self.exit_code = getattr(error, "exit_code", None)


class CompensationResult(BaseModel):
    """One rollback action run after a failed workflow."""

    name: str
    success: bool
    error: str | None = None


class WorkflowResult(BaseModel):
    """Result of the composed ``all`` workflow."""

    run_id: str
    started_at: str = Field(default_factory=_now)
    completed_at: str | None = None
    duration_seconds: float = 0.0
    steps: list[StepResult] = Field(default_factory=list)
    compensations: list[CompensationResult] = Field(default_factory=list)
    overall_status: OverallStatus = OverallStatus.PENDING
    failed_step: str | None = None
    endpoint: str | None = None
    summary: str = ""

    @property
    def succeeded(self) -> bool:
        return self.overall_status == OverallStatus.PASSED

    @property
    def exit_code(self) -> int:
        """Process exit status for the run: 0, the failed tool's status, or 1."""
        if self.succeeded:
            return 0
        for step in self.steps:
            if step.status == OverallStatus.FAILED and step.exit_code and step.exit_code > 0:
                return step.exit_code
        return 1

    def step(self, name: str) -> StepResult:
        """Return the step named ``name``.

        Raises
        ------
        KeyError
            If no such step was recorded.
        """
        for s in self.steps:
            if s.name == name:
                return s
        raise KeyError(name)

    def mark_complete(self) -> None:
        """Finalize run: duration, overall status, summary."""
        self.completed_at = _now()
        start = datetime.fromisoformat(self.started_at)
        end = datetime.fromisoformat(self.completed_at)
        self.duration_seconds = (end - start).total_seconds()

        failed = [s for s in self.steps if s.status == OverallStatus.FAILED]
        if failed:
            self.failed_step = failed[0].name
            if self.compensations and all(c.success for c in self.compensations):
                self.overall_status = OverallStatus.ROLLED_BACK
            else:
                self.overall_status = OverallStatus.FAILED
        elif self.steps and all(s.status == OverallStatus.PASSED for s in self.steps):
            self.overall_status = OverallStatus.PASSED
        else:
            self.overall_status = OverallStatus.SKIPPED

        passed = sum(1 for s in self.steps if s.status == OverallStatus.PASSED)
        self.summary = (
            f"{passed}/{len(self.steps)} steps passed, "
            f"{self.overall_status.value} in {self.duration_seconds:.1f}s"
        )
        if self.failed_step:
            self.summary += f" (failed at {self.failed_step})"
