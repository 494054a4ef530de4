"""External tool execution for kubeship.

Runs the platform CLI (``bx``), the container engine (``docker``), the
cluster orchestrator (``kubectl``) and the installer pipeline through
``subprocess``.  No SDKs: every action is the same command line an
operator would type.

Key Concepts:
    CommandRunner: ``run()`` resolves the executable on PATH, executes,
        and raises ``ToolError`` on a non-zero exit unless ``check=False``.
    CommandResult: argv, return code, captured stdout/stderr.
    Environment: ``export_env()`` records variables (``KUBECONFIG``) that
        are passed to every later command and exported to the process.

Architecture Decisions:
    - Captured vs streamed: commands whose output is parsed run with
      ``capture=True``; the rest stream to the terminal so interactive
      prompts (``bx login --sso``, ``bx cs cluster-rm``) still work.
    - One seam for tests: operations only ever talk to ``CommandRunner``,
      so tests substitute a recording fake and never touch a real tool.

Tags:
    subprocess, tools, bx, docker, kubectl
"""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass, field

from kubeship.core.errors import ToolError, ToolNotFoundError, ToolTimeoutError
from kubeship.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class CommandResult:
    """Outcome of one external command."""

    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout followed by stderr.

        Cluster lookups search both streams for the not-found and pending
        markers.
        """
        return self.stdout + self.stderr


@dataclass
class CommandRunner:
    """Executes external CLI commands.

    Parameters
    ----------
    timeout
        Per-command timeout in seconds (``None`` = no limit).
    env
        Extra environment variables layered over ``os.environ``.
    """

    timeout: float | None = None
    env: dict[str, str] = field(default_factory=dict)

    def run(
        self,
        argv: list[str],
        *,
        check: bool = True,
        capture: bool = False,
    ) -> CommandResult:
        """Run one command.

        Parameters
        ----------
        argv
            Command and arguments; ``argv[0]`` is looked up on PATH.
        check
            Raise ``ToolError`` on a non-zero exit.
        capture
            Capture stdout/stderr instead of streaming to the terminal.

        Raises
        ------
        ToolNotFoundError
            ``argv[0]`` is not installed.
        ToolTimeoutError
            The command exceeded ``timeout``.
        ToolError
            Non-zero exit with ``check=True``.
        """
        executable = shutil.which(argv[0])
        if executable is None:
            raise ToolNotFoundError(argv[0])

        cmd = [executable, *argv[1:]]
        logger.debug("tool.exec", argv=" ".join(argv), capture=capture)
        try:
            proc = subprocess.run(
                cmd,
                capture_output=capture,
                text=True,
                timeout=self.timeout,
                env={**os.environ, **self.env},
            )
        except subprocess.TimeoutExpired as exc:
            raise ToolTimeoutError(
                f"Command timed out after {self.timeout}s: {' '.join(argv)}",
                argv=argv,
                cause=exc,
            ) from exc

        result = CommandResult(
            argv=list(argv),
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )

        if not result.ok:
            logger.debug("tool.failed", argv=" ".join(argv), exit_code=result.returncode)
            if check:
                raise ToolError(
                    f"Command failed (exit {result.returncode}): {' '.join(argv)}",
                    argv=argv,
                    exit_code=result.returncode,
                    stderr=result.stderr,
                )
        return result

    def export_env(self, name: str, value: str) -> None:
        """Set a variable for later commands and for this process."""
        self.env[name] = value
        os.environ[name] = value
        logger.info("env.exported", name=name, value=value)

