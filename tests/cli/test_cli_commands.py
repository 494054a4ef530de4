"""Tests for kubeship.cli — command smoke tests via CliRunner.

The deployer is patched with one wired to the recording FakeRunner, so
no bx, docker or kubectl is needed.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
import typer
from typer.testing import CliRunner

from kubeship.cli.app import app
from kubeship.cli.utils import _echo_err
from kubeship.deploy.operations import Deployer
from tests._support import NODE_PORT, WORKER_IP, script_healthy_cluster

runner = CliRunner()


@pytest.fixture
def patched(deployer):
    """Swap in a terminal-wired deployer that drives the FakeRunner."""

    def _make_deployer(*, quiet: bool = False) -> Deployer:
        return Deployer(
            settings=deployer.settings,
            runner=deployer.runner,
            notify=_echo_err if quiet else typer.echo,
            poller=deployer.poller,
        )

    with patch("kubeship.cli.app.make_deployer", side_effect=_make_deployer) as factory:
        yield factory


# ─── Dispatcher ──────────────────────────────────────────────────────────


class TestDispatcher:
    def test_no_action_prints_usage(self, patched):
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "Usage: kubeship <action> [arguments...]" in result.output
        patched.assert_not_called()

    def test_unknown_action_prints_usage(self, patched, fake_runner):
        result = runner.invoke(app, ["frobnicate", "x"])
        assert result.exit_code == 0
        assert "Usage: kubeship <action> [arguments...]" in result.output
        assert "setup <clusterName> <nameSpace>" in result.output
        assert fake_runner.calls == []

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "kubeship" in result.output

    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "create_db" in result.output

    def test_extra_arguments_ignored(self, patched, fake_runner):
        result = runner.invoke(app, ["build", "todolist", "extra", "--unknown"])
        assert result.exit_code == 0
        assert fake_runner.calls == [["docker", "build", "-t", "todolist", "."]]

    def test_verbose_logs_action_signature(self, patched, fake_runner):
        result = runner.invoke(app, ["--verbose", "build", "todolist"])
        assert result.exit_code == 0
        assert "action.started" in result.output
        assert "build <" in result.output


# ─── Missing arguments ───────────────────────────────────────────────────


class TestMissingArguments:
    def test_build_without_image(self, patched, fake_runner):
        result = runner.invoke(app, ["build"])
        assert result.exit_code == 1
        assert "Error: run failed, docker name not provided." in result.stdout
        assert fake_runner.calls == []

    def test_legacy_exit_code(self, patched, fake_runner, monkeypatch):
        monkeypatch.setenv("KUBESHIP_LEGACY_EXIT_CODES", "true")
        result = runner.invoke(app, ["delete", "todo"])
        assert result.exit_code == 0
        assert "Error: Could not delete container group and service" in result.stdout
        assert fake_runner.calls == []

    def test_all_without_arguments(self, patched, fake_runner):
        result = runner.invoke(app, ["all", "todo", "todo-db"])
        assert result.exit_code == 1
        assert "Error: Could not complete entire deployment process" in result.stdout
        assert fake_runner.calls == []


# ─── Actions ─────────────────────────────────────────────────────────────


class TestActions:
    def test_push(self, patched, fake_runner):
        result = runner.invoke(app, ["push", "myimage", "myns"])
        assert result.exit_code == 0
        assert fake_runner.calls[:2] == [
            ["docker", "tag", "myimage", "registry.ng.bluemix.net/myns/myimage"],
            ["docker", "push", "registry.ng.bluemix.net/myns/myimage"],
        ]

    def test_setup_prints_export_line(self, patched, fake_runner):
        script_healthy_cluster(fake_runner)
        result = runner.invoke(app, ["setup", "todo", "todo_ns"])
        assert result.exit_code == 0
        assert "export KUBECONFIG=" in result.stdout
        assert "kube-config-hou02-todo.yml" in result.stdout

    def test_get_ip_prints_url(self, patched, fake_runner):
        script_healthy_cluster(fake_runner)
        result = runner.invoke(app, ["get_ip", "todo"])
        assert result.exit_code == 0
        assert f"You may view the application at: http://{WORKER_IP}:{NODE_PORT}" in result.stdout

    def test_stop_missing_container(self, patched, fake_runner):
        fake_runner.script("docker", "rm", returncode=1)
        result = runner.invoke(app, ["stop", "todolist"])
        assert result.exit_code == 0

    def test_tool_failure_exit_code(self, patched, fake_runner):
        fake_runner.script("docker", "build", returncode=2, stderr="no Dockerfile")
        result = runner.invoke(app, ["build", "todolist"])
        assert result.exit_code == 2
        assert "docker build -t todolist" in result.output


# ─── all ─────────────────────────────────────────────────────────────────


class TestAll:
    def test_json_output(self, patched, fake_runner):
        script_healthy_cluster(fake_runner)
        result = runner.invoke(app, ["all", "todo", "todo-db", "todolist", "todo_ns", "--json"])
        assert result.exit_code == 0
        assert '"overall_status": "PASSED"' in result.stdout
        assert f'"endpoint": "http://{WORKER_IP}:{NODE_PORT}"' in result.stdout
        patched.assert_called_once_with(quiet=True)

    def test_failure_exits_nonzero(self, patched, fake_runner):
        script_healthy_cluster(fake_runner)
        fake_runner.script("docker", "push", returncode=1)
        result = runner.invoke(app, ["all", "todo", "todo-db", "todolist", "todo_ns", "--skip-install"])
        assert result.exit_code == 1
        assert "FAILED" in result.output
        assert fake_runner.commands("bash") == []

    def test_failure_exits_with_tool_status(self, patched, fake_runner):
        script_healthy_cluster(fake_runner)
        fake_runner.script("docker", "push", returncode=3, stderr="denied")
        result = runner.invoke(app, ["all", "todo", "todo-db", "todolist", "todo_ns", "--json"])
        assert result.exit_code == 3
        assert '"exit_code": 3' in result.stdout

    def test_rollback_flag(self, patched, fake_runner):
        script_healthy_cluster(fake_runner)
        fake_runner.script("kubectl", "expose", returncode=1)
        result = runner.invoke(
            app, ["all", "todo", "todo-db", "todolist", "todo_ns", "--rollback", "--json"]
        )
        assert result.exit_code == 1
        assert '"name": "service:todo-db"' in result.stdout


# ─── config ──────────────────────────────────────────────────────────────


class TestConfig:
    def test_json(self, monkeypatch):
        monkeypatch.setenv("KUBESHIP_REGISTRY_URL", "registry.eu-de.bluemix.net")
        result = runner.invoke(app, ["config", "--json"])
        assert result.exit_code == 0
        assert '"registry_url": "registry.eu-de.bluemix.net"' in result.stdout

    def test_table(self):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "registry_url" in result.output

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("KUBESHIP_POLL_BACKOFF", "0.1")
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 1
        assert "Configuration Error" in result.output
