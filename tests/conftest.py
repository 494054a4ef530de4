"""
Shared pytest fixtures and configuration for kubeship tests.

This module provides:
- A ``Deployer`` wired to a recording fake runner and a fake clock
- Settings isolated from the developer's environment and ``.env``
- Auto-marking of tests by location

Usage:
    def test_build(deployer, fake_runner):
        deployer.build("todolist")
        assert fake_runner.calls == [["docker", "build", "-t", "todolist", "."]]
"""

from __future__ import annotations

import os
import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Ensure kubeship package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from kubeship.core.logging import configure_logging
from kubeship.core.settings import KubeshipSettings, clear_settings_cache
from kubeship.deploy.operations import Deployer
from kubeship.deploy.polling import Poller, PollPolicy
from tests._support import FakeClock, FakeRunner


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        # Mark all tests without explicit markers as unit tests
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Environment isolation
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _quiet_logging() -> None:
    configure_logging(level="WARNING", json_format=False, add_timestamp=False)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """
    Strip KUBESHIP_* variables and run from an empty directory.

    Keeps a developer's own configuration or ``.env`` from leaking into
    tests, and resets the settings cache on both sides.
    """
    for key in list(os.environ):
        if key.startswith("KUBESHIP_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# Deployer fixtures
# =============================================================================


@pytest.fixture
def manifest(tmp_path: Path) -> Path:
    path = tmp_path / "manifest.yml"
    path.write_text("apiVersion: apps/v1\nkind: Deployment\nmetadata:\n  name: todo\n")
    return path


@pytest.fixture
def settings(manifest: Path) -> KubeshipSettings:
    return KubeshipSettings(_env_file=None, manifest_path=manifest)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def messages() -> list[str]:
    """Lines the deployer printed for the user."""
    return []


@pytest.fixture
def deployer(
    settings: KubeshipSettings,
    fake_runner: FakeRunner,
    fake_clock: FakeClock,
    messages: list[str],
) -> Deployer:
    poller = Poller(
        PollPolicy(interval=60, max_wait=600),
        sleep=fake_clock.sleep,
        clock=fake_clock,
    )
    return Deployer(settings=settings, runner=fake_runner, notify=messages.append, poller=poller)
