"""Settings for kubeship.

Deployment constants (registry URL, database type and plan, login
endpoint, default instance and namespace names) are settings, defaulting
to the US-South endpoints and the todo-list sample names.
Every field can be overridden with a ``KUBESHIP_``-prefixed environment
variable or a ``.env`` file in the working directory::

    KUBESHIP_REGISTRY_URL=registry.eu-de.bluemix.net
    KUBESHIP_POLL_MAX_WAIT_SECONDS=7200
    KUBESHIP_LEGACY_EXIT_CODES=true

Tags:
    settings, configuration, pydantic, environment
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class KubeshipSettings(BaseSettings):
    """Effective configuration for a kubeship process."""

    model_config = SettingsConfigDict(
        env_prefix="KUBESHIP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Platform ─────────────────────────────────────────────────
    registry_url: str = "registry.ng.bluemix.net"
    login_url: str = "api.ng.bluemix.net"
    installer_url: str = "https://ibm.biz/idt-installer"
    plugin_repo: str = "Bluemix"

    # ── Database service ─────────────────────────────────────────
    database_type: str = "cloudantNoSQLDB"
    database_plan: str = "Lite"
    bind_group: str = Field(
        default="default",
        description="Cluster namespace the database service is bound into",
    )

    # ── Application ──────────────────────────────────────────────
    manifest_path: Path = Path("manifest.yml")
    app_port: int = 8080
    docker_sudo: bool = Field(
        default=False,
        description="Prefix 'docker run' with sudo",
    )

    # ── Cluster readiness polling ────────────────────────────────
    poll_interval_seconds: float = 60.0
    poll_max_wait_seconds: float = 3600.0
    poll_backoff: float = Field(
        default=1.0,
        description="Multiplier applied to the interval after each check (1.0 = fixed)",
    )
    poll_max_interval_seconds: float = 300.0

    # ── Timeouts ─────────────────────────────────────────────────
    command_timeout_seconds: float | None = None
    http_timeout_seconds: float = 10.0

    # ── Behaviour / observability ────────────────────────────────
    legacy_exit_codes: bool = Field(
        default=False,
        description="Exit 0 on missing arguments (legacy behaviour)",
    )
    log_level: str = "WARNING"
    log_json: bool | None = None

    @field_validator("poll_interval_seconds", "poll_max_wait_seconds")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than zero")
        return value

    @field_validator("poll_backoff")
    @classmethod
    def _backoff_at_least_one(cls, value: float) -> float:
        if value < 1.0:
            raise ValueError("must be >= 1.0")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


_settings_cache: dict[str, KubeshipSettings] = {}


def get_settings(*, _force_reload: bool = False) -> KubeshipSettings:
    """Load, validate, and cache the process settings."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = KubeshipSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
