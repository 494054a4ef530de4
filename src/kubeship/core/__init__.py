"""
Core primitives shared by the deploy and CLI layers: typed errors,
structured logging, and environment-driven settings.
"""

from kubeship.core.errors import (
    ErrorCategory,
    KubeshipError,
    MissingArgumentError,
    ParseError,
    ProvisioningTimeoutError,
    ToolError,
)
from kubeship.core.logging import configure_logging, get_logger
from kubeship.core.settings import KubeshipSettings, get_settings

__all__ = [
    "ErrorCategory",
    "KubeshipError",
    "KubeshipSettings",
    "MissingArgumentError",
    "ParseError",
    "ProvisioningTimeoutError",
    "ToolError",
    "configure_logging",
    "get_logger",
    "get_settings",
]
