"""
Structured error types for kubeship.

Every failure an action can hit falls into one of a handful of kinds:
a required positional argument was empty, an external CLI exited
non-zero, its output could not be interpreted, or the cluster never left
provisioning.  Each kind is a ``KubeshipError`` subclass that carries:

- **Category:** what kind of error (validation, tool, parse, timeout, ...)
- **Retryable:** whether running the same action again may succeed
- **Context:** free-form metadata (action, cluster, argv, ...)
- **Cause:** the chained underlying exception

Architecture:
    ::

        ┌────────────────────────────────────────────────────────────┐
        │                      KubeshipError                          │
        │        (category, retryable, context, cause)               │
        ├────────────────────────────────────────────────────────────┤
        │  MissingArgumentError   ConfigError        ToolError        │
        │  (VALIDATION)           (CONFIG)           (TOOL)           │
        │                              │                  │            │
        │                   ManifestNotFoundError  ToolNotFoundError  │
        │                                          ToolTimeoutError   │
        │                                                              │
        │  ParseError             ProvisioningTimeoutError             │
        │  (PARSE)                (TIMEOUT, retryable)                 │
        │                                                              │
        │  NetworkError (NETWORK, retryable)                           │
        └────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ToolError("docker build failed", argv=["docker", "build"], exit_code=2)
    >>> error.exit_code
    2
    >>> error.category.value
    'TOOL'

Tags:
    error-handling, exception-hierarchy, kubeship
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and exit-code routing."""

    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    TOOL = "TOOL"
    PARSE = "PARSE"
    TIMEOUT = "TIMEOUT"
    NETWORK = "NETWORK"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """Structured metadata attached to an error."""

    action: str | None = None
    cluster: str | None = None
    argv: list[str] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.action:
            result["action"] = self.action
        if self.cluster:
            result["cluster"] = self.cluster
        if self.argv:
            result["argv"] = " ".join(self.argv)
        if self.metadata:
            result.update(self.metadata)
        return result


class KubeshipError(Exception):
    """Base class for every error raised by kubeship.

    Subclasses set ``default_category`` and ``default_retryable``; callers
    may override both per instance.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> KubeshipError:
        """Add context to this error (fluent API).

        Usage:
            raise ParseError("no worker IP").with_context(cluster="todo")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# Argument / configuration errors (never retryable)
# =============================================================================


class MissingArgumentError(KubeshipError):
    """A required positional argument was absent or empty.

    ``message`` is the exact line printed to the user.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(self, action: str, message: str, missing: list[str] | None = None):
        super().__init__(message, context=ErrorContext(action=action))
        self.action = action
        self.missing = missing or []


class ConfigError(KubeshipError):
    """Invalid or missing configuration."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class ManifestNotFoundError(ConfigError):
    """The Kubernetes manifest applied by ``create_db`` does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Manifest file not found: {path}")
        self.path = path


# =============================================================================
# External tool errors
# =============================================================================


class ToolError(KubeshipError):
    """An external CLI exited with a non-zero status."""

    default_category = ErrorCategory.TOOL
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        argv: list[str] | None = None,
        exit_code: int | None = None,
        stderr: str = "",
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.argv = list(argv or [])
        self.exit_code = exit_code
        self.stderr = stderr
        if self.argv:
            self.context.argv = self.argv


class ToolNotFoundError(ToolError):
    """The executable is not on ``PATH``."""

    def __init__(self, tool: str):
        super().__init__(
            f"{tool!r} not found on PATH. Run 'kubeship install_tools' or install it manually.",
            argv=[tool],
            exit_code=127,
        )
        self.tool = tool


class ToolTimeoutError(ToolError):
    """An external CLI did not finish within the configured timeout."""

    default_category = ErrorCategory.TIMEOUT
    default_retryable = True


# =============================================================================
# Output / provisioning errors
# =============================================================================


class ParseError(KubeshipError):
    """CLI output did not have the expected shape."""

    default_category = ErrorCategory.PARSE
    default_retryable = False


class ProvisioningTimeoutError(KubeshipError):
    """The cluster stayed in the pending state past the maximum wait."""

    default_category = ErrorCategory.TIMEOUT
    default_retryable = True

    def __init__(self, cluster: str, waited_seconds: float, attempts: int):
        super().__init__(
            f"Cluster {cluster!r} still provisioning after {waited_seconds:.0f}s "
            f"({attempts} status checks)",
            context=ErrorContext(cluster=cluster),
        )
        self.waited_seconds = waited_seconds
        self.attempts = attempts


class NetworkError(KubeshipError):
    """An HTTP request to the deployed application failed in transport."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


# =============================================================================
# Utilities
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, KubeshipError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, KubeshipError):
        return error.category
    if isinstance(error, (ConnectionError, OSError)):
        return ErrorCategory.NETWORK
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "KubeshipError",
    "MissingArgumentError",
    "ConfigError",
    "ManifestNotFoundError",
    "ToolError",
    "ToolNotFoundError",
    "ToolTimeoutError",
    "ParseError",
    "ProvisioningTimeoutError",
    "NetworkError",
    "is_retryable",
    "categorize_error",
]
