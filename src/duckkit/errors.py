"""
Exception taxonomy for duckkit.

Every failure surfaced by the plan/apply engine derives from DuckkitError so
callers can catch the whole family at once. Exceptions keep the values they
were raised with as attributes; the message is built once in __init__.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


class DuckkitError(Exception):
    """Base class for all duckkit errors."""


# =============================================================================
# CONFIGURATION & VALIDATION
# =============================================================================

class ConfigError(DuckkitError):
    """Raised when the desired-state directory cannot be loaded."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        if path:
            super().__init__(f"{path}: {message}")
        else:
            super().__init__(message)


@dataclass(frozen=True)
class ValidationIssue:
    """A single structural or referential problem in the desired state."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ValidationError(DuckkitError):
    """Raised when validation reports one or more issues."""

    def __init__(self, issues: List[ValidationIssue]):
        self.issues = list(issues)
        lines = "\n".join(f"  - {issue}" for issue in self.issues)
        super().__init__(f"validation failed with {len(self.issues)} error(s):\n{lines}")


# =============================================================================
# REMOTE STATE
# =============================================================================

class APIError(DuckkitError):
    """Non-2xx response from the platform API."""

    def __init__(self, status_code: int, message: str, code: str = ""):
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"API error (HTTP {status_code}): {message}")


class TransportError(DuckkitError):
    """The request never produced an HTTP response."""

    def __init__(self, method: str, path: str, cause: Exception):
        self.method = method
        self.path = path
        self.cause = cause
        super().__init__(f"{method} {path}: {cause}")


class ReadStateError(DuckkitError):
    """Raised when a mandatory endpoint cannot be read."""

    def __init__(self, resource: str, cause: Exception):
        self.resource = resource
        self.cause = cause
        super().__init__(f"reading {resource}: {cause}")


class ResolutionError(DuckkitError):
    """A reference could not be resolved to a server identifier."""

    def __init__(self, kind: str, path: str):
        self.kind = kind
        self.path = path
        super().__init__(f"{kind} {path!r} not found in resource index")


# =============================================================================
# APPLY
# =============================================================================

class ExecutionError(DuckkitError):
    """Wraps the failure of a single action."""

    def __init__(self, kind: str, name: str, operation: str, cause: Exception):
        self.kind = kind
        self.name = name
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} {kind} {name!r}: {cause}")


class CapabilityError(DuckkitError):
    """The server cannot accept the actions in this plan."""


class SafetyError(DuckkitError):
    """The plan would lock the current session out of the server."""


__all__ = [
    "APIError",
    "CapabilityError",
    "ConfigError",
    "DuckkitError",
    "ExecutionError",
    "ReadStateError",
    "ResolutionError",
    "SafetyError",
    "TransportError",
    "ValidationError",
    "ValidationIssue",
]
