"""
duckkit: declarative plan/apply for a multi-tenant data platform.

Desired state lives in a directory of YAML documents. duckkit reads the
server's actual state, computes an ordered plan of creates, updates and
deletes, and applies it through the platform's JSON API.

Usage:
    from duckkit import Reconciler, build_client, format_text, load_settings

    settings = load_settings()
    with build_client(settings) as client:
        engine = Reconciler(client, settings)
        plan, warnings = engine.plan("config/")
        print(format_text(plan))
        result = engine.apply(plan)
"""

__version__ = "0.1.0"

from .capabilities import CompatibilityMode
from .client import APIClient
from .config import Settings, build_client, load_settings
from .differ import diff
from .engine import ApplyResult, Reconciler
from .errors import (
    APIError,
    CapabilityError,
    ConfigError,
    DuckkitError,
    ExecutionError,
    ReadStateError,
    ResolutionError,
    SafetyError,
    TransportError,
    ValidationError,
    ValidationIssue,
)
from .executors import ExecutionResult, Executor
from .formatter import format_json, format_text
from .index import ResourceIndex
from .loader import LoadOptions, load_directory, validate
from .models import ActualState, DesiredState, Operation, ResourceKind
from .plan import Action, FieldDiff, Plan, PlanError
from .reader import StateReader

__all__ = [
    "__version__",
    # Engine
    "Reconciler",
    "ApplyResult",
    # Pipeline stages
    "load_directory",
    "LoadOptions",
    "validate",
    "StateReader",
    "diff",
    "Executor",
    "ExecutionResult",
    "format_text",
    "format_json",
    # Types
    "Action",
    "ActualState",
    "DesiredState",
    "FieldDiff",
    "Operation",
    "Plan",
    "PlanError",
    "ResourceIndex",
    "ResourceKind",
    # Client & settings
    "APIClient",
    "CompatibilityMode",
    "Settings",
    "build_client",
    "load_settings",
    # Errors
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
