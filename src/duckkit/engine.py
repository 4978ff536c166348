"""
Plan/apply engine.

Ties the pipeline together: load and validate the desired state, read the
actual state, diff the two, and execute the resulting plan in order.

Usage:
    from duckkit import Reconciler, build_client, load_settings

    settings = load_settings()
    with build_client(settings) as client:
        engine = Reconciler(client, settings)
        plan, warnings = engine.plan("config/")
        result = engine.apply(plan)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from duckkit.capabilities import validate_apply_capabilities
from duckkit.client import APIClient
from duckkit.config import Settings
from duckkit.differ import diff
from duckkit.errors import ValidationError, ValidationIssue
from duckkit.executors import ExecutionResult, Executor
from duckkit.index import ResourceIndex
from duckkit.loader import LoadOptions, load_directory, validate
from duckkit.models.state import DesiredState
from duckkit.plan import Plan
from duckkit.reader import StateReader
from duckkit.safety import validate_no_self_api_key_deletion

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Outcome of an apply: every action ran, some may have failed."""

    succeeded: int = 0
    failed: int = 0
    results: List[ExecutionResult] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 0 if self.failed == 0 else 1

    def get_summary(self) -> str:
        lines = [
            "Apply Summary:",
            f"  Total operations: {len(self.results)}",
            f"  Successful: {self.succeeded}",
            f"  Failed: {self.failed}",
        ]
        if self.failed:
            lines.append("\nFailed operations:")
            for result in self.results:
                if not result.success:
                    lines.append(f"  - {result}")
        return "\n".join(lines)


class Reconciler:
    """
    One plan/apply session against one server.

    The resource index built while planning is reused by the apply that
    follows, so identifiers read during planning need not be fetched again.
    """

    def __init__(self, client: APIClient, settings: Optional[Settings] = None):
        self.client = client
        self.settings = settings or Settings()
        self.index: Optional[ResourceIndex] = None
        self.warnings: List[str] = []

    def load(self, desired_dir: Union[str, Path]) -> DesiredState:
        """
        Load and validate the desired state.

        Raises:
            ConfigError: If the directory cannot be parsed
            ValidationError: If validation finds any issue
        """
        options = LoadOptions(allow_unknown_fields=self.settings.allow_unknown_fields)
        desired = load_directory(desired_dir, options)
        issues = validate(desired)
        if issues:
            raise ValidationError(issues)
        return desired

    def read_actual(self) -> DesiredState:
        """
        Read the server's state into a fresh session index.

        Raises:
            ReadStateError: If a mandatory endpoint cannot be read
        """
        reader = StateReader(
            self.client,
            compatibility_mode=self.settings.compatibility_mode,
            page_size=self.settings.page_size,
        )
        actual = reader.read_state()
        self.index = reader.index
        self.warnings = list(reader.warnings)
        return actual

    def plan(self, desired_dir: Union[str, Path]) -> Tuple[Plan, List[str]]:
        """
        Compute the plan for a desired-state directory.

        Args:
            desired_dir: Root of the configuration tree

        Returns:
            The sorted plan and any optional-endpoint warnings
        """
        desired = self.load(desired_dir)
        actual = self.read_actual()
        plan = diff(desired, actual)
        summary = plan.summary()
        logger.info(
            f"Plan: {summary['create']} to create, {summary['update']} to update, "
            f"{summary['delete']} to delete, {summary['errors']} error(s)"
        )
        return plan, list(self.warnings)

    def apply(self, plan: Plan) -> ApplyResult:
        """
        Execute a plan.

        Every action runs even when earlier ones fail; nothing is rolled back.

        Raises:
            ValidationError: If the plan carries plan errors
            CapabilityError: If the server lacks an endpoint the plan needs
            SafetyError: If the plan would revoke the session's own API key
        """
        if plan.errors:
            raise ValidationError([
                ValidationIssue(f"{e.resource_kind.value} {e.resource_name}", e.message)
                for e in plan.errors
            ])

        validate_apply_capabilities(self.client, plan.actions, self.settings.compatibility_mode)
        validate_no_self_api_key_deletion(self.client, plan.actions)

        if self.index is None:
            self.read_actual()
        executor = Executor(self.client, self.index)

        result = ApplyResult()
        for action in plan.actions:
            outcome = executor.execute(action)
            result.results.append(outcome)
            if outcome.success:
                result.succeeded += 1
            else:
                result.failed += 1

        logger.info(f"Apply complete: {result.succeeded} succeeded, {result.failed} failed")
        return result


__all__ = ["ApplyResult", "Reconciler"]
