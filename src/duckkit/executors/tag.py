"""
Tag executors: tag definitions and their assignments to securables.

Both kinds are immutable on the server. A tag is identified by ``key`` or
``key:value``; changing either is a different tag.
"""

import logging
from typing import Any, Dict

from duckkit.errors import ResolutionError
from duckkit.index import TAG_SECURABLE_KINDS
from duckkit.models import TagAssignmentSpec, TagSpec
from duckkit.models.enums import ResourceKind
from duckkit.plan import Action

from .base import ExecutionResult, RelationshipExecutor

logger = logging.getLogger(__name__)


class TagExecutor(RelationshipExecutor[TagSpec]):
    """Executor for tag definitions."""

    resource_kind = ResourceKind.TAG

    def create(self, action: Action) -> ExecutionResult:
        tag: TagSpec = action.desired
        payload: Dict[str, Any] = {"key": tag.key}
        if tag.value is not None:
            payload["value"] = tag.value
        return self._create(
            action, "/tags", payload,
            lookup=lambda: self._find(
                "/tags",
                lambda row: row.get("key") == tag.key and (row.get("value") or None) == (tag.value or None),
            ),
        )

    def delete(self, action: Action) -> ExecutionResult:
        tag_id = self.resolve(self.resource_kind, action.resource_name)
        self.client.delete(f"/tags/{tag_id}")
        self.index.forget(self.resource_kind, action.resource_name)
        return self._success(action, "Deleted successfully")


class TagAssignmentExecutor(RelationshipExecutor[TagAssignmentSpec]):
    """Executor for tags attached to schemas, tables and columns."""

    resource_kind = ResourceKind.TAG_ASSIGNMENT

    def _securable_id(self, assignment: TagAssignmentSpec) -> str:
        kind = TAG_SECURABLE_KINDS.get(assignment.securable_type)
        if kind is None:
            raise ResolutionError(assignment.securable_type, assignment.securable)
        return self.resolve(kind, assignment.securable)

    def create(self, action: Action) -> ExecutionResult:
        assignment: TagAssignmentSpec = action.desired
        tag_id = self.resolve(ResourceKind.TAG, assignment.tag)
        payload: Dict[str, Any] = {
            "securable_type": assignment.securable_type,
            "securable_id": self._securable_id(assignment),
        }
        if assignment.column_name:
            payload["column_name"] = assignment.column_name
        return self._create_relationship(action, f"/tags/{tag_id}/assignments", payload)

    def delete(self, action: Action) -> ExecutionResult:
        assignment: TagAssignmentSpec = action.actual
        params: Dict[str, Any] = {
            "tag_id": self.resolve(ResourceKind.TAG, assignment.tag),
            "securable_id": self._securable_id(assignment),
            "securable_type": assignment.securable_type,
        }
        if assignment.column_name:
            params["column_name"] = assignment.column_name
        self.client.delete("/tag-assignments", params=params)
        return self._success(action, "Unassigned successfully")
