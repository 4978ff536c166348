"""
Compute endpoint and compute assignment executors.
"""

import logging
from typing import Any, Dict

from duckkit.models import ComputeAssignmentSpec, ComputeEndpointSpec
from duckkit.models.enums import ResourceKind
from duckkit.plan import Action

from .base import BaseExecutor, ExecutionResult

logger = logging.getLogger(__name__)


class ComputeEndpointExecutor(BaseExecutor[ComputeEndpointSpec]):
    """Executor for LOCAL and REMOTE compute endpoints."""

    resource_kind = ResourceKind.COMPUTE_ENDPOINT

    def _payload(self, spec: ComputeEndpointSpec) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": spec.name,
            "url": spec.url,
            "type": spec.type,
            "size": spec.size,
        }
        if spec.max_memory_gb is not None:
            payload["max_memory_gb"] = spec.max_memory_gb
        token = self.secret_from_env(spec.auth_token_from_env)
        if token is not None:
            payload["auth_token"] = token
        return payload

    def create(self, action: Action) -> ExecutionResult:
        spec: ComputeEndpointSpec = action.desired
        return self._create(
            action, "/compute-endpoints", self._payload(spec),
            lookup=lambda: self._get_or_none(f"/compute-endpoints/{spec.name}"),
        )

    def update(self, action: Action) -> ExecutionResult:
        spec: ComputeEndpointSpec = action.desired
        self.client.patch(f"/compute-endpoints/{spec.name}", json=self._payload(spec))
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        self.client.delete(f"/compute-endpoints/{action.resource_name}")
        self.index.forget(self.resource_kind, action.resource_name)
        return self._success(action, "Deleted successfully")


class ComputeAssignmentExecutor(BaseExecutor[ComputeAssignmentSpec]):
    """Executor for routing principals to compute endpoints."""

    resource_kind = ResourceKind.COMPUTE_ASSIGNMENT

    def create(self, action: Action) -> ExecutionResult:
        spec: ComputeAssignmentSpec = action.desired
        principal_id = self.resolve_principal(spec.principal, spec.principal_type)
        url = f"/compute-endpoints/{spec.endpoint}/assignments"
        payload = {
            "principal_id": principal_id,
            "principal_type": spec.principal_type,
            "is_default": spec.is_default,
            "fallback_local": spec.fallback_local,
        }
        return self._create(
            action, url, payload,
            lookup=lambda: self._find(
                url,
                lambda row: str(row.get("principal_id")) == principal_id
                and row.get("principal_type") == spec.principal_type,
            ),
        )

    def update(self, action: Action) -> ExecutionResult:
        spec: ComputeAssignmentSpec = action.desired
        assignment_id = self.resolve(self.resource_kind, spec.path)
        self.client.patch(
            f"/compute-endpoints/{spec.endpoint}/assignments/{assignment_id}",
            json={"is_default": spec.is_default, "fallback_local": spec.fallback_local},
        )
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        spec: ComputeAssignmentSpec = action.actual
        assignment_id = self.resolve(self.resource_kind, spec.path)
        self.client.delete(f"/compute-endpoints/{spec.endpoint}/assignments/{assignment_id}")
        self.index.forget(self.resource_kind, spec.path)
        return self._success(action, "Deleted successfully")
