"""
Executors for row filters, column masks and their principal bindings.

Policies are created under their table's identifier and addressed by their
own identifier afterwards. Action names carry the parent references:
``catalog.schema.table/policy`` for policies and
``catalog.schema.table/policy->type:principal`` for bindings.
"""

import logging
from typing import Any, Dict

from duckkit.models import ColumnMaskSpec, FilterBindingRef, MaskBindingRef, RowFilterSpec
from duckkit.models.enums import ResourceKind
from duckkit.models.policies import split_binding_path, split_policy_path
from duckkit.plan import Action

from .base import BaseExecutor, ExecutionResult, RelationshipExecutor

logger = logging.getLogger(__name__)


class _PolicyExecutor(BaseExecutor):
    """Shared create/delete flow for filters and masks."""

    collection: str

    def _payload(self, spec: Any) -> Dict[str, Any]:
        raise NotImplementedError

    def create(self, action: Action) -> ExecutionResult:
        table_path, name = split_policy_path(action.resource_name)
        table_id = self.resolve(ResourceKind.TABLE, table_path)
        url = f"/tables/{table_id}/{self.collection}"
        return self._create(
            action, url, self._payload(action.desired),
            lookup=lambda: self._find_by_name(url, name),
        )

    def update(self, action: Action) -> ExecutionResult:
        policy_id = self.resolve(self.resource_kind, action.resource_name)
        self.client.patch(f"/{self.collection}/{policy_id}", json=self._payload(action.desired))
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        policy_id = self.resolve(self.resource_kind, action.resource_name)
        self.client.delete(f"/{self.collection}/{policy_id}")
        self.index.forget(self.resource_kind, action.resource_name)
        return self._success(action, "Deleted successfully")


class RowFilterExecutor(_PolicyExecutor):
    resource_kind = ResourceKind.ROW_FILTER
    collection = "row-filters"

    def _payload(self, spec: RowFilterSpec) -> Dict[str, Any]:
        return {"name": spec.name, "filter_sql": spec.filter_sql, "description": spec.description}


class ColumnMaskExecutor(_PolicyExecutor):
    resource_kind = ResourceKind.COLUMN_MASK
    collection = "column-masks"

    def _payload(self, spec: ColumnMaskSpec) -> Dict[str, Any]:
        return {
            "name": spec.name,
            "column_name": spec.column_name,
            "mask_expression": spec.mask_expression,
            "description": spec.description,
        }


class RowFilterBindingExecutor(RelationshipExecutor[FilterBindingRef]):
    """Binds a row filter to a user or group."""

    resource_kind = ResourceKind.ROW_FILTER_BINDING

    def _target(self, action: Action):
        policy, principal_type, principal = split_binding_path(action.resource_name)
        filter_id = self.resolve(ResourceKind.ROW_FILTER, policy)
        principal_id = self.resolve_principal(principal, principal_type)
        return filter_id, principal_id, principal_type

    def create(self, action: Action) -> ExecutionResult:
        filter_id, principal_id, principal_type = self._target(action)
        return self._create_relationship(
            action,
            f"/row-filters/{filter_id}/bindings",
            {"principal_id": principal_id, "principal_type": principal_type},
        )

    def delete(self, action: Action) -> ExecutionResult:
        filter_id, principal_id, principal_type = self._target(action)
        self.client.delete(
            f"/row-filters/{filter_id}/bindings",
            params={"principal_id": principal_id, "principal_type": principal_type},
        )
        return self._success(action, "Unbound successfully")


class ColumnMaskBindingExecutor(BaseExecutor[MaskBindingRef]):
    """
    Binds a column mask to a user or group.

    The binding's ``see_original`` flag cannot be patched; changing it
    rebinds the principal.
    """

    resource_kind = ResourceKind.COLUMN_MASK_BINDING

    def _target(self, action: Action):
        policy, principal_type, principal = split_binding_path(action.resource_name)
        mask_id = self.resolve(ResourceKind.COLUMN_MASK, policy)
        principal_id = self.resolve_principal(principal, principal_type)
        return mask_id, principal_id, principal_type

    def _bind(self, action: Action) -> ExecutionResult:
        binding: MaskBindingRef = action.desired
        mask_id, principal_id, principal_type = self._target(action)
        return self._create_relationship(
            action,
            f"/column-masks/{mask_id}/bindings",
            {
                "principal_id": principal_id,
                "principal_type": principal_type,
                "see_original": binding.see_original,
            },
        )

    def _unbind(self, action: Action) -> None:
        mask_id, principal_id, principal_type = self._target(action)
        self.client.delete(
            f"/column-masks/{mask_id}/bindings",
            params={"principal_id": principal_id, "principal_type": principal_type},
        )

    def create(self, action: Action) -> ExecutionResult:
        return self._bind(action)

    def update(self, action: Action) -> ExecutionResult:
        self._unbind(action)
        self._bind(action)
        return self._success(action, "Rebound successfully")

    def delete(self, action: Action) -> ExecutionResult:
        self._unbind(action)
        return self._success(action, "Unbound successfully")
