"""
Executors for principals, groups, group memberships, grants and API keys.
"""

import logging
from typing import Any, Dict

from duckkit.errors import ResolutionError
from duckkit.index import SECURABLE_KINDS
from duckkit.models import APIKeySpec, GrantSpec, GroupSpec, MemberRef, PrincipalSpec
from duckkit.models.enums import ResourceKind
from duckkit.plan import Action

from .base import BaseExecutor, ExecutionResult, RelationshipExecutor

logger = logging.getLogger(__name__)


class PrincipalExecutor(BaseExecutor[PrincipalSpec]):
    """Executor for users and service principals."""

    resource_kind = ResourceKind.PRINCIPAL

    def create(self, action: Action) -> ExecutionResult:
        spec: PrincipalSpec = action.desired
        payload = {"name": spec.name, "type": spec.type, "is_admin": spec.is_admin}
        return self._create(
            action, "/principals", payload,
            lookup=lambda: self._find_by_name("/principals", spec.name),
        )

    def update(self, action: Action) -> ExecutionResult:
        spec: PrincipalSpec = action.desired
        principal_id = self.resolve(self.resource_kind, spec.path)
        self.client.put(f"/principals/{principal_id}/admin", json={"is_admin": spec.is_admin})
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        principal_id = self.resolve(self.resource_kind, action.resource_name)
        self.client.delete(f"/principals/{principal_id}")
        self.index.forget(self.resource_kind, action.resource_name)
        return self._success(action, "Deleted successfully")


class GroupExecutor(BaseExecutor[GroupSpec]):
    """Executor for groups; members are handled as their own actions."""

    resource_kind = ResourceKind.GROUP

    def create(self, action: Action) -> ExecutionResult:
        spec: GroupSpec = action.desired
        payload = {"name": spec.name, "description": spec.description}
        return self._create(
            action, "/groups", payload,
            lookup=lambda: self._find_by_name("/groups", spec.name),
        )

    def update(self, action: Action) -> ExecutionResult:
        spec: GroupSpec = action.desired
        self.client.patch(f"/groups/{spec.name}", json={"name": spec.name, "description": spec.description})
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        self.client.delete(f"/groups/{action.resource_name}")
        self.index.forget(self.resource_kind, action.resource_name)
        return self._success(action, "Deleted successfully")


class GroupMembershipExecutor(RelationshipExecutor[MemberRef]):
    """
    Executor for group memberships.

    The action name is ``group/member(type)``; the member itself travels as
    the action's spec.
    """

    resource_kind = ResourceKind.GROUP_MEMBERSHIP

    def _group_id(self, action: Action) -> str:
        group = action.resource_name.split("/", 1)[0]
        return self.resolve(ResourceKind.GROUP, group)

    def create(self, action: Action) -> ExecutionResult:
        member: MemberRef = action.desired
        group_id = self._group_id(action)
        member_id = self.resolve_principal(member.name, member.type)
        return self._create_relationship(
            action,
            f"/groups/{group_id}/members",
            {"member_id": member_id, "member_type": member.type},
        )

    def delete(self, action: Action) -> ExecutionResult:
        member: MemberRef = action.actual
        group_id = self._group_id(action)
        member_id = member.member_id
        if not member_id:
            if not member.name:
                raise ValueError("member has neither ID nor name")
            member_id = self.resolve_principal(member.name, member.type)
        self.client.delete(
            f"/groups/{group_id}/members",
            params={"member_id": member_id, "member_type": member.type},
        )
        return self._success(action, "Deleted successfully")


class GrantExecutor(RelationshipExecutor[GrantSpec]):
    """Executor for privilege grants; grants are never modified in place."""

    resource_kind = ResourceKind.PRIVILEGE_GRANT

    def _body(self, grant: GrantSpec) -> Dict[str, Any]:
        securable_kind = SECURABLE_KINDS.get(grant.securable_type)
        if securable_kind is None:
            raise ResolutionError(grant.securable_type, grant.securable)
        return {
            "principal_id": self.resolve_principal(grant.principal, grant.principal_type),
            "principal_type": grant.principal_type,
            "securable_id": self.resolve(securable_kind, grant.securable),
            "securable_type": grant.securable_type,
            "privilege": grant.privilege,
        }

    def create(self, action: Action) -> ExecutionResult:
        return self._create_relationship(action, "/grants", self._body(action.desired))

    def delete(self, action: Action) -> ExecutionResult:
        self.client.delete("/grants", json=self._body(action.actual))
        return self._success(action, "Revoked successfully")


class APIKeyExecutor(BaseExecutor[APIKeySpec]):
    """
    Executor for API keys.

    Keys cannot be modified; an update revokes the key and issues a new one.
    The new secret is returned by the server exactly once and is never logged.
    """

    resource_kind = ResourceKind.API_KEY

    def create(self, action: Action) -> ExecutionResult:
        spec: APIKeySpec = action.desired
        payload: Dict[str, Any] = {
            "name": spec.name,
            "principal_id": self.resolve(ResourceKind.PRINCIPAL, spec.principal),
        }
        if spec.expires_at:
            payload["expires_at"] = spec.expires_at
        result = self._create(
            action, "/api-keys", payload,
            lookup=lambda: self._find_by_name("/api-keys", spec.name),
        )
        if not result.adopted:
            logger.warning(
                f"API key {spec.name!r} issued for {spec.principal!r}; "
                f"retrieve the secret from the server response, it is not shown again"
            )
        return result

    def update(self, action: Action) -> ExecutionResult:
        self._revoke(action.resource_name)
        result = self.create(action)
        result.message = "Replaced successfully"
        return result

    def delete(self, action: Action) -> ExecutionResult:
        self._revoke(action.resource_name)
        return self._success(action, "Revoked successfully")

    def _revoke(self, name: str) -> None:
        row = self._find_by_name("/api-keys", name)
        if row is None or not row.get("id"):
            raise ResolutionError(self.get_resource_type(), name)
        self.client.delete(f"/api-keys/{row['id']}")
        self.index.forget(self.resource_kind, name)
