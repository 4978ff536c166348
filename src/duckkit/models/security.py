"""
Identity and access resources: principals, groups, grants and API keys.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from .base import BaseSpecModel


class PrincipalSpec(BaseSpecModel):
    """A user or service principal."""

    name: str = ""
    type: str = ""
    is_admin: bool = False

    @property
    def path(self) -> str:
        return self.name


class MemberRef(BaseSpecModel):
    """
    A member of a group.

    member_id is only populated from server state; it is never written to or
    compared against configuration.
    """

    name: str = ""
    type: str = ""
    member_id: str = Field(default="", exclude=True)

    @property
    def key(self) -> str:
        return f"{self.name}({self.type})"


class GroupSpec(BaseSpecModel):
    """A named group of users and nested groups."""

    name: str = ""
    description: str = ""
    members: List[MemberRef] = Field(default_factory=list)

    @property
    def path(self) -> str:
        return self.name


def membership_path(group: str, member: MemberRef) -> str:
    return f"{group}/{member.key}"


class GrantSpec(BaseSpecModel):
    """
    A single privilege on a securable for a user or group.

    The identity includes the privilege so that one principal can hold
    several privileges on the same securable.
    """

    principal: str = ""
    principal_type: str = ""
    securable_type: str = ""
    securable: str = ""
    privilege: str = ""

    @property
    def path(self) -> str:
        return (
            f"{self.principal_type}:{self.principal} {self.privilege} "
            f"on {self.securable_type}.{self.securable}"
        )


class APIKeySpec(BaseSpecModel):
    """A named API key issued to a principal."""

    name: str = ""
    principal: str = ""
    expires_at: Optional[str] = None

    @property
    def path(self) -> str:
        return self.name
