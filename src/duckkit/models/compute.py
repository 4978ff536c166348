"""
Compute endpoints and their assignment to principals.
"""

from __future__ import annotations

from typing import Optional

from .base import BaseSpecModel


class ComputeEndpointSpec(BaseSpecModel):
    """A LOCAL or REMOTE execution endpoint."""

    name: str = ""
    url: str = ""
    type: str = ""
    size: str = ""
    max_memory_gb: Optional[int] = None
    auth_token_from_env: str = ""

    @property
    def path(self) -> str:
        return self.name


class ComputeAssignmentSpec(BaseSpecModel):
    endpoint: str = ""
    principal: str = ""
    principal_type: str = ""
    is_default: bool = False
    fallback_local: bool = False

    @property
    def path(self) -> str:
        return f"{self.endpoint}->{self.principal_type}:{self.principal}"
