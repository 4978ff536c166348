"""
Tags and tag assignments.
"""

from __future__ import annotations

from typing import Optional

from .base import BaseSpecModel


class TagSpec(BaseSpecModel):
    """A tag definition; the value is optional."""

    key: str = ""
    value: Optional[str] = None

    @property
    def path(self) -> str:
        if self.value:
            return f"{self.key}:{self.value}"
        return self.key


class TagAssignmentSpec(BaseSpecModel):
    """
    Attaches a tag to a schema, table or column.

    ``tag`` is the tag's identity path (``key`` or ``key:value``). For column
    assignments ``securable`` is the table path and ``column_name`` the column.
    """

    tag: str = ""
    securable_type: str = ""
    securable: str = ""
    column_name: str = ""

    @property
    def path(self) -> str:
        target = f"{self.securable_type}.{self.securable}"
        if self.column_name:
            target = f"{target}.{self.column_name}"
        return f"{self.tag} on {target}"
