"""
Fine-grained access policies: row filters and column masks.

Filters and masks belong to a table and are bound to individual users or
groups. Bindings are first-class resources in the plan, one layer above the
policy they bind.
"""

from __future__ import annotations

from typing import List

from pydantic import Field

from .base import BaseSpecModel


class FilterBindingRef(BaseSpecModel):
    principal: str = ""
    principal_type: str = ""

    @property
    def key(self) -> str:
        return f"{self.principal_type}:{self.principal}"


class RowFilterSpec(BaseSpecModel):
    name: str = ""
    filter_sql: str = ""
    description: str = ""
    bindings: List[FilterBindingRef] = Field(default_factory=list)


class RowFilterResource(BaseSpecModel):
    """All row filters declared for one table."""

    catalog_name: str
    schema_name: str
    table_name: str
    filters: List[RowFilterSpec] = Field(default_factory=list)

    @property
    def table_path(self) -> str:
        return f"{self.catalog_name}.{self.schema_name}.{self.table_name}"


class MaskBindingRef(BaseSpecModel):
    principal: str = ""
    principal_type: str = ""
    see_original: bool = False

    @property
    def key(self) -> str:
        return f"{self.principal_type}:{self.principal}"


class ColumnMaskSpec(BaseSpecModel):
    name: str = ""
    column_name: str = ""
    mask_expression: str = ""
    description: str = ""
    bindings: List[MaskBindingRef] = Field(default_factory=list)


class ColumnMaskResource(BaseSpecModel):
    """All column masks declared for one table."""

    catalog_name: str
    schema_name: str
    table_name: str
    masks: List[ColumnMaskSpec] = Field(default_factory=list)

    @property
    def table_path(self) -> str:
        return f"{self.catalog_name}.{self.schema_name}.{self.table_name}"


def policy_path(table_path: str, name: str) -> str:
    """Identity path of a filter or mask: ``catalog.schema.table/name``."""
    return f"{table_path}/{name}"


def binding_path(policy: str, principal_type: str, principal: str) -> str:
    return f"{policy}->{principal_type}:{principal}"


def split_policy_path(path: str):
    """Split ``catalog.schema.table/name`` into (table_path, name)."""
    table_path, _, name = path.rpartition("/")
    return table_path, name


def split_binding_path(path: str):
    """Split a binding path into (policy_path, principal_type, principal)."""
    policy, _, target = path.partition("->")
    principal_type, _, principal = target.partition(":")
    return policy, principal_type, principal
