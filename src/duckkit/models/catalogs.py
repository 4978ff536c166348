"""
Catalog hierarchy: catalog registrations, schemas, tables, views and volumes.

Each resource wraps a spec with the path segments that identify it. The
path segments come from the directory layout, never from the document's `spec` block.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from .base import BaseSpecModel, or_server_default
from .enums import TableType, VolumeType

# =============================================================================
# CATALOG
# =============================================================================

class CatalogSpec(BaseSpecModel):
    metastore_type: str = ""
    dsn: str = ""
    data_path: str = ""
    is_default: bool = False
    comment: str = ""


class CatalogResource(BaseSpecModel):
    """A catalog registered with the platform."""

    catalog_name: str
    deletion_protection: bool = False
    spec: CatalogSpec = Field(default_factory=CatalogSpec)

    @property
    def path(self) -> str:
        return self.catalog_name


# =============================================================================
# SCHEMA
# =============================================================================

class SchemaSpec(BaseSpecModel):
    comment: str = ""
    owner: str = ""
    location_name: str = ""
    properties: Dict[str, str] = Field(default_factory=dict)


class SchemaResource(BaseSpecModel):
    catalog_name: str
    schema_name: str
    deletion_protection: bool = False
    spec: SchemaSpec = Field(default_factory=SchemaSpec)

    @property
    def path(self) -> str:
        return f"{self.catalog_name}.{self.schema_name}"


# =============================================================================
# TABLE / VIEW / VOLUME
# =============================================================================

class ColumnDef(BaseSpecModel):
    name: str = ""
    type: str = ""
    comment: str = ""


class TableSpec(BaseSpecModel):
    """
    Table definition.

    EXTERNAL tables point at files through ``source_path`` and
    ``file_format``, optionally scoped to a named external location.
    """

    table_type: str = "MANAGED"
    comment: str = ""
    owner: str = ""
    columns: List[ColumnDef] = Field(default_factory=list)
    properties: Dict[str, str] = Field(default_factory=dict)
    source_path: str = ""
    file_format: str = ""
    location_name: str = ""

    @field_validator("table_type", mode="before")
    @classmethod
    def _default_table_type(cls, v: Any) -> Any:
        return or_server_default(v, TableType.MANAGED.value)

    def column(self, name: str) -> Optional[ColumnDef]:
        for col in self.columns:
            if col.name == name:
                return col
        return None


class TableResource(BaseSpecModel):
    catalog_name: str
    schema_name: str
    table_name: str
    deletion_protection: bool = False
    spec: TableSpec = Field(default_factory=TableSpec)

    @property
    def schema_path(self) -> str:
        return f"{self.catalog_name}.{self.schema_name}"

    @property
    def path(self) -> str:
        return f"{self.catalog_name}.{self.schema_name}.{self.table_name}"


class ViewSpec(BaseSpecModel):
    view_definition: str = ""
    comment: str = ""
    owner: str = ""
    properties: Dict[str, str] = Field(default_factory=dict)


class ViewResource(BaseSpecModel):
    catalog_name: str
    schema_name: str
    view_name: str
    spec: ViewSpec = Field(default_factory=ViewSpec)

    @property
    def schema_path(self) -> str:
        return f"{self.catalog_name}.{self.schema_name}"

    @property
    def path(self) -> str:
        return f"{self.catalog_name}.{self.schema_name}.{self.view_name}"


class VolumeSpec(BaseSpecModel):
    volume_type: str = "MANAGED"
    storage_location: str = ""
    comment: str = ""
    owner: str = ""

    @field_validator("volume_type", mode="before")
    @classmethod
    def _default_volume_type(cls, v: Any) -> Any:
        return or_server_default(v, VolumeType.MANAGED.value)


class VolumeResource(BaseSpecModel):
    catalog_name: str
    schema_name: str
    volume_name: str
    spec: VolumeSpec = Field(default_factory=VolumeSpec)

    @property
    def schema_path(self) -> str:
        return f"{self.catalog_name}.{self.schema_name}"

    @property
    def path(self) -> str:
        return f"{self.catalog_name}.{self.schema_name}.{self.volume_name}"
